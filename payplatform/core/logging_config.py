import logging
from typing import Optional

from .config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format=settings.log_format)
    logging.getLogger(__name__).debug(
        f"Logging configured at {logging.getLevelName(level)} ({settings.environment})"
    )
