"""Revenue services module."""

from .revenue_rollup_engine import RevenueRollupEngine
from .revenue_service import RevenueService

__all__ = ["RevenueRollupEngine", "RevenueService"]
