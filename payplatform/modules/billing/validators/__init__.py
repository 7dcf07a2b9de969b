from .billing_validators import (
    check_counts,
    validate_plan_input,
    validate_plan_update,
    validate_addon_input,
    validate_addon_update,
)

__all__ = [
    "check_counts",
    "validate_plan_input",
    "validate_plan_update",
    "validate_addon_input",
    "validate_addon_update",
]
