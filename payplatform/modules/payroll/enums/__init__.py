from .payroll_enums import (
    PayrollStatus,
    AdjustmentType,
    PayFrequency,
    DeductionType,
    DeductionBase,
    ComponentType,
    CalculationType,
    AnomalyType,
)

__all__ = [
    "PayrollStatus",
    "AdjustmentType",
    "PayFrequency",
    "DeductionType",
    "DeductionBase",
    "ComponentType",
    "CalculationType",
    "AnomalyType",
]
