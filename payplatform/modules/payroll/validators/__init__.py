from .payroll_validators import (
    check_salary_rules,
    validate_payroll_input,
    validate_payroll_update,
    validate_adjustment,
)

__all__ = [
    "check_salary_rules",
    "validate_payroll_input",
    "validate_payroll_update",
    "validate_adjustment",
]
