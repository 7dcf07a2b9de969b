# payplatform/modules/payroll/validators/payroll_validators.py

"""
Validation run before the salary engine is invoked.

Field ranges come from the pydantic schemas; the cross-field business rules
(attendance consistency, deductions not exceeding gross) are checked here.
"""

from typing import Any, List, Optional, Sequence

from ....core.error_schemas import ErrorCodes, ErrorDetail
from ....core.money import sum_money
from ....core.validation import ValidationResult, validate_model
from ..enums.payroll_enums import AdjustmentType
from ..schemas.payroll_schemas import (
    AttendanceSummary,
    CreatePayrollRequest,
    DeductionSet,
    PayrollAdjustment,
    SalaryComponents,
    UpdatePayrollRequest,
)


def check_salary_rules(
    components: SalaryComponents,
    attendance: AttendanceSummary,
    deductions: DeductionSet,
    prefix: str = "",
    adjustments: Sequence[PayrollAdjustment] = (),
) -> List[ErrorDetail]:
    errors = []

    if attendance.days_worked > attendance.days_in_period:
        errors.append(ErrorDetail(
            field=f"{prefix}attendance.days_worked",
            message="days_worked cannot exceed days_in_period",
            code=ErrorCodes.INVALID_ATTENDANCE,
        ))

    gross = sum_money(components.amounts()) + sum_money(
        a.amount for a in adjustments if a.adjustment_type == AdjustmentType.EARNING
    )
    total_deductions = deductions.employee_total + sum_money(
        a.amount for a in adjustments if a.adjustment_type == AdjustmentType.DEDUCTION
    )
    if total_deductions > gross:
        errors.append(ErrorDetail(
            field=f"{prefix}deductions",
            message="Total deductions cannot exceed gross salary",
            code=ErrorCodes.NEGATIVE_NET_SALARY,
        ))

    return errors


def validate_payroll_input(data: Any) -> ValidationResult[CreatePayrollRequest]:
    result = validate_model(CreatePayrollRequest, data)
    if not result.is_valid:
        return result

    request = result.value
    result.errors.extend(
        check_salary_rules(request.components, request.attendance, request.deductions)
    )
    return result


def validate_payroll_update(
    data: Any,
    current_components: Optional[SalaryComponents] = None,
    current_attendance: Optional[AttendanceSummary] = None,
    current_deductions: Optional[DeductionSet] = None,
    current_adjustments: Sequence[PayrollAdjustment] = (),
) -> ValidationResult[UpdatePayrollRequest]:
    """Validate a partial update against the record it will be merged into."""
    result = validate_model(UpdatePayrollRequest, data)
    if not result.is_valid:
        return result

    update = result.value
    components = update.components or current_components
    attendance = update.attendance or current_attendance
    deductions = update.deductions or current_deductions
    if components is not None and attendance is not None and deductions is not None:
        result.errors.extend(check_salary_rules(
            components, attendance, deductions, adjustments=current_adjustments
        ))
    return result


def validate_adjustment(data: Any) -> ValidationResult[PayrollAdjustment]:
    return validate_model(PayrollAdjustment, data)
