import logging
from decimal import Decimal
from typing import Iterable, Sequence

from ....core.error_schemas import ErrorCodes
from ....core.exceptions import InvalidInputError
from ....core.money import quantize_money, sum_money
from ..enums.payroll_enums import AdjustmentType
from ..schemas.payroll_schemas import (
    AttendanceSummary,
    DeductionSet,
    PayrollAdjustment,
    PayrollRecord,
    SalaryComponents,
    SalaryComputationResult,
)

logger = logging.getLogger(__name__)

MIN_DAYS_IN_PERIOD = 28
MAX_DAYS_IN_PERIOD = 31


class SalaryComputationEngine:
    """
    Derives gross and net salary from already-decided component amounts.

    The engine does not pro-rate for attendance; callers that pro-rate adjust
    the component amounts before invoking it. Employer PF/ESI contributions
    are reported but never reduce the employee's net salary.
    """

    def __init__(self, decimal_places: int = 2):
        self.decimal_places = decimal_places

    def compute(
        self,
        components: SalaryComponents,
        attendance: AttendanceSummary,
        deductions: DeductionSet,
        adjustments: Sequence[PayrollAdjustment] = (),
    ) -> SalaryComputationResult:
        """
        Compute gross salary, total deductions and net salary.

        Args:
            components: Earning components for the period
            attendance: Attendance counts for the period
            deductions: Statutory and other deductions
            adjustments: Ordered ad-hoc earnings/deductions

        Returns:
            SalaryComputationResult with the ordered adjustments carried through

        Raises:
            InvalidInputError: on negative amounts, inconsistent attendance,
                or a negative net salary
        """
        self._check_components(components)
        self._check_attendance(attendance)
        self._check_deductions(deductions)
        self._check_adjustments(adjustments)

        gross_salary = sum_money(components.amounts())
        total_deductions = deductions.employee_total

        for adjustment in adjustments:
            if adjustment.adjustment_type == AdjustmentType.EARNING:
                gross_salary += adjustment.amount
            else:
                total_deductions += adjustment.amount

        net_salary = gross_salary - total_deductions
        if net_salary < 0:
            raise InvalidInputError(
                f"Deductions ({total_deductions}) exceed gross salary ({gross_salary})",
                field="deductions",
                code=ErrorCodes.NEGATIVE_NET_SALARY,
            )

        logger.debug(
            f"Computed salary: gross={gross_salary} deductions={total_deductions} "
            f"net={net_salary} adjustments={len(adjustments)}"
        )

        return SalaryComputationResult(
            gross_salary=quantize_money(gross_salary, self.decimal_places),
            total_deductions=quantize_money(total_deductions, self.decimal_places),
            net_salary=quantize_money(net_salary, self.decimal_places),
            employer_contributions=quantize_money(
                deductions.employer_contributions, self.decimal_places
            ),
            adjustments=tuple(adjustments),
        )

    def compute_record(self, record: PayrollRecord) -> SalaryComputationResult:
        """Recompute a stored payroll record including its adjustments."""
        return self.compute(
            record.components,
            record.attendance,
            record.deductions,
            record.adjustments,
        )

    def _check_components(self, components: SalaryComponents) -> None:
        if components is None:
            raise InvalidInputError("Salary components are required", field="components")
        self._check_non_negative("components", components, SalaryComponents)

    def _check_deductions(self, deductions: DeductionSet) -> None:
        if deductions is None:
            raise InvalidInputError("Deductions are required", field="deductions")
        self._check_non_negative("deductions", deductions, DeductionSet)

    def _check_attendance(self, attendance: AttendanceSummary) -> None:
        if attendance is None:
            raise InvalidInputError("Attendance summary is required", field="attendance")

        for name in ("days_worked", "leave_days", "absent_days", "overtime_hours"):
            if getattr(attendance, name) < 0:
                raise InvalidInputError(
                    f"{name} must not be negative",
                    field=f"attendance.{name}",
                    code=ErrorCodes.INVALID_ATTENDANCE,
                )
        if not MIN_DAYS_IN_PERIOD <= attendance.days_in_period <= MAX_DAYS_IN_PERIOD:
            raise InvalidInputError(
                f"days_in_period must be between {MIN_DAYS_IN_PERIOD} and {MAX_DAYS_IN_PERIOD}",
                field="attendance.days_in_period",
                code=ErrorCodes.INVALID_ATTENDANCE,
            )
        if attendance.days_worked > attendance.days_in_period:
            raise InvalidInputError(
                "days_worked cannot exceed days_in_period",
                field="attendance.days_worked",
                code=ErrorCodes.INVALID_ATTENDANCE,
            )

    def _check_adjustments(self, adjustments: Iterable[PayrollAdjustment]) -> None:
        for index, adjustment in enumerate(adjustments):
            if adjustment.amount is None or adjustment.amount <= 0:
                raise InvalidInputError(
                    "Adjustment amount must be positive",
                    field=f"adjustments.{index}.amount",
                    code=ErrorCodes.INVALID_AMOUNT,
                )

    @staticmethod
    def _check_non_negative(prefix: str, model, model_cls) -> None:
        for name in model_cls.model_fields:
            value = getattr(model, name, None)
            if value is None or Decimal(value) < 0:
                raise InvalidInputError(
                    f"{name} must be a non-negative amount",
                    field=f"{prefix}.{name}",
                    code=ErrorCodes.INVALID_AMOUNT,
                )
