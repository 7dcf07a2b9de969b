import calendar
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ....core.config import Settings, get_settings
from ....core.error_schemas import ErrorCodes
from ....core.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
)
from ....core.money import sum_money
from ..enums.payroll_enums import PayFrequency, PayrollStatus
from ..repositories.payroll_repository import PayrollRepository
from ..schemas.payroll_schemas import (
    MAX_PAY_YEAR,
    MIN_PAY_YEAR,
    AttendanceSummary,
    DeductionSet,
    PayrollRecord,
)
from ..schemas.reconciliation_schemas import PeriodRef, ReconciliationReport
from ..schemas.structure_schemas import SalaryStructureComponent
from ..validators.payroll_validators import (
    validate_adjustment,
    validate_payroll_input,
    validate_payroll_update,
)
from .payroll_reconciliation import previous_period, reconcile_periods
from .salary_computation_engine import SalaryComputationEngine
from .salary_structure import (
    compute_from_structure,
    periods_per_year,
    prorate_components,
    to_salary_components,
)
from .statutory_deduction_engine import StatutoryDeductionEngine

logger = logging.getLogger(__name__)


class PayrollService:
    """
    Payroll lifecycle: creation, recomputation, adjustments and status changes.

    A record moves DRAFT -> PROCESSED -> PAID and may be put on HOLD from
    DRAFT or PROCESSED. Amounts are recomputed on every change; when the
    engine rejects the inputs nothing is written and the status is unchanged.
    """

    TRANSITIONS = {
        PayrollStatus.DRAFT: {PayrollStatus.PROCESSED, PayrollStatus.HOLD},
        PayrollStatus.PROCESSED: {PayrollStatus.PAID, PayrollStatus.HOLD},
        PayrollStatus.HOLD: {PayrollStatus.DRAFT},
        PayrollStatus.PAID: set(),
    }
    EDITABLE_STATUSES = {PayrollStatus.DRAFT, PayrollStatus.PROCESSED}

    def __init__(
        self,
        repository: PayrollRepository,
        engine: Optional[SalaryComputationEngine] = None,
        deduction_engine: Optional[StatutoryDeductionEngine] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository
        self.engine = engine or SalaryComputationEngine(self.settings.money_decimal_places)
        self.deduction_engine = deduction_engine

    # Lookup

    def get_payroll(self, payroll_id: str, company_id: str) -> PayrollRecord:
        record = self.repository.get(payroll_id)
        if record is None or record.company_id != company_id:
            raise NotFoundError("Payroll", payroll_id)
        return record

    # Creation

    def create_payroll(self, company_id: str, data: Any) -> PayrollRecord:
        """Create a DRAFT payroll from explicitly supplied amounts."""
        request = validate_payroll_input(data).unwrap("Invalid payroll input")
        logger.info(f"Creating payroll for employee {request.employee_id}")

        if not request.is_bonus:
            self._ensure_unique(
                request.employee_id, request.pay_period_month, request.pay_period_year
            )

        record = PayrollRecord(
            id=self.repository.new_id(),
            company_id=company_id,
            employee_id=request.employee_id,
            pay_period_month=request.pay_period_month,
            pay_period_year=request.pay_period_year,
            pay_date=request.pay_date,
            components=request.components,
            attendance=request.attendance,
            deductions=request.deductions,
            is_bonus=request.is_bonus,
            notes=request.notes,
        )
        record.apply_result(self.engine.compute_record(record))
        self.repository.add(record)
        return record

    def create_from_structure(
        self,
        company_id: str,
        employee_id: str,
        month: int,
        year: int,
        structure: Sequence[SalaryStructureComponent],
        annual_ctc: Decimal,
        attendance: AttendanceSummary,
        region: Optional[str] = None,
        pay_date: Optional[date] = None,
        pay_frequency: Optional[PayFrequency] = None,
    ) -> PayrollRecord:
        """
        Create a DRAFT payroll from a salary structure.

        Components are pro-rated for attendance before statutory deductions
        are looked up; structure-level deductions land in other_deductions.
        """
        self._check_period(month, year)
        frequency = PayFrequency(pay_frequency or self.settings.default_pay_frequency)
        self._ensure_unique(employee_id, month, year)

        breakdown = compute_from_structure(structure, annual_ctc, periods_per_year(frequency))
        components = prorate_components(
            to_salary_components(breakdown), attendance, self.settings.money_decimal_places
        )
        structure_deductions = sum_money(breakdown.deductions.values())
        pay_date = pay_date or date(year, month, calendar.monthrange(year, month)[1])
        region = region or self.settings.default_statutory_region

        if self.deduction_engine is not None and region:
            deductions = self.deduction_engine.compute_deductions(
                region, pay_date, components, structure_deductions
            ).deductions
        else:
            deductions = DeductionSet(other_deductions=structure_deductions)

        record = PayrollRecord(
            id=self.repository.new_id(),
            company_id=company_id,
            employee_id=employee_id,
            pay_period_month=month,
            pay_period_year=year,
            pay_date=pay_date,
            components=components,
            attendance=attendance,
            deductions=deductions,
            earnings_breakdown=dict(breakdown.earnings),
        )
        record.apply_result(self.engine.compute_record(record))
        self.repository.add(record)
        logger.info(
            f"Created structure payroll {record.id} for employee {employee_id} ({month}/{year})"
        )
        return record

    # Mutation

    def update_payroll(self, payroll_id: str, company_id: str, data: Any) -> PayrollRecord:
        record = self.get_payroll(payroll_id, company_id)
        self._ensure_editable(record)

        update = validate_payroll_update(
            data, record.components, record.attendance, record.deductions, record.adjustments
        ).unwrap("Invalid payroll update")

        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        for field_name in changes:
            setattr(record, field_name, getattr(update, field_name))

        record.apply_result(self.engine.compute_record(record))
        self.repository.update(record)
        logger.info(f"Updated payroll {payroll_id}: {sorted(changes)}")
        return record

    def add_adjustment(self, payroll_id: str, company_id: str, data: Any) -> PayrollRecord:
        """Append an EARNING or DEDUCTION line and recompute totals."""
        adjustment = validate_adjustment(data).unwrap("Invalid payroll adjustment")
        record = self.get_payroll(payroll_id, company_id)
        self._ensure_editable(record)

        adjustments = list(record.adjustments) + [adjustment]
        result = self.engine.compute(
            record.components, record.attendance, record.deductions, adjustments
        )
        record.adjustments = adjustments
        record.apply_result(result)
        self.repository.update(record)
        logger.info(
            f"Added {adjustment.adjustment_type.value} adjustment '{adjustment.name}' "
            f"({adjustment.amount}) to payroll {payroll_id}"
        )
        return record

    def delete_payroll(self, payroll_id: str, company_id: str) -> None:
        record = self.get_payroll(payroll_id, company_id)
        if record.status == PayrollStatus.PAID:
            raise ConflictError("Cannot delete paid payroll", code=ErrorCodes.INVALID_STATE_TRANSITION)
        self.repository.delete(payroll_id)
        logger.info(f"Deleted payroll {payroll_id}")

    # Status transitions

    def process_payroll(self, payroll_id: str, company_id: str, notes: Optional[str] = None) -> PayrollRecord:
        record = self.get_payroll(payroll_id, company_id)
        self._check_transition(record, PayrollStatus.PROCESSED)

        # Raises before any write so the record stays DRAFT on failure.
        result = self.engine.compute_record(record)

        record.apply_result(result)
        record.status = PayrollStatus.PROCESSED
        if notes:
            record.notes = notes
        self.repository.update(record)
        logger.info(f"Processed payroll {payroll_id}")
        return record

    def mark_paid(
        self,
        payroll_id: str,
        company_id: str,
        paid_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> PayrollRecord:
        record = self.get_payroll(payroll_id, company_id)
        self._check_transition(record, PayrollStatus.PAID)

        record.status = PayrollStatus.PAID
        record.paid_at = paid_at or datetime.utcnow()
        record.updated_at = datetime.utcnow()
        if notes:
            record.notes = notes
        self.repository.update(record)
        logger.info(f"Marked payroll {payroll_id} as paid")
        return record

    def hold_payroll(self, payroll_id: str, company_id: str, reason: Optional[str] = None) -> PayrollRecord:
        record = self.get_payroll(payroll_id, company_id)
        self._check_transition(record, PayrollStatus.HOLD)

        record.status = PayrollStatus.HOLD
        record.updated_at = datetime.utcnow()
        if reason:
            record.notes = reason
        self.repository.update(record)
        logger.info(f"Payroll {payroll_id} put on hold")
        return record

    def release_hold(self, payroll_id: str, company_id: str) -> PayrollRecord:
        record = self.get_payroll(payroll_id, company_id)
        self._check_transition(record, PayrollStatus.DRAFT)

        record.status = PayrollStatus.DRAFT
        record.updated_at = datetime.utcnow()
        self.repository.update(record)
        logger.info(f"Payroll {payroll_id} released from hold")
        return record

    # Reporting

    def reconcile(self, company_id: str, month: int, year: int) -> ReconciliationReport:
        prev_month, prev_year = previous_period(month, year)
        return reconcile_periods(
            self.repository.list_by_period(company_id, month, year),
            self.repository.list_by_period(company_id, prev_month, prev_year),
            PeriodRef(month=month, year=year),
            PeriodRef(month=prev_month, year=prev_year),
            Decimal(str(self.settings.reconciliation_salary_change_percent)),
            Decimal(str(self.settings.reconciliation_deduction_change_percent)),
        )

    # Helpers

    @staticmethod
    def _check_period(month: int, year: int) -> None:
        if not isinstance(month, int) or not 1 <= month <= 12:
            raise InvalidInputError(
                "Pay period month must be between 1 and 12",
                field="pay_period_month",
                code=ErrorCodes.INVALID_PERIOD,
            )
        if not isinstance(year, int) or not MIN_PAY_YEAR <= year <= MAX_PAY_YEAR:
            raise InvalidInputError(
                f"Pay period year must be between {MIN_PAY_YEAR} and {MAX_PAY_YEAR}",
                field="pay_period_year",
                code=ErrorCodes.INVALID_PERIOD,
            )

    def _ensure_unique(self, employee_id: str, month: int, year: int) -> None:
        if self.repository.find_by_period(employee_id, month, year) is not None:
            logger.warning(f"Duplicate payroll for employee {employee_id} in {month}/{year}")
            raise ConflictError(
                f"Payroll already exists for employee {employee_id} in {month}/{year}"
            )

    def _ensure_editable(self, record: PayrollRecord) -> None:
        if record.status not in self.EDITABLE_STATUSES:
            raise ConflictError(
                f"Payroll {record.id} is {record.status.value}; "
                "only DRAFT or PROCESSED payroll can be modified",
                code=ErrorCodes.INVALID_STATE_TRANSITION,
            )

    def _check_transition(self, record: PayrollRecord, target: PayrollStatus) -> None:
        if target not in self.TRANSITIONS[record.status]:
            logger.warning(
                f"Rejected payroll {record.id} transition {record.status.value} -> {target.value}"
            )
            raise InvalidStateTransitionError("payroll", record.status.value, target.value)
