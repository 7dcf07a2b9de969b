from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional, Tuple
from decimal import Decimal
from datetime import datetime, date

from ....core.money import Money, ZERO, sum_money
from ..enums.payroll_enums import AdjustmentType, PayrollStatus

MIN_PAY_YEAR = 2020
MAX_PAY_YEAR = 2100


class SalaryComponents(BaseModel):
    """Earning components for one employee and pay period."""

    basic_salary: Money = Field(..., ge=0, description="Basic salary")
    hra: Money = Field(default=ZERO, ge=0, description="House rent allowance")
    special_allowance: Money = Field(default=ZERO, ge=0)
    other_allowances: Money = Field(default=ZERO, ge=0)

    def amounts(self) -> Tuple[Decimal, ...]:
        return (self.basic_salary, self.hra, self.special_allowance, self.other_allowances)


class AttendanceSummary(BaseModel):
    """Attendance counts for the pay period."""

    days_worked: int = Field(..., ge=0)
    days_in_period: int = Field(..., ge=28, le=31)
    leave_days: int = Field(default=0, ge=0)
    absent_days: int = Field(default=0, ge=0)
    overtime_hours: Decimal = Field(default=Decimal('0'), ge=0)


class DeductionSet(BaseModel):
    """Employee and employer side deductions for the pay period."""

    pf_employee: Money = Field(default=ZERO, ge=0, description="Provident fund, employee share")
    pf_employer: Money = Field(default=ZERO, ge=0, description="Provident fund, employer share")
    esi_employee: Money = Field(default=ZERO, ge=0, description="State insurance, employee share")
    esi_employer: Money = Field(default=ZERO, ge=0, description="State insurance, employer share")
    tds: Money = Field(default=ZERO, ge=0, description="Tax deducted at source")
    professional_tax: Money = Field(default=ZERO, ge=0)
    other_deductions: Money = Field(default=ZERO, ge=0)

    @property
    def employee_amounts(self) -> Tuple[Decimal, ...]:
        return (
            self.pf_employee, self.esi_employee, self.tds,
            self.professional_tax, self.other_deductions
        )

    @property
    def employer_amounts(self) -> Tuple[Decimal, ...]:
        return (self.pf_employer, self.esi_employer)

    @property
    def employee_total(self) -> Decimal:
        return sum_money(self.employee_amounts)

    @property
    def employer_contributions(self) -> Decimal:
        return sum_money(self.employer_amounts)


class PayrollAdjustment(BaseModel):
    """Ad-hoc earning or deduction appended after the initial computation."""

    adjustment_type: AdjustmentType
    name: str = Field(..., min_length=1, max_length=100)
    amount: Money = Field(..., gt=0)
    reason: Optional[str] = Field(None, max_length=500)


class SalaryComputationResult(BaseModel):
    """Derived totals for a payroll record."""

    model_config = ConfigDict(frozen=True)

    gross_salary: Money
    total_deductions: Money
    net_salary: Money
    employer_contributions: Money = ZERO
    adjustments: Tuple[PayrollAdjustment, ...] = ()


class CreatePayrollRequest(BaseModel):
    """Input for creating a payroll record by hand."""

    employee_id: str = Field(..., min_length=1)
    pay_period_month: int = Field(..., ge=1, le=12)
    pay_period_year: int = Field(..., ge=MIN_PAY_YEAR, le=MAX_PAY_YEAR)
    pay_date: Optional[date] = None
    components: SalaryComponents
    attendance: AttendanceSummary
    deductions: DeductionSet = Field(default_factory=DeductionSet)
    is_bonus: bool = Field(
        default=False, description="Off-cycle bonus run; exempt from the one-per-period rule"
    )
    notes: Optional[str] = None


class UpdatePayrollRequest(BaseModel):
    """Partial update of a payroll record that has not been paid."""

    pay_date: Optional[date] = None
    components: Optional[SalaryComponents] = None
    attendance: Optional[AttendanceSummary] = None
    deductions: Optional[DeductionSet] = None
    notes: Optional[str] = None


class PayrollRecord(BaseModel):
    """Payroll for one employee, one company and one period."""

    id: str
    company_id: str
    employee_id: str
    pay_period_month: int = Field(..., ge=1, le=12)
    pay_period_year: int
    pay_date: Optional[date] = None

    components: SalaryComponents
    attendance: AttendanceSummary
    deductions: DeductionSet
    adjustments: List[PayrollAdjustment] = Field(default_factory=list)

    gross_salary: Money = ZERO
    total_deductions: Money = ZERO
    net_salary: Money = ZERO
    employer_contributions: Money = ZERO

    status: PayrollStatus = PayrollStatus.DRAFT
    is_bonus: bool = False
    earnings_breakdown: Dict[str, Money] = Field(default_factory=dict)
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def period_key(self) -> Tuple[str, int, int]:
        return (self.employee_id, self.pay_period_month, self.pay_period_year)

    def apply_result(self, result: SalaryComputationResult) -> None:
        self.gross_salary = result.gross_salary
        self.total_deductions = result.total_deductions
        self.net_salary = result.net_salary
        self.employer_contributions = result.employer_contributions
        self.updated_at = datetime.utcnow()
