from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from decimal import Decimal
from datetime import date

from ....core.money import Money
from ..enums.payroll_enums import DeductionBase, DeductionType
from .payroll_schemas import DeductionSet


class StatutoryRule(BaseModel):
    """One row of the externally maintained statutory rate table."""

    rule_name: str = Field(..., description="Name of the statutory rule")
    region: str = Field(..., description="Jurisdiction the rule applies in")
    deduction_type: DeductionType
    base: DeductionBase = DeductionBase.GROSS
    employee_rate_percent: Decimal = Field(default=Decimal('0'), ge=0, le=100)
    employer_rate_percent: Decimal = Field(default=Decimal('0'), ge=0, le=100)
    fixed_amount: Optional[Money] = Field(
        None, ge=0, description="Flat employee amount used instead of a rate"
    )
    min_base_amount: Optional[Money] = Field(
        None, ge=0, description="Rule does not apply below this base amount"
    )
    max_base_amount: Optional[Money] = Field(
        None, ge=0, description="Base amount is capped at this value"
    )
    effective_date: date
    expiry_date: Optional[date] = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_dates(self) -> "StatutoryRule":
        if self.expiry_date is not None and self.expiry_date <= self.effective_date:
            raise ValueError("expiry_date must be after effective_date")
        return self

    def applies_on(self, pay_date: date) -> bool:
        if not self.is_active or self.effective_date > pay_date:
            return False
        return self.expiry_date is None or self.expiry_date > pay_date


class StatutoryApplicationDetail(BaseModel):
    """Detailed information about a specific rule application."""

    rule_name: str
    deduction_type: DeductionType
    base_amount: Money = Field(..., ge=0, description="Amount subject to this rule")
    employee_amount: Money = Field(..., ge=0)
    employer_amount: Money = Field(..., ge=0)
    calculation_method: str


class StatutoryDeductionResult(BaseModel):
    region: str
    pay_date: date
    deductions: DeductionSet
    applications: List[StatutoryApplicationDetail] = Field(default_factory=list)
