from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal

from ....core.money import Money, ZERO
from ..enums.payroll_enums import AnomalyType


class PeriodRef(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int


class ReconciliationAnomaly(BaseModel):
    anomaly_type: AnomalyType
    employee_id: str
    detail: str
    previous_amount: Optional[Money] = None
    current_amount: Optional[Money] = None
    change_percent: Optional[Decimal] = None


class ReconciliationSummary(BaseModel):
    total_payroll_variance: Money = ZERO
    total_payroll_variance_percent: Decimal = Decimal('0')
    headcount_change: int = 0
    average_salary_change: Money = ZERO


class ReconciliationReport(BaseModel):
    current_period: PeriodRef
    previous_period: PeriodRef
    summary: ReconciliationSummary
    anomalies: List[ReconciliationAnomaly] = Field(default_factory=list)
