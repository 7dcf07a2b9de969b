from pydantic import BaseModel, ConfigDict, Field
from typing import List

from ....core.money import Money, ZERO


class TierRevenue(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: str
    amount: Money


class InvoicesSummary(BaseModel):
    total_paid: Money = ZERO
    paid_count: int = Field(default=0, ge=0)
    total_pending: Money = ZERO
    pending_count: int = Field(default=0, ge=0)


class RevenueSummary(BaseModel):
    """Platform-wide recurring revenue snapshot."""

    mrr: Money = Field(..., description="Monthly recurring revenue (base + add-ons)")
    arr: Money = Field(..., description="Annual run rate, MRR x 12")
    base_mrr: Money
    addon_mrr: Money
    revenue_by_tier: List[TierRevenue] = Field(default_factory=list)
    total_companies_with_billing: int = Field(default=0, ge=0)
    total_active_addons: int = Field(default=0, ge=0)
    invoices_summary: InvoicesSummary = Field(default_factory=InvoicesSummary)
