from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from ....core.money import Money, ZERO
from ..enums.billing_enums import AddonStatus, BillingCycle, InvoiceStatus


class BillingPlan(BaseModel):
    """Subscription tier pricing."""

    id: str
    name: str
    tier: str = Field(..., description="Tier label used for revenue grouping")
    base_price: Money = Field(..., ge=0)
    yearly_base_price: Optional[Money] = Field(
        None, ge=0, description="Base price used on YEARLY billing cycles"
    )
    price_per_employee: Money = Field(default=ZERO, ge=0)
    price_per_user: Money = Field(default=ZERO, ge=0)
    included_employees: int = Field(default=0, ge=0)
    included_users: int = Field(default=0, ge=0)
    is_active: bool = True


class CreateBillingPlanRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    tier: str = Field(..., min_length=1, max_length=50)
    base_price: Money = Field(..., ge=0)
    yearly_base_price: Optional[Money] = Field(None, ge=0)
    price_per_employee: Money = Field(default=ZERO, ge=0)
    price_per_user: Money = Field(default=ZERO, ge=0)
    included_employees: int = Field(default=0, ge=0)
    included_users: int = Field(default=0, ge=0)


class UpdateBillingPlanRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    base_price: Optional[Money] = Field(None, ge=0)
    yearly_base_price: Optional[Money] = Field(None, ge=0)
    price_per_employee: Optional[Money] = Field(None, ge=0)
    price_per_user: Optional[Money] = Field(None, ge=0)
    included_employees: Optional[int] = Field(None, ge=0)
    included_users: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CompanyBilling(BaseModel):
    """A company's plan assignment and cached monthly total."""

    id: str
    company_id: str
    billing_plan_id: str
    billing_plan: Optional[BillingPlan] = Field(
        None, description="Plan snapshot assembled by the repository"
    )
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    current_employees: int = Field(default=0, ge=0)
    current_users: int = Field(default=0, ge=0)
    monthly_total: Money = ZERO
    next_billing_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CompanyBillingStatus(BaseModel):
    has_billing: bool
    billing: Optional[CompanyBilling] = None


class FeatureAddon(BaseModel):
    """Purchasable feature with a flat monthly price."""

    id: str
    feature: str
    name: str
    description: Optional[str] = None
    price: Money = Field(..., ge=0)
    yearly_price: Optional[Money] = Field(None, ge=0)
    is_active: bool = True


class CreateAddonRequest(BaseModel):
    feature: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: Money = Field(..., ge=0)
    yearly_price: Optional[Money] = Field(None, ge=0)


class UpdateAddonRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[Money] = Field(None, ge=0)
    yearly_price: Optional[Money] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CompanyAddon(BaseModel):
    """An add-on subscribed by one company."""

    id: str
    company_id: str
    feature_addon_id: str
    feature_addon: Optional[FeatureAddon] = Field(
        None, description="Add-on snapshot assembled by the repository"
    )
    status: AddonStatus = AddonStatus.ACTIVE
    activated_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: Optional[datetime] = None

    @property
    def monthly_price(self) -> Decimal:
        return self.feature_addon.price if self.feature_addon else ZERO

    @property
    def is_active(self) -> bool:
        return self.status == AddonStatus.ACTIVE


class InvoiceLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    quantity: int = Field(..., ge=0)
    unit_price: Money
    amount: Money


class InvoiceDraft(BaseModel):
    """Computed invoice amounts before numbering and persistence."""

    company_billing_id: str
    billing_cycle: BillingCycle
    period_start: datetime
    period_end: datetime
    base_amount: Money = ZERO
    employee_amount: Money = ZERO
    user_amount: Money = ZERO
    addon_amount: Money = ZERO
    total_amount: Money = ZERO
    employee_count: int = 0
    user_count: int = 0
    line_items: List[InvoiceLineItem] = Field(default_factory=list)
    status: InvoiceStatus = InvoiceStatus.PENDING


class BillingInvoice(InvoiceDraft):
    """Persisted invoice. Only status and paid_at change after creation."""

    id: str
    invoice_number: str
    due_date: datetime
    paid_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
