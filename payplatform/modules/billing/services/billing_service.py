import calendar
import logging
from datetime import datetime, time, timedelta
from typing import Any, List, Optional, Tuple

from ....core.config import Settings, get_settings
from ....core.error_schemas import ErrorCodes
from ....core.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
)
from ..enums.billing_enums import AddonStatus, BillingCycle, InvoiceStatus
from ..repositories.billing_repository import BillingRepository
from ..schemas.billing_schemas import (
    BillingInvoice,
    BillingPlan,
    CompanyAddon,
    CompanyBilling,
    CompanyBillingStatus,
    FeatureAddon,
)
from ..validators.billing_validators import (
    validate_addon_input,
    validate_addon_update,
    validate_plan_input,
    validate_plan_update,
)
from .billing_aggregation_engine import BillingAggregationEngine, naive_utc

logger = logging.getLogger(__name__)


def month_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """First and last instant of the calendar month containing ``moment``."""
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    start = datetime(moment.year, moment.month, 1)
    end = datetime.combine(start.replace(day=last_day).date(), time.max)
    return start, end


def add_one_month(moment: datetime) -> datetime:
    year, month = (moment.year + 1, 1) if moment.month == 12 else (moment.year, moment.month + 1)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class BillingService:
    """
    Plan catalogue, company subscriptions, add-ons and invoices.

    Pricing is delegated to ``BillingAggregationEngine``; this class owns
    lookups, uniqueness rules and invoice status transitions.

    Datetimes are stored as naive UTC. Aware arguments are converted on the
    way in.
    """

    INVOICE_TRANSITIONS = {
        InvoiceStatus.PENDING: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED},
        InvoiceStatus.OVERDUE: {InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
        InvoiceStatus.PAID: set(),
        InvoiceStatus.CANCELLED: set(),
    }

    def __init__(
        self,
        repository: BillingRepository,
        engine: Optional[BillingAggregationEngine] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository
        self.engine = engine or BillingAggregationEngine(self.settings.money_decimal_places)

    # Plans

    def list_plans(self, active_only: bool = True) -> List[BillingPlan]:
        return self.repository.list_plans(active_only)

    def get_plan(self, plan_id: str) -> BillingPlan:
        plan = self.repository.get_plan(plan_id)
        if plan is None:
            raise NotFoundError("BillingPlan", plan_id)
        return plan

    def create_plan(self, data: Any) -> BillingPlan:
        request = validate_plan_input(data).unwrap("Invalid billing plan")
        plan = BillingPlan(id=self.repository.new_id(), **request.model_dump())
        self.repository.save_plan(plan)
        logger.info(f"Created billing plan {plan.name} ({plan.tier})")
        return plan

    def update_plan(self, plan_id: str, data: Any) -> BillingPlan:
        """
        Update plan pricing. Existing invoices keep the amounts they were
        issued with; cached company totals pick up the change on their next
        refresh.
        """
        plan = self.get_plan(plan_id)
        update = validate_plan_update(data).unwrap("Invalid billing plan update")

        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        updated = plan.model_copy(update=changes)
        self.repository.save_plan(updated)
        logger.info(f"Updated billing plan {plan_id}: {sorted(changes)}")
        return updated

    # Company billing

    def get_company_billing(self, company_id: str) -> CompanyBillingStatus:
        billing = self.repository.get_company_billing(company_id)
        return CompanyBillingStatus(has_billing=billing is not None, billing=billing)

    def assign_billing_plan(
        self,
        company_id: str,
        plan_id: str,
        billing_cycle: Optional[BillingCycle] = None,
        now: Optional[datetime] = None,
    ) -> CompanyBilling:
        """Subscribe a company to a plan, replacing any existing assignment."""
        plan = self._get_active_plan(plan_id)
        cycle = BillingCycle(billing_cycle or self.settings.default_billing_cycle)
        now = naive_utc(now) or datetime.utcnow()

        billing = self.repository.get_company_billing(company_id)
        if billing is None:
            billing = CompanyBilling(
                id=self.repository.new_id(),
                company_id=company_id,
                billing_plan_id=plan.id,
                billing_cycle=cycle,
            )
        else:
            billing.billing_plan_id = plan.id
            billing.billing_cycle = cycle

        billing.billing_plan = plan
        self._refresh_counts(billing)
        billing.next_billing_date = add_one_month(now)
        billing.updated_at = now
        self.repository.save_company_billing(billing)
        logger.info(
            f"Assigned plan {plan.name} to company {company_id} "
            f"({cycle.value}, monthly total {billing.monthly_total})"
        )
        return billing

    def update_company_billing(
        self,
        company_id: str,
        plan_id: Optional[str] = None,
        billing_cycle: Optional[BillingCycle] = None,
    ) -> CompanyBilling:
        billing = self._get_billing(company_id)
        if plan_id is not None:
            billing.billing_plan = self._get_active_plan(plan_id)
            billing.billing_plan_id = plan_id
        if billing_cycle is not None:
            billing.billing_cycle = BillingCycle(billing_cycle)

        self._refresh_counts(billing)
        billing.updated_at = datetime.utcnow()
        self.repository.save_company_billing(billing)
        logger.info(f"Updated billing for company {company_id}")
        return billing

    # Add-ons

    def list_addons(self, active_only: bool = True) -> List[FeatureAddon]:
        return self.repository.list_addons(active_only)

    def create_addon(self, data: Any) -> FeatureAddon:
        request = validate_addon_input(data).unwrap("Invalid feature add-on")
        if self.repository.find_addon_by_feature(request.feature) is not None:
            logger.warning(f"Duplicate add-on for feature {request.feature}")
            raise ConflictError(f"Add-on for feature {request.feature} already exists")

        addon = FeatureAddon(id=self.repository.new_id(), **request.model_dump())
        self.repository.save_addon(addon)
        logger.info(f"Created add-on {addon.name} for feature {addon.feature}")
        return addon

    def update_addon(self, addon_id: str, data: Any) -> FeatureAddon:
        addon = self.repository.get_addon(addon_id)
        if addon is None:
            raise NotFoundError("FeatureAddon", addon_id)
        update = validate_addon_update(data).unwrap("Invalid feature add-on update")

        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        updated = addon.model_copy(update=changes)
        self.repository.save_addon(updated)
        logger.info(f"Updated add-on {addon_id}: {sorted(changes)}")
        return updated

    def activate_addon_for_company(
        self, company_id: str, addon_id: str, now: Optional[datetime] = None
    ) -> CompanyAddon:
        addon = self.repository.get_addon(addon_id)
        if addon is None:
            raise NotFoundError("FeatureAddon", addon_id)
        if not addon.is_active:
            raise ConflictError(
                f"Add-on {addon.name} is not available", code=ErrorCodes.RESOURCE_UNAVAILABLE
            )

        now = naive_utc(now) or datetime.utcnow()
        company_addon = self.repository.find_company_addon(company_id, addon_id)
        if company_addon is not None and company_addon.is_active:
            raise ConflictError(f"Add-on {addon.name} is already active for company {company_id}")

        if company_addon is None:
            company_addon = CompanyAddon(
                id=self.repository.new_id(),
                company_id=company_id,
                feature_addon_id=addon_id,
                activated_at=now,
            )
        else:
            company_addon.status = AddonStatus.ACTIVE
            company_addon.activated_at = now
            company_addon.expires_at = None

        company_addon.feature_addon = addon
        self.repository.save_company_addon(company_addon)
        logger.info(f"Activated add-on {addon.name} for company {company_id}")
        return company_addon

    def deactivate_addon_for_company(
        self, company_id: str, addon_id: str, now: Optional[datetime] = None
    ) -> CompanyAddon:
        company_addon = self.repository.find_company_addon(company_id, addon_id)
        if company_addon is None or not company_addon.is_active:
            raise NotFoundError("CompanyAddon", f"{company_id}/{addon_id}")

        company_addon.status = AddonStatus.CANCELLED
        company_addon.expires_at = naive_utc(now) or datetime.utcnow()
        self.repository.save_company_addon(company_addon)
        logger.info(f"Deactivated add-on {addon_id} for company {company_id}")
        return company_addon

    # Invoices

    def get_invoice(self, invoice_id: str) -> BillingInvoice:
        invoice = self.repository.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError("BillingInvoice", invoice_id)
        return invoice

    def generate_invoice(
        self,
        company_id: str,
        period_start: Optional[datetime] = None,
        period_end: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> BillingInvoice:
        """
        Issue the invoice for one billing period (the current month by default).

        Seat counts are refreshed before pricing. The invoice and the refreshed
        billing row are written in one transaction.

        Raises:
            InvalidInputError: if the company has no billing configured
            ConflictError: if an invoice already exists for the period
        """
        now = naive_utc(now) or datetime.utcnow()
        billing = self.repository.get_company_billing(company_id)
        if billing is None:
            raise InvalidInputError(
                f"No billing configured for company {company_id}", field="company_id"
            )
        if billing.billing_plan is None:
            raise NotFoundError("BillingPlan", billing.billing_plan_id)

        period_start, period_end = naive_utc(period_start), naive_utc(period_end)
        if period_start is None or period_end is None:
            default_start, default_end = month_bounds(now)
            period_start = period_start or default_start
            period_end = period_end or default_end

        if self.repository.find_invoice_for_period(billing.id, period_start, period_end):
            logger.warning(
                f"Invoice already exists for company {company_id} "
                f"({period_start:%Y-%m-%d} - {period_end:%Y-%m-%d})"
            )
            raise ConflictError(
                "Invoice already exists for this billing period",
                code=ErrorCodes.DUPLICATE_INVOICE,
            )

        with self.repository.transaction():
            self._refresh_counts(billing)
            draft = self.engine.generate_invoice(
                billing,
                billing.billing_plan,
                self.repository.list_company_addons(company_id),
                period_start,
                period_end,
            )
            sequence = self.repository.next_invoice_sequence(now.year, now.month)
            invoice = BillingInvoice(
                id=self.repository.new_id(),
                invoice_number=(
                    f"{self.settings.invoice_number_prefix}-{now:%Y%m}-{sequence:04d}"
                ),
                due_date=now + timedelta(days=self.settings.invoice_due_days),
                created_at=now,
                **draft.model_dump(),
            )
            billing.updated_at = now
            self.repository.save_company_billing(billing)
            self.repository.save_invoice(invoice)

        logger.info(
            f"Generated invoice {invoice.invoice_number} for company {company_id}: "
            f"{invoice.total_amount}"
        )
        return invoice

    def update_invoice_status(
        self, invoice_id: str, status: InvoiceStatus, now: Optional[datetime] = None
    ) -> BillingInvoice:
        invoice = self.get_invoice(invoice_id)
        target = InvoiceStatus(status)
        if target not in self.INVOICE_TRANSITIONS[invoice.status]:
            logger.warning(
                f"Rejected invoice {invoice_id} transition {invoice.status.value} -> {target.value}"
            )
            raise InvalidStateTransitionError("invoice", invoice.status.value, target.value)

        invoice.status = target
        if target == InvoiceStatus.PAID:
            invoice.paid_at = naive_utc(now) or datetime.utcnow()
        self.repository.save_invoice(invoice)
        logger.info(f"Invoice {invoice.invoice_number} marked {target.value}")
        return invoice

    def mark_overdue_invoices(self, now: Optional[datetime] = None) -> List[BillingInvoice]:
        now = naive_utc(now) or datetime.utcnow()
        overdue = []
        for invoice in self.repository.list_invoices(InvoiceStatus.PENDING):
            if invoice.due_date < now:
                overdue.append(self.update_invoice_status(invoice.id, InvoiceStatus.OVERDUE, now))
        if overdue:
            logger.info(f"Marked {len(overdue)} invoice(s) overdue")
        return overdue

    # Helpers

    def _get_billing(self, company_id: str) -> CompanyBilling:
        billing = self.repository.get_company_billing(company_id)
        if billing is None:
            raise NotFoundError("CompanyBilling", company_id)
        return billing

    def _get_active_plan(self, plan_id: str) -> BillingPlan:
        plan = self.repository.get_plan(plan_id)
        if plan is None or not plan.is_active:
            raise NotFoundError("BillingPlan", plan_id)
        return plan

    def _refresh_counts(self, billing: CompanyBilling) -> None:
        billing.current_employees = self.repository.count_employees(billing.company_id)
        billing.current_users = self.repository.count_users(billing.company_id)
        billing.monthly_total = self.engine.compute_monthly_total(
            billing.billing_plan, billing.current_employees, billing.current_users
        )
