import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Sequence

from ....core.error_schemas import ErrorCodes
from ....core.exceptions import InvalidInputError
from ....core.money import ZERO, quantize_money
from ..enums.billing_enums import BillingCycle
from ..schemas.billing_schemas import (
    BillingPlan,
    CompanyAddon,
    CompanyBilling,
    InvoiceDraft,
    InvoiceLineItem,
)

logger = logging.getLogger(__name__)

_PLAN_AMOUNT_FIELDS = ("base_price", "price_per_employee", "price_per_user")
_PLAN_QUOTA_FIELDS = ("included_employees", "included_users")


def naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class OverageBreakdown:
    """Units above the plan quota and their monthly-rate cost."""
    extra_employees: int
    extra_users: int
    employee_amount: Decimal
    user_amount: Decimal


class BillingAggregationEngine:
    """
    Prices a company's plan and composes invoice line items.

    Per-employee and per-user overage always uses the plan's monthly unit
    rates, including on YEARLY cycles where only the base price switches to
    the yearly figure.
    """

    def __init__(self, decimal_places: int = 2):
        self.decimal_places = decimal_places

    def compute_overage(
        self, plan: BillingPlan, employee_count: int, user_count: int
    ) -> OverageBreakdown:
        self._check_plan(plan)
        self._check_count("employee_count", employee_count)
        self._check_count("user_count", user_count)

        extra_employees = max(0, employee_count - plan.included_employees)
        extra_users = max(0, user_count - plan.included_users)
        return OverageBreakdown(
            extra_employees=extra_employees,
            extra_users=extra_users,
            employee_amount=self._money(extra_employees * plan.price_per_employee),
            user_amount=self._money(extra_users * plan.price_per_user),
        )

    def compute_monthly_total(
        self, plan: BillingPlan, employee_count: int, user_count: int
    ) -> Decimal:
        """
        base_price + employee overage + user overage, at monthly rates.

        Raises:
            InvalidInputError: on a missing plan, negative counts or prices
        """
        overage = self.compute_overage(plan, employee_count, user_count)
        return self._money(plan.base_price + overage.employee_amount + overage.user_amount)

    def base_price_for_cycle(self, plan: BillingPlan, cycle: BillingCycle) -> Decimal:
        if BillingCycle(cycle) == BillingCycle.YEARLY:
            if plan.yearly_base_price is not None:
                return self._money(plan.yearly_base_price)
            return self._money(plan.base_price * 12)
        return self._money(plan.base_price)

    @staticmethod
    def addon_overlaps(addon: CompanyAddon, period_start: datetime, period_end: datetime) -> bool:
        if not addon.is_active:
            return False
        period_start, period_end = naive_utc(period_start), naive_utc(period_end)
        if naive_utc(addon.activated_at) > period_end:
            return False
        expires_at = naive_utc(addon.expires_at)
        return expires_at is None or expires_at >= period_start

    def generate_invoice(
        self,
        billing: CompanyBilling,
        plan: BillingPlan,
        addons: Sequence[CompanyAddon],
        period_start: datetime,
        period_end: datetime,
    ) -> InvoiceDraft:
        """
        Compose invoice amounts and ordered line items for one period.

        Line items are ordered: base plan, employee overage, user overage,
        then one entry per contributing add-on in the order supplied.
        Identical inputs always produce an identical draft.
        """
        if billing is None:
            raise InvalidInputError("Company billing is required", field="billing")
        period_start, period_end = naive_utc(period_start), naive_utc(period_end)
        if period_start is None or period_end is None or period_end < period_start:
            raise InvalidInputError(
                "period_end must not be before period_start",
                field="period_end",
                code=ErrorCodes.INVALID_PERIOD,
            )

        employee_count = billing.current_employees
        user_count = billing.current_users
        overage = self.compute_overage(plan, employee_count, user_count)
        base_amount = self.base_price_for_cycle(plan, billing.billing_cycle)

        line_items: List[InvoiceLineItem] = []
        if base_amount > 0:
            line_items.append(InvoiceLineItem(
                description=f"{plan.name} - Base Plan",
                quantity=1,
                unit_price=base_amount,
                amount=base_amount,
            ))
        if overage.employee_amount > 0:
            line_items.append(InvoiceLineItem(
                description=(
                    f"Additional Employees ({overage.extra_employees} x "
                    f"${self._money(plan.price_per_employee)})"
                ),
                quantity=overage.extra_employees,
                unit_price=self._money(plan.price_per_employee),
                amount=overage.employee_amount,
            ))
        if overage.user_amount > 0:
            line_items.append(InvoiceLineItem(
                description=(
                    f"Additional Users ({overage.extra_users} x "
                    f"${self._money(plan.price_per_user)})"
                ),
                quantity=overage.extra_users,
                unit_price=self._money(plan.price_per_user),
                amount=overage.user_amount,
            ))

        addon_amount = ZERO
        for index, addon in enumerate(addons or ()):
            if not self.addon_overlaps(addon, period_start, period_end):
                continue
            if addon.feature_addon is None:
                raise InvalidInputError(
                    "Active add-on is missing its feature add-on details",
                    field=f"addons.{index}.feature_addon",
                )
            price = self._money(addon.monthly_price)
            if price < 0:
                raise InvalidInputError(
                    "Add-on price must not be negative",
                    field=f"addons.{index}.feature_addon.price",
                    code=ErrorCodes.INVALID_AMOUNT,
                )
            if price == 0:
                continue
            addon_amount += price
            line_items.append(InvoiceLineItem(
                description=f"Add-on: {addon.feature_addon.name}",
                quantity=1,
                unit_price=price,
                amount=price,
            ))

        total_amount = base_amount + overage.employee_amount + overage.user_amount + addon_amount
        logger.debug(
            f"Invoice draft for billing {billing.id}: base={base_amount} "
            f"employees={overage.employee_amount} users={overage.user_amount} "
            f"addons={addon_amount} total={total_amount}"
        )

        return InvoiceDraft(
            company_billing_id=billing.id,
            billing_cycle=billing.billing_cycle,
            period_start=period_start,
            period_end=period_end,
            base_amount=base_amount,
            employee_amount=overage.employee_amount,
            user_amount=overage.user_amount,
            addon_amount=self._money(addon_amount),
            total_amount=self._money(total_amount),
            employee_count=employee_count,
            user_count=user_count,
            line_items=line_items,
        )

    def _money(self, value: Decimal) -> Decimal:
        return quantize_money(value, self.decimal_places)

    @staticmethod
    def _check_plan(plan: BillingPlan) -> None:
        if plan is None:
            raise InvalidInputError("Billing plan is required", field="plan")
        for name in _PLAN_AMOUNT_FIELDS:
            value = getattr(plan, name, None)
            if value is None or value < 0:
                raise InvalidInputError(
                    f"{name} must be a non-negative amount",
                    field=f"plan.{name}",
                    code=ErrorCodes.INVALID_AMOUNT,
                )
        if plan.yearly_base_price is not None and plan.yearly_base_price < 0:
            raise InvalidInputError(
                "yearly_base_price must be a non-negative amount",
                field="plan.yearly_base_price",
                code=ErrorCodes.INVALID_AMOUNT,
            )
        for name in _PLAN_QUOTA_FIELDS:
            value = getattr(plan, name, None)
            if value is None or value < 0:
                raise InvalidInputError(f"{name} must not be negative", field=f"plan.{name}")

    @staticmethod
    def _check_count(name: str, value: int) -> None:
        if value is None or value < 0:
            raise InvalidInputError(f"{name} must not be negative", field=name)
