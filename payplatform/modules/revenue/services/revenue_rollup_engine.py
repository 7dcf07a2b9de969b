import logging
from decimal import Decimal
from typing import Dict, Sequence

from ....core.error_schemas import ErrorCodes
from ....core.exceptions import InvalidInputError
from ....core.money import ZERO, quantize_money
from ...billing.schemas.billing_schemas import CompanyAddon, CompanyBilling
from ..schemas.revenue_schemas import InvoicesSummary, RevenueSummary, TierRevenue

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


class RevenueRollupEngine:
    """
    Aggregates company billings and add-ons into MRR, ARR and tier revenue.

    Every billing row counts toward base MRR regardless of subscription
    state; only ACTIVE add-ons count toward add-on MRR.
    """

    def __init__(self, decimal_places: int = 2):
        self.decimal_places = decimal_places

    def compute_revenue_summary(
        self,
        billings: Sequence[CompanyBilling],
        active_addons: Sequence[CompanyAddon],
        paid_invoice_total: Decimal = ZERO,
        paid_invoice_count: int = 0,
        pending_invoice_total: Decimal = ZERO,
        pending_invoice_count: int = 0,
    ) -> RevenueSummary:
        self._check_invoice_aggregates(
            paid_invoice_total, paid_invoice_count, pending_invoice_total, pending_invoice_count
        )

        base_mrr = ZERO
        by_tier: Dict[str, Decimal] = {}
        for index, billing in enumerate(billings or ()):
            if billing.billing_plan is None:
                raise InvalidInputError(
                    f"Billing {billing.id} has no plan attached",
                    field=f"billings.{index}.billing_plan",
                )
            if billing.monthly_total < 0:
                raise InvalidInputError(
                    "monthly_total must not be negative",
                    field=f"billings.{index}.monthly_total",
                    code=ErrorCodes.INVALID_AMOUNT,
                )
            base_mrr += billing.monthly_total
            tier = billing.billing_plan.tier
            by_tier[tier] = by_tier.get(tier, ZERO) + billing.monthly_total

        addon_mrr = ZERO
        active_count = 0
        for index, addon in enumerate(active_addons or ()):
            if not addon.is_active:
                continue
            if addon.feature_addon is None:
                raise InvalidInputError(
                    "Active add-on is missing its feature add-on details",
                    field=f"active_addons.{index}.feature_addon",
                )
            addon_mrr += addon.monthly_price
            active_count += 1

        mrr = base_mrr + addon_mrr
        logger.debug(f"Revenue rollup: base={base_mrr} addons={addon_mrr} mrr={mrr}")

        return RevenueSummary(
            mrr=self._money(mrr),
            arr=self._money(mrr * MONTHS_PER_YEAR),
            base_mrr=self._money(base_mrr),
            addon_mrr=self._money(addon_mrr),
            revenue_by_tier=[
                TierRevenue(tier=tier, amount=self._money(amount))
                for tier, amount in by_tier.items()
            ],
            total_companies_with_billing=len(billings or ()),
            total_active_addons=active_count,
            invoices_summary=InvoicesSummary(
                total_paid=self._money(paid_invoice_total),
                paid_count=paid_invoice_count,
                total_pending=self._money(pending_invoice_total),
                pending_count=pending_invoice_count,
            ),
        )

    def _money(self, value: Decimal) -> Decimal:
        return quantize_money(value, self.decimal_places)

    @staticmethod
    def _check_invoice_aggregates(paid_total, paid_count, pending_total, pending_count) -> None:
        for name, value in (
            ("paid_invoice_total", paid_total),
            ("paid_invoice_count", paid_count),
            ("pending_invoice_total", pending_total),
            ("pending_invoice_count", pending_count),
        ):
            if value is None or value < 0:
                raise InvalidInputError(
                    f"{name} must not be negative", field=name, code=ErrorCodes.INVALID_AMOUNT
                )
