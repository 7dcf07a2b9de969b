import logging
from typing import Optional

from ....core.config import Settings, get_settings
from ...billing.enums.billing_enums import InvoiceStatus
from ...billing.repositories.billing_repository import BillingRepository
from ..schemas.revenue_schemas import RevenueSummary
from .revenue_rollup_engine import RevenueRollupEngine

logger = logging.getLogger(__name__)


class RevenueService:
    """Feeds the rollup engine from the billing repository."""

    def __init__(
        self,
        repository: BillingRepository,
        engine: Optional[RevenueRollupEngine] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository
        self.engine = engine or RevenueRollupEngine(self.settings.money_decimal_places)

    def get_revenue_summary(self) -> RevenueSummary:
        paid_total, paid_count = self.repository.invoice_totals(InvoiceStatus.PAID)
        pending_total, pending_count = self.repository.invoice_totals(InvoiceStatus.PENDING)

        summary = self.engine.compute_revenue_summary(
            self.repository.list_company_billings(),
            self.repository.list_active_company_addons(),
            paid_total,
            paid_count,
            pending_total,
            pending_count,
        )
        logger.info(
            f"Revenue summary: MRR {summary.mrr} across "
            f"{summary.total_companies_with_billing} companies"
        )
        return summary
