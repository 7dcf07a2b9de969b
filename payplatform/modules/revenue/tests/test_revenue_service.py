from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

from ...billing.enums.billing_enums import InvoiceStatus
from ...billing.repositories.billing_repository import BillingRepository, InMemoryBillingRepository
from ...billing.schemas.billing_schemas import FeatureAddon
from ...billing.services.billing_service import BillingService
from ..services.revenue_service import RevenueService


NOW = datetime(2025, 3, 15)


class TestRevenueService:

    def test_summary_from_billing_repository(self, settings, plans):
        repository = InMemoryBillingRepository()
        for plan in plans.values():
            repository.save_plan(plan)
        repository.save_addon(
            FeatureAddon(id="a1", feature="api", name="API Access", price=Decimal('20'))
        )
        billing = BillingService(repository, settings=settings)

        billing.assign_billing_plan("co-1", "p1", now=NOW)
        billing.assign_billing_plan("co-2", "p2", now=NOW)
        billing.activate_addon_for_company("co-1", "a1", now=NOW)
        paid = billing.generate_invoice("co-1", now=NOW)
        billing.update_invoice_status(paid.id, InvoiceStatus.PAID, now=NOW)
        billing.generate_invoice("co-2", now=NOW)

        summary = RevenueService(repository, settings=settings).get_revenue_summary()

        assert summary.base_mrr == Decimal('300.00')
        assert summary.mrr == Decimal('320.00')
        assert summary.arr == Decimal('3840.00')
        assert summary.invoices_summary.total_paid == Decimal('120.00')
        assert summary.invoices_summary.paid_count == 1
        assert summary.invoices_summary.total_pending == Decimal('200.00')
        assert summary.invoices_summary.pending_count == 1

    def test_invoice_aggregates_requested_by_status(self, settings):
        repository = Mock(spec=BillingRepository)
        repository.list_company_billings.return_value = []
        repository.list_active_company_addons.return_value = []
        repository.invoice_totals.side_effect = [
            (Decimal('10'), 1),
            (Decimal('0'), 0),
        ]

        summary = RevenueService(repository, settings=settings).get_revenue_summary()

        statuses = [c.args[0] for c in repository.invoice_totals.call_args_list]
        assert statuses == [InvoiceStatus.PAID, InvoiceStatus.PENDING]
        assert summary.invoices_summary.total_paid == Decimal('10.00')
