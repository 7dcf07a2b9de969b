import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from ....core.error_schemas import ErrorCodes
from ....core.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
)
from ..enums.billing_enums import AddonStatus, BillingCycle, InvoiceStatus
from ..services.billing_service import add_one_month, month_bounds


NOW = datetime(2025, 3, 15, 10, 30)


@pytest.fixture
def subscribed(billing_service, repository):
    repository.set_company_counts("co-1", 15, 2)
    return billing_service.assign_billing_plan("co-1", "plan-starter", now=NOW)


class TestPlans:

    def test_create_plan(self, billing_service):
        plan = billing_service.create_plan({
            "name": "Enterprise",
            "tier": "ENTERPRISE",
            "base_price": "999",
            "price_per_employee": "3",
            "included_employees": 200,
        })

        assert plan.id
        assert plan.base_price == Decimal('999')
        assert plan in billing_service.list_plans()

    def test_create_plan_rejects_negative_price(self, billing_service):
        with pytest.raises(InvalidInputError) as exc_info:
            billing_service.create_plan({"name": "Bad", "tier": "BAD", "base_price": "-1"})

        assert exc_info.value.details[0].field == "base_price"

    def test_list_plans_orders_by_price(self, billing_service):
        assert [p.id for p in billing_service.list_plans()] == ["plan-starter", "plan-pro"]

    def test_update_plan_does_not_touch_issued_invoices(
        self, billing_service, repository, subscribed
    ):
        invoice = billing_service.generate_invoice("co-1", now=NOW)

        billing_service.update_plan("plan-starter", {"base_price": "150"})

        assert repository.get_plan("plan-starter").base_price == Decimal('150')
        assert repository.get_invoice(invoice.id).total_amount == Decimal('125.00')

    def test_update_unknown_plan(self, billing_service):
        with pytest.raises(NotFoundError):
            billing_service.update_plan("nope", {"base_price": "1"})

    def test_empty_update_rejected(self, billing_service):
        with pytest.raises(InvalidInputError):
            billing_service.update_plan("plan-starter", {})


class TestCompanyBilling:

    def test_assign_plan_caches_monthly_total(self, subscribed, repository):
        assert subscribed.monthly_total == Decimal('125.00')
        assert subscribed.current_employees == 15
        assert subscribed.next_billing_date == datetime(2025, 4, 15, 10, 30)
        assert repository.get_company_billing("co-1").billing_plan.id == "plan-starter"

    def test_get_company_billing(self, billing_service, subscribed):
        assert billing_service.get_company_billing("co-2").has_billing is False

        status = billing_service.get_company_billing("co-1")
        assert status.has_billing is True
        assert status.billing.monthly_total == Decimal('125.00')

    def test_switch_plan_and_cycle(self, billing_service, subscribed):
        billing = billing_service.update_company_billing(
            "co-1", plan_id="plan-pro", billing_cycle=BillingCycle.YEARLY
        )

        assert billing.billing_plan_id == "plan-pro"
        assert billing.billing_cycle == BillingCycle.YEARLY
        assert billing.monthly_total == Decimal('250.00')

    def test_update_without_billing(self, billing_service):
        with pytest.raises(NotFoundError):
            billing_service.update_company_billing("co-9", billing_cycle=BillingCycle.YEARLY)

    def test_assign_inactive_plan(self, billing_service):
        billing_service.update_plan("plan-pro", {"is_active": False})

        with pytest.raises(NotFoundError):
            billing_service.assign_billing_plan("co-1", "plan-pro")


class TestAddons:

    def test_duplicate_feature_rejected(self, billing_service):
        with pytest.raises(ConflictError):
            billing_service.create_addon({
                "feature": "advanced_analytics", "name": "Analytics again", "price": "5",
            })

    def test_activate_and_deactivate(self, billing_service):
        activated = billing_service.activate_addon_for_company("co-1", "addon-analytics", now=NOW)
        assert activated.status == AddonStatus.ACTIVE
        assert activated.monthly_price == Decimal('20')

        with pytest.raises(ConflictError):
            billing_service.activate_addon_for_company("co-1", "addon-analytics")

        later = NOW + timedelta(days=10)
        cancelled = billing_service.deactivate_addon_for_company("co-1", "addon-analytics", now=later)
        assert cancelled.status == AddonStatus.CANCELLED
        assert cancelled.expires_at == later

        reactivated = billing_service.activate_addon_for_company("co-1", "addon-analytics")
        assert reactivated.id == activated.id
        assert reactivated.expires_at is None

    def test_inactive_addon_cannot_be_activated(self, billing_service):
        billing_service.update_addon("addon-analytics", {"is_active": False})

        with pytest.raises(ConflictError) as exc_info:
            billing_service.activate_addon_for_company("co-1", "addon-analytics")

        assert exc_info.value.code == ErrorCodes.RESOURCE_UNAVAILABLE

    def test_unknown_addon(self, billing_service):
        with pytest.raises(NotFoundError):
            billing_service.activate_addon_for_company("co-1", "missing")
        with pytest.raises(NotFoundError):
            billing_service.deactivate_addon_for_company("co-1", "addon-analytics")


class TestInvoices:

    def test_generate_invoice(self, billing_service, subscribed):
        invoice = billing_service.generate_invoice("co-1", now=NOW)

        start, end = month_bounds(NOW)
        assert invoice.invoice_number == "INV-202503-0001"
        assert invoice.due_date == NOW + timedelta(days=30)
        assert (invoice.period_start, invoice.period_end) == (start, end)
        assert invoice.total_amount == Decimal('125.00')
        assert invoice.status == InvoiceStatus.PENDING

    def test_invoice_includes_active_addons(self, billing_service, subscribed):
        billing_service.activate_addon_for_company(
            "co-1", "addon-analytics", now=datetime(2025, 3, 1)
        )

        invoice = billing_service.generate_invoice("co-1", now=NOW)

        assert invoice.addon_amount == Decimal('20.00')
        assert invoice.total_amount == Decimal('145.00')

    def test_duplicate_period_rejected(self, billing_service, subscribed):
        billing_service.generate_invoice("co-1", now=NOW)

        with pytest.raises(ConflictError) as exc_info:
            billing_service.generate_invoice("co-1", now=NOW)

        assert exc_info.value.code == ErrorCodes.DUPLICATE_INVOICE

    def test_invoice_numbers_are_sequential(self, billing_service, repository, subscribed):
        repository.set_company_counts("co-2", 1, 1)
        billing_service.assign_billing_plan("co-2", "plan-pro", now=NOW)

        first = billing_service.generate_invoice("co-1", now=NOW)
        second = billing_service.generate_invoice("co-2", now=NOW)

        assert (first.invoice_number, second.invoice_number) == (
            "INV-202503-0001", "INV-202503-0002",
        )

    def test_counts_refreshed_before_pricing(self, billing_service, repository, subscribed):
        repository.set_company_counts("co-1", 20, 2)

        invoice = billing_service.generate_invoice("co-1", now=NOW)

        assert invoice.employee_count == 20
        assert invoice.employee_amount == Decimal('50.00')
        assert repository.get_company_billing("co-1").monthly_total == Decimal('150.00')

    def test_failed_write_rolls_back(self, billing_service, repository, subscribed, monkeypatch):
        repository.set_company_counts("co-1", 40, 2)

        def fail(invoice):
            raise RuntimeError("storage unavailable")

        monkeypatch.setattr(repository, "save_invoice", fail)

        with pytest.raises(RuntimeError):
            billing_service.generate_invoice("co-1", now=NOW)

        assert repository.get_company_billing("co-1").current_employees == 15
        assert repository.list_invoices() == []
        assert repository.next_invoice_sequence(2025, 3) == 1

    def test_generate_without_billing(self, billing_service):
        with pytest.raises(InvalidInputError):
            billing_service.generate_invoice("co-9", now=NOW)

    def test_pay_invoice(self, billing_service, subscribed):
        invoice = billing_service.generate_invoice("co-1", now=NOW)
        paid_at = NOW + timedelta(days=3)

        paid = billing_service.update_invoice_status(invoice.id, InvoiceStatus.PAID, now=paid_at)

        assert paid.status == InvoiceStatus.PAID
        assert paid.paid_at == paid_at
        with pytest.raises(InvalidStateTransitionError):
            billing_service.update_invoice_status(invoice.id, InvoiceStatus.CANCELLED)

    def test_mark_overdue(self, billing_service, subscribed):
        invoice = billing_service.generate_invoice("co-1", now=NOW)

        assert billing_service.mark_overdue_invoices(now=NOW + timedelta(days=29)) == []
        overdue = billing_service.mark_overdue_invoices(now=NOW + timedelta(days=31))

        assert [i.id for i in overdue] == [invoice.id]
        assert billing_service.get_invoice(invoice.id).status == InvoiceStatus.OVERDUE
        paid = billing_service.update_invoice_status(invoice.id, "PAID")
        assert paid.status == InvoiceStatus.PAID

    def test_aware_period_with_active_addon(self, billing_service, subscribed):
        billing_service.activate_addon_for_company(
            "co-1", "addon-analytics", now=datetime(2025, 3, 1)
        )

        invoice = billing_service.generate_invoice(
            "co-1",
            datetime(2025, 3, 1, tzinfo=timezone.utc),
            datetime(2025, 3, 31, 23, 59, tzinfo=timezone.utc),
            now=NOW,
        )

        assert invoice.addon_amount == Decimal('20.00')
        assert invoice.period_start == datetime(2025, 3, 1)
        assert invoice.period_start.tzinfo is None

    def test_aware_period_matches_stored_naive_invoice(self, billing_service, subscribed):
        start, end = month_bounds(NOW)
        billing_service.generate_invoice("co-1", start, end, now=NOW)

        with pytest.raises(ConflictError):
            billing_service.generate_invoice(
                "co-1",
                start.replace(tzinfo=timezone.utc),
                end.replace(tzinfo=timezone.utc),
                now=NOW,
            )

    def test_mark_overdue_with_aware_clock(self, billing_service, subscribed):
        invoice = billing_service.generate_invoice("co-1", now=NOW)
        plus_five = timezone(timedelta(hours=5))

        # 12:00 at +05:00 is 07:00 UTC, before the 10:30 due time
        assert billing_service.mark_overdue_invoices(
            now=datetime(2025, 4, 14, 12, 0, tzinfo=plus_five)
        ) == []
        overdue = billing_service.mark_overdue_invoices(
            now=datetime(2025, 4, 14, 16, 0, tzinfo=plus_five)
        )

        assert [i.id for i in overdue] == [invoice.id]
        assert billing_service.get_invoice(invoice.id).status == InvoiceStatus.OVERDUE


class TestCalendarHelpers:

    def test_month_bounds(self):
        start, end = month_bounds(datetime(2024, 2, 10))

        assert start == datetime(2024, 2, 1)
        assert end.date() == datetime(2024, 2, 29).date()

    def test_add_one_month_clamps_day(self):
        assert add_one_month(datetime(2025, 1, 31)) == datetime(2025, 2, 28)
        assert add_one_month(datetime(2025, 12, 5)) == datetime(2026, 1, 5)
