"""
Persistence contract for plans, company billing, add-ons and invoices.

Reads return assembled snapshots: a ``CompanyBilling`` carries its
``billing_plan`` and a ``CompanyAddon`` carries its ``feature_addon``, so the
engines never follow references themselves.
"""

import copy
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple

from ....core.money import sum_money
from ..enums.billing_enums import AddonStatus, InvoiceStatus
from ..schemas.billing_schemas import (
    BillingInvoice,
    BillingPlan,
    CompanyAddon,
    CompanyBilling,
    FeatureAddon,
)


class BillingRepository(ABC):

    # Plans

    @abstractmethod
    def get_plan(self, plan_id: str) -> Optional[BillingPlan]:
        ...

    @abstractmethod
    def list_plans(self, active_only: bool = True) -> List[BillingPlan]:
        ...

    @abstractmethod
    def save_plan(self, plan: BillingPlan) -> BillingPlan:
        ...

    # Company billing

    @abstractmethod
    def get_company_billing(self, company_id: str) -> Optional[CompanyBilling]:
        ...

    @abstractmethod
    def list_company_billings(self) -> List[CompanyBilling]:
        ...

    @abstractmethod
    def save_company_billing(self, billing: CompanyBilling) -> CompanyBilling:
        ...

    @abstractmethod
    def count_employees(self, company_id: str) -> int:
        ...

    @abstractmethod
    def count_users(self, company_id: str) -> int:
        ...

    # Add-ons

    @abstractmethod
    def get_addon(self, addon_id: str) -> Optional[FeatureAddon]:
        ...

    @abstractmethod
    def find_addon_by_feature(self, feature: str) -> Optional[FeatureAddon]:
        ...

    @abstractmethod
    def list_addons(self, active_only: bool = True) -> List[FeatureAddon]:
        ...

    @abstractmethod
    def save_addon(self, addon: FeatureAddon) -> FeatureAddon:
        ...

    @abstractmethod
    def find_company_addon(self, company_id: str, addon_id: str) -> Optional[CompanyAddon]:
        ...

    @abstractmethod
    def list_company_addons(self, company_id: str) -> List[CompanyAddon]:
        ...

    @abstractmethod
    def list_active_company_addons(self) -> List[CompanyAddon]:
        ...

    @abstractmethod
    def save_company_addon(self, company_addon: CompanyAddon) -> CompanyAddon:
        ...

    # Invoices

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> Optional[BillingInvoice]:
        ...

    @abstractmethod
    def find_invoice_for_period(
        self, company_billing_id: str, period_start: datetime, period_end: datetime
    ) -> Optional[BillingInvoice]:
        ...

    @abstractmethod
    def list_invoices(self, status: Optional[InvoiceStatus] = None) -> List[BillingInvoice]:
        ...

    @abstractmethod
    def save_invoice(self, invoice: BillingInvoice) -> BillingInvoice:
        ...

    @abstractmethod
    def next_invoice_sequence(self, year: int, month: int) -> int:
        ...

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All writes inside the block are kept together or discarded together."""
        ...

    def invoice_totals(self, status: InvoiceStatus) -> Tuple[Decimal, int]:
        invoices = self.list_invoices(status)
        return sum_money(i.total_amount for i in invoices), len(invoices)

    def new_id(self) -> str:
        return str(uuid.uuid4())


class InMemoryBillingRepository(BillingRepository):
    """Dictionary-backed repository; stores copies so callers cannot mutate state."""

    def __init__(self):
        self._plans: Dict[str, BillingPlan] = {}
        self._billings: Dict[str, CompanyBilling] = {}
        self._addons: Dict[str, FeatureAddon] = {}
        self._company_addons: Dict[str, CompanyAddon] = {}
        self._invoices: Dict[str, BillingInvoice] = {}
        self._counts: Dict[str, Tuple[int, int]] = {}
        self._sequences: Dict[Tuple[int, int], int] = {}

    def set_company_counts(self, company_id: str, employees: int, users: int) -> None:
        self._counts[company_id] = (employees, users)

    # Plans

    def get_plan(self, plan_id: str) -> Optional[BillingPlan]:
        plan = self._plans.get(plan_id)
        return plan.model_copy(deep=True) if plan else None

    def list_plans(self, active_only: bool = True) -> List[BillingPlan]:
        plans = [p for p in self._plans.values() if p.is_active or not active_only]
        return [p.model_copy(deep=True) for p in sorted(plans, key=lambda p: p.base_price)]

    def save_plan(self, plan: BillingPlan) -> BillingPlan:
        self._plans[plan.id] = plan.model_copy(deep=True)
        return plan

    # Company billing

    def get_company_billing(self, company_id: str) -> Optional[CompanyBilling]:
        billing = self._billings.get(company_id)
        return self._assemble_billing(billing) if billing else None

    def list_company_billings(self) -> List[CompanyBilling]:
        return [self._assemble_billing(b) for b in self._billings.values()]

    def save_company_billing(self, billing: CompanyBilling) -> CompanyBilling:
        stored = billing.model_copy(deep=True)
        stored.billing_plan = None
        self._billings[billing.company_id] = stored
        return billing

    def count_employees(self, company_id: str) -> int:
        return self._counts.get(company_id, (0, 0))[0]

    def count_users(self, company_id: str) -> int:
        return self._counts.get(company_id, (0, 0))[1]

    # Add-ons

    def get_addon(self, addon_id: str) -> Optional[FeatureAddon]:
        addon = self._addons.get(addon_id)
        return addon.model_copy(deep=True) if addon else None

    def find_addon_by_feature(self, feature: str) -> Optional[FeatureAddon]:
        for addon in self._addons.values():
            if addon.feature == feature:
                return addon.model_copy(deep=True)
        return None

    def list_addons(self, active_only: bool = True) -> List[FeatureAddon]:
        addons = [a for a in self._addons.values() if a.is_active or not active_only]
        return [a.model_copy(deep=True) for a in sorted(addons, key=lambda a: a.name)]

    def save_addon(self, addon: FeatureAddon) -> FeatureAddon:
        self._addons[addon.id] = addon.model_copy(deep=True)
        return addon

    def find_company_addon(self, company_id: str, addon_id: str) -> Optional[CompanyAddon]:
        for company_addon in self._company_addons.values():
            if company_addon.company_id == company_id and company_addon.feature_addon_id == addon_id:
                return self._assemble_company_addon(company_addon)
        return None

    def list_company_addons(self, company_id: str) -> List[CompanyAddon]:
        return [
            self._assemble_company_addon(ca)
            for ca in self._company_addons.values()
            if ca.company_id == company_id
        ]

    def list_active_company_addons(self) -> List[CompanyAddon]:
        return [
            self._assemble_company_addon(ca)
            for ca in self._company_addons.values()
            if ca.status == AddonStatus.ACTIVE
        ]

    def save_company_addon(self, company_addon: CompanyAddon) -> CompanyAddon:
        stored = company_addon.model_copy(deep=True)
        stored.feature_addon = None
        self._company_addons[company_addon.id] = stored
        return company_addon

    # Invoices

    def get_invoice(self, invoice_id: str) -> Optional[BillingInvoice]:
        invoice = self._invoices.get(invoice_id)
        return invoice.model_copy(deep=True) if invoice else None

    def find_invoice_for_period(
        self, company_billing_id: str, period_start: datetime, period_end: datetime
    ) -> Optional[BillingInvoice]:
        for invoice in self._invoices.values():
            if (
                invoice.company_billing_id == company_billing_id
                and invoice.period_start == period_start
                and invoice.period_end == period_end
                and invoice.status != InvoiceStatus.CANCELLED
            ):
                return invoice.model_copy(deep=True)
        return None

    def list_invoices(self, status: Optional[InvoiceStatus] = None) -> List[BillingInvoice]:
        return [
            i.model_copy(deep=True)
            for i in self._invoices.values()
            if status is None or i.status == status
        ]

    def save_invoice(self, invoice: BillingInvoice) -> BillingInvoice:
        self._invoices[invoice.id] = invoice.model_copy(deep=True)
        return invoice

    def next_invoice_sequence(self, year: int, month: int) -> int:
        sequence = self._sequences.get((year, month), 0) + 1
        self._sequences[(year, month)] = sequence
        return sequence

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = copy.deepcopy(self._state())
        try:
            yield
        except Exception:
            self._restore(snapshot)
            raise

    # Helpers

    def _state(self) -> dict:
        return {
            "_plans": self._plans,
            "_billings": self._billings,
            "_addons": self._addons,
            "_company_addons": self._company_addons,
            "_invoices": self._invoices,
            "_counts": self._counts,
            "_sequences": self._sequences,
        }

    def _restore(self, snapshot: dict) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)

    def _assemble_billing(self, billing: CompanyBilling) -> CompanyBilling:
        assembled = billing.model_copy(deep=True)
        assembled.billing_plan = self.get_plan(billing.billing_plan_id)
        return assembled

    def _assemble_company_addon(self, company_addon: CompanyAddon) -> CompanyAddon:
        assembled = company_addon.model_copy(deep=True)
        assembled.feature_addon = self.get_addon(company_addon.feature_addon_id)
        return assembled
