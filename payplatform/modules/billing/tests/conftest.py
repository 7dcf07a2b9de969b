# payplatform/modules/billing/tests/conftest.py

"""
Pytest fixtures for billing module tests.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from ....core.config import Settings
from ..enums.billing_enums import AddonStatus, BillingCycle
from ..repositories.billing_repository import InMemoryBillingRepository
from ..schemas.billing_schemas import BillingPlan, CompanyAddon, CompanyBilling, FeatureAddon
from ..services.billing_aggregation_engine import BillingAggregationEngine
from ..services.billing_service import BillingService


PERIOD_START = datetime(2025, 3, 1)
PERIOD_END = datetime(2025, 3, 31, 23, 59, 59)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def engine():
    return BillingAggregationEngine()


@pytest.fixture
def starter_plan():
    return BillingPlan(
        id="plan-starter",
        name="Starter",
        tier="STARTER",
        base_price=Decimal('100'),
        price_per_employee=Decimal('5'),
        included_employees=10,
    )


@pytest.fixture
def pro_plan():
    return BillingPlan(
        id="plan-pro",
        name="Professional",
        tier="PROFESSIONAL",
        base_price=Decimal('250'),
        yearly_base_price=Decimal('1000'),
        price_per_employee=Decimal('4'),
        price_per_user=Decimal('2.50'),
        included_employees=50,
        included_users=5,
    )


@pytest.fixture
def analytics_addon():
    return FeatureAddon(
        id="addon-analytics",
        feature="advanced_analytics",
        name="Advanced Analytics",
        price=Decimal('20'),
    )


def make_billing(plan, employees=0, users=0, cycle=BillingCycle.MONTHLY, company_id="co-1"):
    return CompanyBilling(
        id=f"billing-{company_id}",
        company_id=company_id,
        billing_plan_id=plan.id,
        billing_plan=plan,
        billing_cycle=cycle,
        current_employees=employees,
        current_users=users,
    )


def make_company_addon(addon, status=AddonStatus.ACTIVE, activated_at=None, expires_at=None,
                       company_id="co-1"):
    return CompanyAddon(
        id=f"ca-{company_id}-{addon.id}",
        company_id=company_id,
        feature_addon_id=addon.id,
        feature_addon=addon,
        status=status,
        activated_at=activated_at or datetime(2025, 1, 1),
        expires_at=expires_at,
    )


@pytest.fixture
def repository(starter_plan, pro_plan, analytics_addon):
    repo = InMemoryBillingRepository()
    repo.save_plan(starter_plan)
    repo.save_plan(pro_plan)
    repo.save_addon(analytics_addon)
    return repo


@pytest.fixture
def billing_service(repository, engine, settings):
    return BillingService(repository, engine, settings)
