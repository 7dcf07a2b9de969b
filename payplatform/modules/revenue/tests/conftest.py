# payplatform/modules/revenue/tests/conftest.py

import pytest
from datetime import datetime
from decimal import Decimal

from ....core.config import Settings
from ...billing.enums.billing_enums import AddonStatus
from ...billing.schemas.billing_schemas import (
    BillingPlan,
    CompanyAddon,
    CompanyBilling,
    FeatureAddon,
)
from ..services.revenue_rollup_engine import RevenueRollupEngine


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def engine():
    return RevenueRollupEngine()


@pytest.fixture
def plans():
    return {
        "STARTER": BillingPlan(id="p1", name="Starter", tier="STARTER", base_price=Decimal('100')),
        "PRO": BillingPlan(id="p2", name="Pro", tier="PRO", base_price=Decimal('200')),
    }


@pytest.fixture
def make_billing():
    def _make(company_id, plan, monthly_total):
        return CompanyBilling(
            id=f"b-{company_id}",
            company_id=company_id,
            billing_plan_id=plan.id,
            billing_plan=plan,
            monthly_total=Decimal(monthly_total),
        )
    return _make


@pytest.fixture
def make_addon():
    def _make(company_id, price, status=AddonStatus.ACTIVE):
        feature = FeatureAddon(
            id=f"f-{company_id}", feature=f"feature-{company_id}", name="Feature",
            price=Decimal(price),
        )
        return CompanyAddon(
            id=f"ca-{company_id}",
            company_id=company_id,
            feature_addon_id=feature.id,
            feature_addon=feature,
            status=status,
            activated_at=datetime(2025, 1, 1),
        )
    return _make
