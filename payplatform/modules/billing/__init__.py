# payplatform/modules/billing/__init__.py

"""
Billing module.

- Plan pricing with included quotas and per-seat overage
- Monthly and yearly invoice generation with line items
- Feature add-ons and company subscriptions
- Invoice status lifecycle
"""

from .services.billing_aggregation_engine import BillingAggregationEngine
from .services.billing_service import BillingService

__all__ = ["BillingAggregationEngine", "BillingService"]
