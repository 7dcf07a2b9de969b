"""Billing services module."""

from .billing_aggregation_engine import BillingAggregationEngine, OverageBreakdown
from .billing_service import BillingService, add_one_month, month_bounds

__all__ = [
    "BillingAggregationEngine",
    "OverageBreakdown",
    "BillingService",
    "add_one_month",
    "month_bounds",
]
