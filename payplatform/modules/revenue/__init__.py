# payplatform/modules/revenue/__init__.py

"""
Revenue module.

Platform-wide MRR, ARR, tier revenue and invoice totals.
"""

from .services.revenue_rollup_engine import RevenueRollupEngine
from .services.revenue_service import RevenueService

__all__ = ["RevenueRollupEngine", "RevenueService"]
