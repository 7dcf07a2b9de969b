"""Revenue schemas module."""

from .revenue_schemas import TierRevenue, InvoicesSummary, RevenueSummary

__all__ = ['TierRevenue', 'InvoicesSummary', 'RevenueSummary']
