"""Billing schemas module."""

from .billing_schemas import (
    BillingPlan,
    CreateBillingPlanRequest,
    UpdateBillingPlanRequest,
    CompanyBilling,
    CompanyBillingStatus,
    FeatureAddon,
    CreateAddonRequest,
    UpdateAddonRequest,
    CompanyAddon,
    InvoiceLineItem,
    InvoiceDraft,
    BillingInvoice,
)

__all__ = [
    'BillingPlan',
    'CreateBillingPlanRequest',
    'UpdateBillingPlanRequest',
    'CompanyBilling',
    'CompanyBillingStatus',
    'FeatureAddon',
    'CreateAddonRequest',
    'UpdateAddonRequest',
    'CompanyAddon',
    'InvoiceLineItem',
    'InvoiceDraft',
    'BillingInvoice',
]
