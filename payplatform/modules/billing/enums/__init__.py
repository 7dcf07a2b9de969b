from .billing_enums import BillingCycle, InvoiceStatus, AddonStatus

__all__ = ["BillingCycle", "InvoiceStatus", "AddonStatus"]
