from .billing_repository import BillingRepository, InMemoryBillingRepository

__all__ = ["BillingRepository", "InMemoryBillingRepository"]
