from .payroll_repository import PayrollRepository, InMemoryPayrollRepository

__all__ = ["PayrollRepository", "InMemoryPayrollRepository"]
