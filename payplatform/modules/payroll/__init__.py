# payplatform/modules/payroll/__init__.py

"""
Payroll module.

- Salary computation (gross, deductions, net, adjustments)
- Statutory deduction rules with effective dates
- Salary structures and attendance pro-ration
- Payroll lifecycle and period reconciliation
"""

from .services.salary_computation_engine import SalaryComputationEngine
from .services.payroll_service import PayrollService

__all__ = ["SalaryComputationEngine", "PayrollService"]
