"""Payroll services module."""

from .salary_computation_engine import SalaryComputationEngine
from .statutory_deduction_engine import (
    StatutoryDeductionEngine,
    StatutoryRuleLookup,
    StaticStatutoryRuleTable,
)
from .salary_structure import (
    compute_from_structure,
    periods_per_year,
    prorate_components,
    to_salary_components,
)
from .payroll_reconciliation import reconcile_periods
from .payroll_service import PayrollService

__all__ = [
    "SalaryComputationEngine",
    "StatutoryDeductionEngine",
    "StatutoryRuleLookup",
    "StaticStatutoryRuleTable",
    "compute_from_structure",
    "periods_per_year",
    "prorate_components",
    "to_salary_components",
    "reconcile_periods",
    "PayrollService",
]
