"""Payroll schemas module."""

from .payroll_schemas import (
    SalaryComponents,
    AttendanceSummary,
    DeductionSet,
    PayrollAdjustment,
    SalaryComputationResult,
    CreatePayrollRequest,
    UpdatePayrollRequest,
    PayrollRecord,
)
from .statutory_schemas import (
    StatutoryRule,
    StatutoryApplicationDetail,
    StatutoryDeductionResult,
)
from .structure_schemas import SalaryStructureComponent, StructureBreakdown
from .reconciliation_schemas import (
    PeriodRef,
    ReconciliationAnomaly,
    ReconciliationSummary,
    ReconciliationReport,
)

__all__ = [
    'SalaryComponents',
    'AttendanceSummary',
    'DeductionSet',
    'PayrollAdjustment',
    'SalaryComputationResult',
    'CreatePayrollRequest',
    'UpdatePayrollRequest',
    'PayrollRecord',
    'StatutoryRule',
    'StatutoryApplicationDetail',
    'StatutoryDeductionResult',
    'SalaryStructureComponent',
    'StructureBreakdown',
    'PeriodRef',
    'ReconciliationAnomaly',
    'ReconciliationSummary',
    'ReconciliationReport',
]
