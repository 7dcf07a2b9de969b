# payplatform/modules/payroll/tests/conftest.py

"""
Pytest fixtures for payroll module tests.
"""

import pytest
from datetime import date
from decimal import Decimal

from ....core.config import Settings
from ..enums.payroll_enums import DeductionBase, DeductionType
from ..repositories.payroll_repository import InMemoryPayrollRepository
from ..schemas.payroll_schemas import AttendanceSummary, DeductionSet, SalaryComponents
from ..schemas.statutory_schemas import StatutoryRule
from ..services.payroll_service import PayrollService
from ..services.salary_computation_engine import SalaryComputationEngine
from ..services.statutory_deduction_engine import (
    StatutoryDeductionEngine,
    StaticStatutoryRuleTable,
)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        default_statutory_region="KA",
    )


@pytest.fixture
def engine():
    return SalaryComputationEngine()


@pytest.fixture
def sample_components():
    """Basic 50000, HRA 15000, special 10000."""
    return SalaryComponents(
        basic_salary=Decimal('50000'),
        hra=Decimal('15000'),
        special_allowance=Decimal('10000'),
    )


@pytest.fixture
def full_attendance():
    return AttendanceSummary(days_worked=30, days_in_period=30)


@pytest.fixture
def sample_deductions():
    return DeductionSet(pf_employee=Decimal('1800'), tds=Decimal('3000'))


@pytest.fixture
def statutory_rules():
    """PF on basic with a cap, ESI on gross below a ceiling, flat PT."""
    return [
        StatutoryRule(
            rule_name="Provident Fund",
            region="KA",
            deduction_type=DeductionType.PROVIDENT_FUND,
            base=DeductionBase.BASIC,
            employee_rate_percent=Decimal('12'),
            employer_rate_percent=Decimal('12'),
            max_base_amount=Decimal('15000'),
            effective_date=date(2024, 1, 1),
        ),
        StatutoryRule(
            rule_name="Professional Tax",
            region="KA",
            deduction_type=DeductionType.PROFESSIONAL_TAX,
            fixed_amount=Decimal('200'),
            min_base_amount=Decimal('15000'),
            effective_date=date(2024, 1, 1),
        ),
        StatutoryRule(
            rule_name="Old Professional Tax",
            region="KA",
            deduction_type=DeductionType.PROFESSIONAL_TAX,
            fixed_amount=Decimal('150'),
            effective_date=date(2020, 1, 1),
            expiry_date=date(2024, 1, 1),
        ),
    ]


@pytest.fixture
def rule_table(statutory_rules):
    return StaticStatutoryRuleTable(statutory_rules)


@pytest.fixture
def deduction_engine(rule_table):
    return StatutoryDeductionEngine(rule_table)


@pytest.fixture
def repository():
    return InMemoryPayrollRepository()


@pytest.fixture
def payroll_service(repository, engine, deduction_engine, settings):
    return PayrollService(repository, engine, deduction_engine, settings)


@pytest.fixture
def payroll_payload():
    return {
        "employee_id": "emp-1",
        "pay_period_month": 3,
        "pay_period_year": 2025,
        "pay_date": "2025-03-31",
        "components": {
            "basic_salary": "50000",
            "hra": "15000",
            "special_allowance": "10000",
        },
        "attendance": {"days_worked": 31, "days_in_period": 31},
        "deductions": {"pf_employee": "1800", "tds": "3000"},
    }
