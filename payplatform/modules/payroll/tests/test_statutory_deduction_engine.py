import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

from ....core.exceptions import InvalidInputError
from ..enums.payroll_enums import DeductionType
from ..schemas.payroll_schemas import SalaryComponents
from ..schemas.statutory_schemas import StatutoryRule
from ..services.statutory_deduction_engine import (
    StatutoryDeductionEngine,
    StatutoryRuleLookup,
)


class TestStatutoryDeductionEngine:
    """Test suite for StatutoryDeductionEngine."""

    def test_compute_deductions_with_multiple_rules(
        self, deduction_engine, sample_components
    ):
        result = deduction_engine.compute_deductions("KA", date(2025, 3, 31), sample_components)

        deductions = result.deductions
        assert deductions.pf_employee == Decimal('1800.00')  # 12% of capped 15000
        assert deductions.pf_employer == Decimal('1800.00')
        assert deductions.professional_tax == Decimal('200.00')
        assert deductions.tds == Decimal('0.00')

        assert [a.deduction_type for a in result.applications] == [
            DeductionType.PROVIDENT_FUND,
            DeductionType.PROFESSIONAL_TAX,
        ]

    def test_minimum_threshold_skips_rule(self, deduction_engine):
        components = SalaryComponents(basic_salary=Decimal('10000'))

        result = deduction_engine.compute_deductions("KA", date(2025, 3, 31), components)

        assert result.deductions.pf_employee == Decimal('1200.00')
        assert result.deductions.professional_tax == Decimal('0.00')
        assert len(result.applications) == 1

    def test_rules_filtered_by_effective_and_expiry_dates(
        self, deduction_engine, sample_components
    ):
        result = deduction_engine.compute_deductions("KA", date(2023, 6, 30), sample_components)

        assert result.deductions.pf_employee == Decimal('0.00')
        assert result.deductions.professional_tax == Decimal('150.00')
        assert [a.rule_name for a in result.applications] == ["Old Professional Tax"]

    def test_unknown_region_yields_zero_deductions(self, deduction_engine, sample_components):
        result = deduction_engine.compute_deductions("XX", date(2025, 3, 31), sample_components)

        assert result.deductions.employee_total == Decimal('0.00')
        assert result.applications == []

    def test_other_deductions_carried_through(self, deduction_engine, sample_components):
        result = deduction_engine.compute_deductions(
            "KA", date(2025, 3, 31), sample_components, Decimal('450')
        )

        assert result.deductions.other_deductions == Decimal('450.00')
        assert result.deductions.employee_total == Decimal('2450.00')

    def test_calculation_method_description(self, deduction_engine, sample_components):
        result = deduction_engine.compute_deductions("KA", date(2025, 3, 31), sample_components)

        methods = {a.rule_name: a.calculation_method for a in result.applications}
        assert methods["Provident Fund"] == "percentage_capped_split_employer_employee"
        assert methods["Professional Tax"] == "fixed_minimum_threshold"

    def test_uses_lookup_collaborator(self, sample_components):
        lookup = Mock(spec=StatutoryRuleLookup)
        lookup.get_rules.return_value = [
            StatutoryRule(
                rule_name="TDS",
                region="MH",
                deduction_type=DeductionType.TAX_AT_SOURCE,
                employee_rate_percent=Decimal('10'),
                effective_date=date(2025, 1, 1),
            )
        ]
        engine = StatutoryDeductionEngine(lookup)

        result = engine.compute_deductions("MH", date(2025, 4, 30), sample_components)

        lookup.get_rules.assert_called_once_with("MH", date(2025, 4, 30))
        assert result.deductions.tds == Decimal('7500.00')

    def test_negative_other_deductions_rejected(self, deduction_engine, sample_components):
        with pytest.raises(InvalidInputError):
            deduction_engine.compute_deductions(
                "KA", date(2025, 3, 31), sample_components, Decimal('-1')
            )


class TestStatutoryRule:

    def test_expiry_must_follow_effective_date(self):
        with pytest.raises(ValueError):
            StatutoryRule(
                rule_name="Broken",
                region="KA",
                deduction_type=DeductionType.OTHER,
                effective_date=date(2025, 1, 1),
                expiry_date=date(2024, 1, 1),
            )

    def test_inactive_rule_never_applies(self):
        rule = StatutoryRule(
            rule_name="Inactive",
            region="KA",
            deduction_type=DeductionType.OTHER,
            effective_date=date(2020, 1, 1),
            is_active=False,
        )

        assert rule.applies_on(date(2025, 1, 1)) is False
