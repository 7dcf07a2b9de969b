import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ....core.exceptions import InvalidInputError
from ....core.money import ZERO, quantize_money, sum_money
from ..enums.payroll_enums import DeductionBase, DeductionType
from ..schemas.payroll_schemas import DeductionSet, SalaryComponents
from ..schemas.statutory_schemas import (
    StatutoryApplicationDetail,
    StatutoryDeductionResult,
    StatutoryRule,
)

logger = logging.getLogger(__name__)

# DeductionSet fields fed by each statutory category: (employee, employer)
_DEDUCTION_FIELDS = {
    DeductionType.PROVIDENT_FUND: ("pf_employee", "pf_employer"),
    DeductionType.STATE_INSURANCE: ("esi_employee", "esi_employer"),
    DeductionType.TAX_AT_SOURCE: ("tds", None),
    DeductionType.PROFESSIONAL_TAX: ("professional_tax", None),
    DeductionType.OTHER: ("other_deductions", None),
}


class StatutoryRuleLookup(ABC):
    """Source of statutory rate rules for a region and pay date."""

    @abstractmethod
    def get_rules(self, region: str, pay_date: date) -> List[StatutoryRule]:
        ...


class StaticStatutoryRuleTable(StatutoryRuleLookup):
    """In-memory rate table with effective/expiry date handling."""

    def __init__(self, rules: Optional[Iterable[StatutoryRule]] = None):
        self._rules: Dict[str, List[StatutoryRule]] = defaultdict(list)
        for rule in rules or []:
            self.add_rule(rule)

    def add_rule(self, rule: StatutoryRule) -> None:
        self._rules[rule.region].append(rule)

    def get_rules(self, region: str, pay_date: date) -> List[StatutoryRule]:
        applicable = [r for r in self._rules.get(region, []) if r.applies_on(pay_date)]
        return sorted(applicable, key=lambda r: (r.deduction_type.value, r.rule_name))


class StatutoryDeductionEngine:
    """
    Rule evaluation engine for statutory payroll withholdings.
    Supports per-region rules with effective/expiry dates, minimum
    thresholds, base caps and employee/employer splits.
    """

    def __init__(self, lookup: StatutoryRuleLookup, decimal_places: int = 2):
        self.lookup = lookup
        self.decimal_places = decimal_places

    def compute_deductions(
        self,
        region: str,
        pay_date: date,
        components: SalaryComponents,
        other_deductions: Decimal = ZERO,
    ) -> StatutoryDeductionResult:
        """
        Calculate statutory deductions for a pay period.

        Args:
            region: Jurisdiction whose rules apply
            pay_date: Date used to select effective rules
            components: Earning components (already pro-rated if needed)
            other_deductions: Non-statutory deductions to carry into the set

        Returns:
            StatutoryDeductionResult with a DeductionSet and rule details
        """
        if components is None:
            raise InvalidInputError("Salary components are required", field="components")
        if other_deductions < 0:
            raise InvalidInputError(
                "other_deductions must not be negative", field="other_deductions"
            )

        rules = self.lookup.get_rules(region, pay_date)
        totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        totals["other_deductions"] = Decimal(other_deductions)
        applications = []

        gross = sum_money(components.amounts())
        for rule in rules:
            base_amount = components.basic_salary if rule.base == DeductionBase.BASIC else gross
            application = self._apply_rule(rule, base_amount)
            if application is None:
                continue
            applications.append(application)

            employee_field, employer_field = _DEDUCTION_FIELDS[rule.deduction_type]
            totals[employee_field] += application.employee_amount
            if employer_field:
                totals[employer_field] += application.employer_amount

        if not rules:
            logger.debug(f"No statutory rules for region={region} on {pay_date}")

        deductions = DeductionSet(
            **{name: quantize_money(value, self.decimal_places) for name, value in totals.items()}
        )
        return StatutoryDeductionResult(
            region=region,
            pay_date=pay_date,
            deductions=deductions,
            applications=applications,
        )

    def _apply_rule(
        self, rule: StatutoryRule, base_amount: Decimal
    ) -> Optional[StatutoryApplicationDetail]:
        """
        Apply a specific rule. Returns None when the base falls below the
        rule's minimum threshold or is zero.
        """
        taxable = self._calculate_base_amount(rule, base_amount)
        if taxable <= 0:
            return None

        if rule.fixed_amount is not None:
            employee_amount = rule.fixed_amount
        else:
            employee_amount = taxable * rule.employee_rate_percent / 100
        employer_amount = taxable * rule.employer_rate_percent / 100

        return StatutoryApplicationDetail(
            rule_name=rule.rule_name,
            deduction_type=rule.deduction_type,
            base_amount=quantize_money(taxable, self.decimal_places),
            employee_amount=quantize_money(employee_amount, self.decimal_places),
            employer_amount=quantize_money(employer_amount, self.decimal_places),
            calculation_method=self._get_calculation_method(rule),
        )

    def _calculate_base_amount(self, rule: StatutoryRule, amount: Decimal) -> Decimal:
        if rule.min_base_amount is not None and amount < rule.min_base_amount:
            return ZERO
        if rule.max_base_amount is not None and amount > rule.max_base_amount:
            return rule.max_base_amount
        return amount

    def _get_calculation_method(self, rule: StatutoryRule) -> str:
        method_parts = ["fixed" if rule.fixed_amount is not None else "percentage"]

        if rule.max_base_amount is not None:
            method_parts.append("capped")
        if rule.min_base_amount is not None:
            method_parts.append("minimum_threshold")
        if rule.employer_rate_percent > 0:
            method_parts.append("split_employer_employee")

        return "_".join(method_parts)
