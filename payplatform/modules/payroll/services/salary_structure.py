"""
Salary structure evaluation and attendance pro-ration.

Both run upstream of ``SalaryComputationEngine``: they decide the component
amounts that the engine then sums.
"""

import logging
from decimal import Decimal
from typing import Dict, Sequence

from ....core.exceptions import InvalidInputError
from ....core.money import ZERO, quantize_money, round_whole
from ..enums.payroll_enums import CalculationType, ComponentType, PayFrequency
from ..schemas.payroll_schemas import AttendanceSummary, SalaryComponents
from ..schemas.structure_schemas import SalaryStructureComponent, StructureBreakdown

logger = logging.getLogger(__name__)

PERIODS_PER_YEAR = {
    PayFrequency.WEEKLY: 52,
    PayFrequency.BIWEEKLY: 26,
    PayFrequency.SEMIMONTHLY: 24,
    PayFrequency.MONTHLY: 12,
}


def periods_per_year(frequency: PayFrequency) -> int:
    return PERIODS_PER_YEAR.get(PayFrequency(frequency), 12)


def compute_from_structure(
    components: Sequence[SalaryStructureComponent],
    annual_ctc: Decimal,
    pay_periods: int = 12,
) -> StructureBreakdown:
    """
    Evaluate a salary structure for one pay period.

    Earnings are resolved in three passes so that percentage-of-basic items
    can see the basic amount: percentage of CTC per period, then fixed
    amounts, then percentage of basic. Amounts round to whole currency units.
    """
    if annual_ctc is None or annual_ctc <= 0:
        raise InvalidInputError("annual_ctc must be positive", field="annual_ctc")
    if pay_periods <= 0:
        raise InvalidInputError("pay_periods must be positive", field="pay_periods")

    ctc_per_period = round_whole(Decimal(annual_ctc) / pay_periods)
    earnings: Dict[str, Decimal] = {}
    deductions: Dict[str, Decimal] = {}
    basic = ZERO
    gross = ZERO

    def is_basic(component: SalaryStructureComponent) -> bool:
        return "basic" in component.name.lower()

    earning_items = [c for c in components if c.component_type == ComponentType.EARNING]

    for component in earning_items:
        if component.calculation_type == CalculationType.PERCENTAGE_OF_GROSS:
            amount = round_whole(ctc_per_period * component.value / 100)
            earnings[component.name] = amount
            if is_basic(component):
                basic = amount
            gross += amount

    for component in earning_items:
        if component.calculation_type == CalculationType.FIXED:
            amount = Decimal(component.value)
            earnings[component.name] = amount
            if is_basic(component):
                basic = amount
            gross += amount

    for component in earning_items:
        if component.calculation_type == CalculationType.PERCENTAGE_OF_BASIC:
            amount = round_whole(basic * component.value / 100)
            earnings[component.name] = amount
            gross += amount

    for component in components:
        if component.component_type != ComponentType.DEDUCTION:
            continue
        if component.calculation_type == CalculationType.FIXED:
            amount = Decimal(component.value)
        elif component.calculation_type == CalculationType.PERCENTAGE_OF_BASIC:
            amount = round_whole(basic * component.value / 100)
        else:
            amount = round_whole(ctc_per_period * component.value / 100)
        deductions[component.name] = amount

    return StructureBreakdown(
        basic_per_period=basic,
        gross_per_period=gross,
        earnings=earnings,
        deductions=deductions,
    )


def to_salary_components(breakdown: StructureBreakdown) -> SalaryComponents:
    """Map named structure earnings onto the fixed component buckets."""
    hra = ZERO
    special = ZERO
    other = ZERO
    for name, amount in breakdown.earnings.items():
        key = name.lower()
        if "basic" in key:
            continue
        if "hra" in key or "house rent" in key:
            hra += amount
        elif "special" in key:
            special += amount
        else:
            other += amount

    return SalaryComponents(
        basic_salary=breakdown.basic_per_period,
        hra=hra,
        special_allowance=special,
        other_allowances=other,
    )


def prorate_components(
    components: SalaryComponents,
    attendance: AttendanceSummary,
    decimal_places: int = 2,
) -> SalaryComponents:
    """Scale every component by days_worked / days_in_period."""
    if attendance.days_worked > attendance.days_in_period:
        raise InvalidInputError(
            "days_worked cannot exceed days_in_period", field="attendance.days_worked"
        )
    if attendance.days_worked == attendance.days_in_period:
        return components.model_copy()

    ratio = Decimal(attendance.days_worked) / Decimal(attendance.days_in_period)
    logger.debug(f"Pro-rating components by {attendance.days_worked}/{attendance.days_in_period}")
    return SalaryComponents(
        **{
            name: quantize_money(getattr(components, name) * ratio, decimal_places)
            for name in SalaryComponents.model_fields
        }
    )
