from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional, Tuple

from ....core.money import ZERO, round_whole, sum_money
from ..enums.payroll_enums import AnomalyType
from ..schemas.payroll_schemas import PayrollRecord
from ..schemas.reconciliation_schemas import (
    PeriodRef,
    ReconciliationAnomaly,
    ReconciliationReport,
    ReconciliationSummary,
)

ONE_DECIMAL = Decimal('0.1')


def previous_period(month: int, year: int) -> Tuple[int, int]:
    if month == 1:
        return 12, year - 1
    return month - 1, year


def _percent_change(previous: Decimal, current: Decimal) -> Optional[Decimal]:
    if previous <= 0:
        return None
    change = (current - previous) / previous * 100
    return change.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def _by_employee(records: Iterable[PayrollRecord]) -> Dict[str, PayrollRecord]:
    return {r.employee_id: r for r in records if not r.is_bonus}


def reconcile_periods(
    current: Iterable[PayrollRecord],
    previous: Iterable[PayrollRecord],
    current_period: PeriodRef,
    previous_period_ref: PeriodRef,
    salary_change_percent: Decimal = Decimal('20'),
    deduction_change_percent: Decimal = Decimal('30'),
) -> ReconciliationReport:
    """
    Compare two pay periods per employee and flag anomalies.

    Bonus records are excluded. Thresholds are absolute percentage changes.
    """
    current_map = _by_employee(current)
    previous_map = _by_employee(previous)
    salary_limit = Decimal(str(salary_change_percent))
    deduction_limit = Decimal(str(deduction_change_percent))
    anomalies = []

    for employee_id, prev in previous_map.items():
        if employee_id not in current_map:
            anomalies.append(ReconciliationAnomaly(
                anomaly_type=AnomalyType.MISSING,
                employee_id=employee_id,
                detail="Employee was in previous payroll but missing from current",
                previous_amount=prev.gross_salary,
            ))

    for employee_id, cur in current_map.items():
        prev = previous_map.get(employee_id)
        if prev is None:
            anomalies.append(ReconciliationAnomaly(
                anomaly_type=AnomalyType.NEW,
                employee_id=employee_id,
                detail="New employee not in previous payroll",
                current_amount=cur.gross_salary,
            ))
            continue

        salary_change = _percent_change(prev.gross_salary, cur.gross_salary)
        if salary_change is not None and abs(salary_change) > salary_limit:
            anomalies.append(ReconciliationAnomaly(
                anomaly_type=AnomalyType.SALARY_CHANGE,
                employee_id=employee_id,
                detail=f"Gross salary changed by {salary_change}%",
                previous_amount=prev.gross_salary,
                current_amount=cur.gross_salary,
                change_percent=salary_change,
            ))

        deduction_change = _percent_change(prev.total_deductions, cur.total_deductions)
        if deduction_change is not None and abs(deduction_change) > deduction_limit:
            anomalies.append(ReconciliationAnomaly(
                anomaly_type=AnomalyType.DEDUCTION_CHANGE,
                employee_id=employee_id,
                detail=f"Total deductions changed by {deduction_change}%",
                previous_amount=prev.total_deductions,
                current_amount=cur.total_deductions,
                change_percent=deduction_change,
            ))

    previous_total = sum_money(r.gross_salary for r in previous_map.values())
    current_total = sum_money(r.gross_salary for r in current_map.values())

    average_change = ZERO
    if current_map and previous_map:
        average_change = round_whole(
            current_total / len(current_map) - previous_total / len(previous_map)
        )

    summary = ReconciliationSummary(
        total_payroll_variance=current_total - previous_total,
        total_payroll_variance_percent=_percent_change(previous_total, current_total) or Decimal('0'),
        headcount_change=len(current_map) - len(previous_map),
        average_salary_change=average_change,
    )

    return ReconciliationReport(
        current_period=current_period,
        previous_period=previous_period_ref,
        summary=summary,
        anomalies=anomalies,
    )
