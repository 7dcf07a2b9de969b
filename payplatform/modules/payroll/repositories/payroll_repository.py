"""
Persistence contract for payroll records.

The engines never see this interface; services load plain schema objects
through it and write computed results back.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..schemas.payroll_schemas import PayrollRecord


class PayrollRepository(ABC):

    @abstractmethod
    def get(self, payroll_id: str) -> Optional[PayrollRecord]:
        ...

    @abstractmethod
    def find_by_period(self, employee_id: str, month: int, year: int) -> Optional[PayrollRecord]:
        ...

    @abstractmethod
    def list_by_period(self, company_id: str, month: int, year: int) -> List[PayrollRecord]:
        ...

    @abstractmethod
    def add(self, record: PayrollRecord) -> PayrollRecord:
        ...

    @abstractmethod
    def update(self, record: PayrollRecord) -> PayrollRecord:
        ...

    @abstractmethod
    def delete(self, payroll_id: str) -> None:
        ...

    def new_id(self) -> str:
        return str(uuid.uuid4())


class InMemoryPayrollRepository(PayrollRepository):
    """Dictionary-backed repository; stores copies so callers cannot mutate state."""

    def __init__(self):
        self._records: Dict[str, PayrollRecord] = {}

    def get(self, payroll_id: str) -> Optional[PayrollRecord]:
        record = self._records.get(payroll_id)
        return record.model_copy(deep=True) if record else None

    def find_by_period(self, employee_id: str, month: int, year: int) -> Optional[PayrollRecord]:
        for record in self._records.values():
            if record.period_key == (employee_id, month, year) and not record.is_bonus:
                return record.model_copy(deep=True)
        return None

    def list_by_period(self, company_id: str, month: int, year: int) -> List[PayrollRecord]:
        return [
            r.model_copy(deep=True)
            for r in self._records.values()
            if r.company_id == company_id
            and r.pay_period_month == month
            and r.pay_period_year == year
        ]

    def add(self, record: PayrollRecord) -> PayrollRecord:
        if record.id in self._records:
            raise KeyError(f"Payroll {record.id} already stored")
        self._records[record.id] = record.model_copy(deep=True)
        return record

    def update(self, record: PayrollRecord) -> PayrollRecord:
        if record.id not in self._records:
            raise KeyError(f"Payroll {record.id} not stored")
        self._records[record.id] = record.model_copy(deep=True)
        return record

    def delete(self, payroll_id: str) -> None:
        self._records.pop(payroll_id, None)
