from pydantic import BaseModel, Field
from typing import Dict
from decimal import Decimal

from ....core.money import Money, ZERO
from ..enums.payroll_enums import CalculationType, ComponentType


class SalaryStructureComponent(BaseModel):
    """A line of a salary structure template."""

    name: str = Field(..., min_length=1)
    component_type: ComponentType = ComponentType.EARNING
    calculation_type: CalculationType
    value: Decimal = Field(..., ge=0, description="Fixed amount or percentage")


class StructureBreakdown(BaseModel):
    """Per-period amounts derived from a salary structure."""

    basic_per_period: Money = ZERO
    gross_per_period: Money = ZERO
    earnings: Dict[str, Money] = Field(default_factory=dict)
    deductions: Dict[str, Money] = Field(default_factory=dict)
