from enum import Enum


class PayrollStatus(str, Enum):
    DRAFT = "DRAFT"
    PROCESSED = "PROCESSED"
    PAID = "PAID"
    HOLD = "HOLD"


class AdjustmentType(str, Enum):
    EARNING = "EARNING"
    DEDUCTION = "DEDUCTION"


class PayFrequency(str, Enum):
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    SEMIMONTHLY = "SEMIMONTHLY"
    MONTHLY = "MONTHLY"


class DeductionType(str, Enum):
    """Statutory withholding categories."""
    PROVIDENT_FUND = "PF"
    STATE_INSURANCE = "ESI"
    TAX_AT_SOURCE = "TDS"
    PROFESSIONAL_TAX = "PT"
    OTHER = "OTHER"


class DeductionBase(str, Enum):
    """Salary figure a statutory rule is applied to."""
    BASIC = "BASIC"
    GROSS = "GROSS"


class ComponentType(str, Enum):
    EARNING = "EARNING"
    DEDUCTION = "DEDUCTION"


class CalculationType(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE_OF_GROSS = "PERCENTAGE_OF_GROSS"
    PERCENTAGE_OF_BASIC = "PERCENTAGE_OF_BASIC"


class AnomalyType(str, Enum):
    MISSING = "MISSING"
    NEW = "NEW"
    SALARY_CHANGE = "SALARY_CHANGE"
    DEDUCTION_CHANGE = "DEDUCTION_CHANGE"
