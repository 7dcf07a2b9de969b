# payplatform/modules/billing/validators/billing_validators.py

"""
Validation for plan and add-on catalogue requests and seat counts.
"""

from typing import Any, List, Optional

from ....core.error_schemas import ErrorCodes, ErrorDetail
from ....core.validation import ValidationResult, validate_model
from ..schemas.billing_schemas import (
    CreateAddonRequest,
    CreateBillingPlanRequest,
    UpdateAddonRequest,
    UpdateBillingPlanRequest,
)


def check_counts(employee_count: Optional[int], user_count: Optional[int]) -> List[ErrorDetail]:
    errors = []
    for name, value in (("employee_count", employee_count), ("user_count", user_count)):
        if value is None or value < 0:
            errors.append(ErrorDetail(
                field=name,
                message=f"{name} must be a non-negative integer",
                code=ErrorCodes.INVALID_INPUT,
            ))
    return errors


def validate_plan_input(data: Any) -> ValidationResult[CreateBillingPlanRequest]:
    return validate_model(CreateBillingPlanRequest, data)


def validate_plan_update(data: Any) -> ValidationResult[UpdateBillingPlanRequest]:
    """Validate a partial plan update; an empty update is rejected."""
    result = validate_model(UpdateBillingPlanRequest, data)
    if not result.is_valid:
        return result

    changes = result.value.model_dump(exclude_unset=True)
    if not changes:
        result.add_error(None, "No fields to update", ErrorCodes.INVALID_INPUT)
    return result


def validate_addon_input(data: Any) -> ValidationResult[CreateAddonRequest]:
    return validate_model(CreateAddonRequest, data)


def validate_addon_update(data: Any) -> ValidationResult[UpdateAddonRequest]:
    result = validate_model(UpdateAddonRequest, data)
    if result.is_valid and not result.value.model_dump(exclude_unset=True):
        result.add_error(None, "No fields to update", ErrorCodes.INVALID_INPUT)
    return result
