# payplatform/core/error_schemas.py

"""
Error response schemas for structured error handling.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class ErrorDetail(BaseModel):
    """Detailed error information"""

    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standardized error response"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "InvalidInputError",
                "message": "Invalid payroll input",
                "code": "INVALID_INPUT",
                "details": [
                    {
                        "field": "components.basic_salary",
                        "message": "Input should be greater than or equal to 0",
                        "code": "greater_than_equal",
                    }
                ],
                "status_code": 422,
                "timestamp": "2025-01-30T12:00:00Z",
            }
        }
    )

    error: str = Field(..., description="Error type or category")
    message: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")
    details: Optional[List[ErrorDetail]] = Field(
        None, description="Additional error details"
    )
    status_code: int = Field(..., description="HTTP status a web layer should use")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorCodes:
    """Centralized error codes"""

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ATTENDANCE = "INVALID_ATTENDANCE"
    INVALID_PERIOD = "INVALID_PERIOD"
    NEGATIVE_NET_SALARY = "NEGATIVE_NET_SALARY"

    # Lookup errors
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"

    # Conflict errors
    DUPLICATE_RECORD = "DUPLICATE_RECORD"
    DUPLICATE_INVOICE = "DUPLICATE_INVOICE"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    RESOURCE_UNAVAILABLE = "RESOURCE_UNAVAILABLE"
