# payplatform/core/exceptions.py

"""
Exception hierarchy shared by the payroll, billing and revenue modules.

Engines raise ``InvalidInputError`` only; ``NotFoundError`` and
``ConflictError`` belong to the service layer. Each exception carries the
HTTP status a web layer would translate it to.
"""

from typing import Any, List, Optional

from .error_schemas import ErrorCodes, ErrorDetail, ErrorResponse


class PlatformError(Exception):
    """Base exception for the computation core"""
    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.INVALID_INPUT,
        details: Optional[List[ErrorDetail]] = None,
        status_code: int = 400
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []
        self.status_code = status_code

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=type(self).__name__,
            message=self.message,
            code=self.code,
            details=self.details or None,
            status_code=self.status_code,
        )


class InvalidInputError(PlatformError):
    """Malformed or out-of-range input"""
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[List[ErrorDetail]] = None,
        code: str = ErrorCodes.INVALID_INPUT,
    ):
        if field and not details:
            details = [ErrorDetail(field=field, message=message, code=code)]
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=422
        )


class NotFoundError(PlatformError):
    """Resource not found error"""
    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} with identifier {identifier} not found",
            code=ErrorCodes.RECORD_NOT_FOUND,
            status_code=404
        )
        self.resource = resource
        self.identifier = identifier


class ConflictError(PlatformError):
    """Duplicate record or state conflict"""
    def __init__(self, message: str, code: str = ErrorCodes.DUPLICATE_RECORD):
        super().__init__(
            message=message,
            code=code,
            status_code=409
        )


class InvalidStateTransitionError(ConflictError):
    """Lifecycle transition not allowed from the current status"""
    def __init__(self, resource: str, current: str, target: str):
        super().__init__(
            message=f"Cannot move {resource} from {current} to {target}",
            code=ErrorCodes.INVALID_STATE_TRANSITION,
        )
        self.current = current
        self.target = target
