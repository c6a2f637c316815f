from __future__ import annotations

from typing import Any, Optional

from readyforms.utils.error_codes import ErrorCode, ERROR_MESSAGES


def _normalize_error_code(value: ErrorCode | str | None) -> ErrorCode:
    if value is None:
        return ErrorCode.INTERNAL_ERROR
    if isinstance(value, ErrorCode):
        return value
    try:
        return ErrorCode(str(value))
    except ValueError:
        return ErrorCode.INTERNAL_ERROR


class ReadyFormsException(Exception):
    """Base exception for the ReadyForms API.

    API response format is handled by the global exception handler.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | str = ErrorCode.INTERNAL_ERROR,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        normalized = _normalize_error_code(code)
        if message is None:
            message = ERROR_MESSAGES.get(normalized, ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR])

        self.message = message
        self.code = normalized.value
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, "error": self.code, "details": self.details}


class BadRequestException(ReadyFormsException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.VALIDATION_ERROR, details=details, status_code=400)


class UnauthorizedException(ReadyFormsException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.UNAUTHORIZED, details=details, status_code=401)


class ForbiddenException(ReadyFormsException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.FORBIDDEN, details=details, status_code=403)


class NotFoundException(ReadyFormsException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.NOT_FOUND, details=details, status_code=404)


class ConflictException(ReadyFormsException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.CONFLICT, details=details, status_code=409)


class TooManyRequestsException(ReadyFormsException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.TOO_MANY_REQUESTS, details=details, status_code=429)
