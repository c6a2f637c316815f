from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable machine-readable error tags returned in the ``error`` field."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    OPTIMISTIC_LOCK_ERROR = "OPTIMISTIC_LOCK_ERROR"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Validation error",
    ErrorCode.UNAUTHORIZED: "Not authenticated",
    ErrorCode.FORBIDDEN: "Insufficient permissions",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.CONFLICT: "State conflict",
    ErrorCode.OPTIMISTIC_LOCK_ERROR: (
        "Record has been modified by another user. Please refresh and try again."
    ),
    ErrorCode.TOO_MANY_REQUESTS: "Too many requests",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
}
