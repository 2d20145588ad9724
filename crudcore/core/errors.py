"""Error Hierarchy — typed, kind-tagged exceptions for every provider failure mode.

Invariants:
    - Every error has a code (str), kind (ErrorKind), severity (ErrorSeverity)
    - Client errors (400-level) never carry internal details; infrastructure errors are critical
    - to_response() produces the REST envelope used by api/error_handlers.py
    - Login failures share one message regardless of cause

Design Decisions:
    - Single hierarchy with CrudCoreError base: one FastAPI handler catches all
    - ErrorKind is the sum type callers branch on; code is the stable machine identifier
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(str, Enum):
    """Distinguishable failure cases surfaced by providers."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Request-scoped details attached to an error for logs and responses."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    principal_id: str | None = None
    resource: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class CrudCoreError(Exception):
    """Base exception for all crudcore errors."""

    def __init__(
        self,
        message: str,
        code: str,
        kind: ErrorKind,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.kind = kind
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "kind": self.kind.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "resource": self.context.resource,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(CrudCoreError):
    """Malformed or out-of-range input, raised before any persistence access."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorKind.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class AuthenticationError(CrudCoreError):
    """Credentials or token could not be verified."""
    def __init__(
        self, message: str = "Invalid credentials", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "AUTHENTICATION_FAILED", ErrorKind.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(CrudCoreError):
    """Principal is not allowed to act on the target resource."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorKind.FORBIDDEN,
            ErrorSeverity.WARNING, context, 403,
        )


class NotFoundError(CrudCoreError):
    """Requested resource does not exist or is already deleted."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorKind.NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(CrudCoreError):
    """Uniqueness violation, detected by pre-check or by constraint code."""
    def __init__(
        self,
        message: str,
        constraint_code: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CONFLICT", ErrorKind.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.constraint_code = constraint_code


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(CrudCoreError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorKind.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class MappingError(CrudCoreError):
    """A record does not satisfy the declared shape of its response DTO."""
    def __init__(
        self, field_name: str, reason: str = "is required but null",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Field '{field_name}' {reason}",
            "MAPPING_ERROR", ErrorKind.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.field_name = field_name
