"""Error Hierarchy — typed, categorized exceptions for every FarmOps failure mode.

Invariants:
    - Every error has a code, an ErrorCategory, an ErrorSeverity and an HTTP status
    - Subclasses declare those as class attributes; the constructor may override them
    - to_response() produces the REST envelope used by every error response
    - User-facing messages carry no internals; `details` is opt-in (insight failures)

Design Decisions:
    - One root class so a single FastAPI handler renders all of them
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where and when an error happened; rendered partly into the envelope."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    resource_id: str | None = None
    details: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class FarmOpsError(Exception):
    code = "INTERNAL_ERROR"
    category = ErrorCategory.INTERNAL
    severity = ErrorSeverity.ERROR
    http_status = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        context: ErrorContext | None = None,
        http_status: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        if code is not None:
            self.code = code
        if category is not None:
            self.category = category
        if severity is not None:
            self.severity = severity
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict:
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "resource_id": self.context.resource_id,
                "retry_after_ms": self.context.retry_after_ms,
            },
        }
        if self.context.details:
            body["details"] = self.context.details
        return {"error": body}


# ─── Client errors (4xx) ────────────────────────────────────────

class RequestValidationFailed(FarmOpsError):
    """Missing or invalid request parameter."""
    code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(message, context=context)
        self.field = field


class AuthenticationError(FarmOpsError):
    code = "AUTHENTICATION_REQUIRED"
    category = ErrorCategory.AUTHENTICATION
    severity = ErrorSeverity.WARNING
    http_status = 401

    def __init__(
        self, message: str = "Authentication required",
        context: ErrorContext | None = None,
    ):
        super().__init__(message, context=context)


class AccessDeniedError(FarmOpsError):
    """Caller is not a member of the organization owning the resource."""
    code = "ACCESS_DENIED"
    category = ErrorCategory.AUTHORIZATION
    severity = ErrorSeverity.WARNING
    http_status = 403

    def __init__(
        self, message: str = "Access denied",
        context: ErrorContext | None = None,
    ):
        super().__init__(message, context=context)


class ResourceNotFoundError(FarmOpsError):
    code = "RESOURCE_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(
        self, resource_type: str, resource_id: str,
        context: ErrorContext | None = None,
    ):
        context = context or ErrorContext()
        context.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found", context=context,
        )
        self.resource_type = resource_type


# ─── Infrastructure errors (5xx) ────────────────────────────────

class DatabaseError(FarmOpsError):
    code = "DATABASE_ERROR"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL
    http_status = 503

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(f"Database {operation} failed: {message}", context=context)
        self.operation = operation


class AIProviderError(FarmOpsError):
    """Anthropic call failed after the client's retry policy gave up."""
    code = "AI_PROVIDER_ERROR"
    category = ErrorCategory.EXTERNAL_API
    severity = ErrorSeverity.CRITICAL
    http_status = 503

    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        context = context or ErrorContext()
        context.retry_after_ms = retry_after_ms
        super().__init__(
            f"AI provider error ({api_error_type}): {message}", context=context,
        )
        self.api_error_type = api_error_type


class StorageError(FarmOpsError):
    code = "STORAGE_ERROR"
    category = ErrorCategory.STORAGE
    severity = ErrorSeverity.CRITICAL

    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(message, context=context)
        self.operation = operation


class InsightGenerationError(FarmOpsError):
    """Insight workflow failed after the farm was found; `details` says why."""
    code = "INSIGHT_GENERATION_FAILED"
    severity = ErrorSeverity.CRITICAL

    def __init__(self, details: str, context: ErrorContext | None = None):
        context = context or ErrorContext()
        context.details = details
        super().__init__("Failed to generate insights", context=context)
