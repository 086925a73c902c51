"""Error Hierarchy: typed, categorized exceptions for all subscription failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are caller mistakes; store errors (500-level) are critical
    - to_response() produces the REST envelope
    - No raw driver or SQL text ever reaches a user-facing message

Design Decisions:
    - Single hierarchy with SubscriptionServiceError base: one FastAPI handler catches all
    - ErrorContext as dataclass: carries operation/target for diagnosis without
      coupling to the logging framework
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    subscription_id: str | None = None
    operation: str | None = None
    filters: list[dict] | None = None


class SubscriptionServiceError(Exception):
    """Base exception for all subscription service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "subscription_id": self.context.subscription_id,
                    "operation": self.context.operation,
                    "filters": self.context.filters,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(SubscriptionServiceError):
    """A subscription field violates a domain rule."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InvalidRangeError(SubscriptionServiceError):
    """Cost period ends before it starts."""
    def __init__(
        self, period_start: date, period_end: date,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Period end {period_end.isoformat()} is before "
            f"period start {period_start.isoformat()}",
            "INVALID_RANGE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.period_start = period_start
        self.period_end = period_end


class NotFoundError(SubscriptionServiceError):
    """Requested subscription does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.subscription_id = ctx.subscription_id or resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreError(SubscriptionServiceError):
    """Record store operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation
