"""Error Hierarchy — typed, categorized exceptions for all sitefeed failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Content errors (fetch, validation) are internal: their details are logged,
      never returned to end users — ContentUnavailableError is what callers see
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SiteFeedError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


GENERIC_CONTENT_MESSAGE = "Failed to load content"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource: str | None = None
    slug: str | None = None
    event: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class SiteFeedError(Exception):
    """Base exception for all sitefeed errors."""

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
                    "resource": self.context.resource,
                    "slug": self.context.slug,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class InputValidationError(SiteFeedError):
    """Caller-supplied input (path/query parameter) failed sanitization."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INPUT_VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class WebhookAuthError(SiteFeedError):
    """Webhook delivery carried a missing or wrong secret."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Webhook authentication failed",
            "WEBHOOK_UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ResourceNotFoundError(SiteFeedError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Content Errors (internal, surfaced as ContentUnavailableError) ──

class ContentValidationError(SiteFeedError):
    """CMS payload does not conform to its declared shape."""
    def __init__(
        self, resource: str, violations: list, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource = ctx.resource or resource
        super().__init__(
            f"{resource} payload failed validation "
            f"({len(violations)} violation(s))",
            "CONTENT_VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 502,
        )
        self.violations = violations


class ContentFetchError(SiteFeedError):
    """CMS request failed: non-success status, transport failure, or non-JSON body."""
    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"CMS request failed: {message}",
            "CONTENT_FETCH_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.url = url
        self.status_code = status_code


class ContentUnavailableError(SiteFeedError):
    """Generic, user-facing content failure. Details were logged where it was raised."""
    def __init__(self, resource: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.resource = resource
        super().__init__(
            GENERIC_CONTENT_MESSAGE,
            "CONTENT_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class BuildTriggerError(SiteFeedError):
    """Build hook call failed."""
    def __init__(
        self, message: str, status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Build hook failed: {message}",
            "BUILD_TRIGGER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.status_code = status_code


class DatabaseError(SiteFeedError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
