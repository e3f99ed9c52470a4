"""Error Hierarchy — typed, categorized exceptions for all SkillSharp failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope {"error": {...}}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SkillSharpError base: one global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    resource_id: str | None = None
    details: list[dict[str, Any]] | None = None


class SkillSharpError(Exception):
    """Base exception for all SkillSharp errors."""

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
        body: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.details:
            body["details"] = self.context.details
        return {"error": body}


# ─── Authentication & Authorization ─────────────────────────────

class InvalidCredentialsError(SkillSharpError):
    """Unknown email or wrong password."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid email or password",
            "INVALID_CREDENTIALS", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AuthenticationRequiredError(SkillSharpError):
    """Missing, expired or malformed bearer token."""
    def __init__(self, reason: str = "Authentication required", context: ErrorContext | None = None):
        super().__init__(
            reason, "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AccountBlockedError(SkillSharpError):
    """Profile deactivated by an admin."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Your account has been blocked. Please contact support.",
            "ACCOUNT_BLOCKED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class SessionSupersededError(SkillSharpError):
    """The presented session token no longer matches the user's registered session."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Your session was ended because you logged in from another device.",
            "SESSION_SUPERSEDED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(SkillSharpError):
    """Caller lacks the role or ownership required for the operation."""
    def __init__(self, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"Not allowed to {action}",
            "PERMISSION_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class PremiumRequiredError(SkillSharpError):
    """Premium content requested without an active premium window."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "This chapter requires an active premium subscription",
            "PREMIUM_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.INFO, context, 402,
        )


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(SkillSharpError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConflictError(SkillSharpError):
    """State conflict: duplicate record or repeated one-shot action."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class BusinessRuleError(SkillSharpError):
    """A domain rule rejected the request (exam window, empty question set, ...)."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class NotApprovedError(SkillSharpError):
    """Student is not an approved member of the exam's institute."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You are not approved to take this exam",
            "NOT_APPROVED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class CsvImportError(SkillSharpError):
    """Uploaded CSV failed validation. Per-row problems in context.details."""
    def __init__(self, message: str, row_errors: list[dict] | None = None):
        super().__init__(
            message, "CSV_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ErrorContext(details=row_errors), 400,
        )
        self.row_errors = row_errors or []


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SkillSharpError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
