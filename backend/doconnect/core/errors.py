"""Error Hierarchy - typed, categorized exceptions for all DoConnect failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller errors (400-level) are raised before any IO; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages (constraint names, SQL, paths)
    - Nothing in this hierarchy is retried by the component that raises it

Design Decisions:
    - Single hierarchy with DoConnectError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    STORAGE = "storage"
    CONFIGURATION = "configuration"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    question_id: str | None = None
    answer_id: str | None = None
    debug_info: dict[str, Any] | None = None


class DoConnectError(Exception):
    """Base exception for all DoConnect errors."""

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
            }
        }


# ─── Caller Errors (400-level) ──────────────────────────────────

class InvalidParentReferenceError(DoConnectError):
    """Image parent must be exactly one of a question or an answer."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Exactly one of question_id or answer_id must be supplied",
            "INVALID_PARENT_REFERENCE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class UploadValidationError(DoConnectError):
    """Upload batch rejected before any file was written."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UPLOAD_VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidTokenError(DoConnectError):
    """Bearer token missing, malformed, tampered, or expired."""
    def __init__(self, reason: str = "invalid", context: ErrorContext | None = None):
        super().__init__(
            "Could not validate credentials",
            "INVALID_TOKEN", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )
        self.reason = reason


class InvalidCredentialsError(DoConnectError):
    """Login rejected. Never says which half of the credentials was wrong."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid username/email or password",
            "INVALID_CREDENTIALS", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AccountExistsError(DoConnectError):
    """Registration rejected: username or email already taken."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Username or email is already registered",
            "ACCOUNT_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class AccessDeniedError(DoConnectError):
    def __init__(self, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"Not allowed to {action}",
            "ACCESS_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.action = action


class ResourceNotFoundError(DoConnectError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ConstraintViolationError(DoConnectError):
    """Commit rejected by an integrity constraint (exclusivity, required owner, uniqueness).

    Signals a bug in how the caller built the aggregate, not a transient fault.
    """
    def __init__(self, operation: str = "commit", context: ErrorContext | None = None):
        super().__init__(
            "Integrity constraint violated",
            "CONSTRAINT_VIOLATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.operation = operation


class DatabaseError(DoConnectError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class StorageWriteError(DoConnectError):
    """Writing an uploaded file to the directory of record failed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"File storage failed: {message}",
            "STORAGE_WRITE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )


class ConfigurationError(DoConnectError):
    """Settings unusable (e.g. signing key below the algorithm minimum)."""
    def __init__(self, setting: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid configuration for {setting}: {message}",
            "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.setting = setting
