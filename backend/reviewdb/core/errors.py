"""Error Hierarchy - typed, categorized exceptions for all reviewdb failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - A lookup that finds nothing is NOT an error: reads return None / 0 / []
    - ResourceNotFoundError is raised only when a mutation targets a missing row
    - No retry policy anywhere: every error is fatal to the triggering operation

Design Decisions:
    - Single hierarchy with ReviewDbError base: callers catch one type at the boundary
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories."""
    STORAGE_UNAVAILABLE = "storage_unavailable"
    SCHEMA = "schema"
    INTEGRITY = "integrity"
    TRANSACTION = "transaction"
    RESOURCE_NOT_FOUND = "resource_not_found"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    review_id: str | None = None
    path_name: str | None = None
    debug_info: dict[str, Any] | None = None


class ReviewDbError(Exception):
    """Base exception for all reviewdb errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Convert to a serializable error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "review_id": self.context.review_id,
                    "path_name": self.context.path_name,
                },
            }
        }


# ─── Domain Errors ──────────────────────────────────────────────

class ResourceNotFoundError(ReviewDbError):
    """A mutation targeted a row that does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors ──────────────────────────────────────

class StorageUnavailableError(ReviewDbError):
    """The SQLite driver or database file cannot be opened.

    Raised once at startup; the store stays unusable for the process
    until configuration changes.
    """
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage unavailable: {message}",
            "STORAGE_UNAVAILABLE", ErrorCategory.STORAGE_UNAVAILABLE,
            ErrorSeverity.CRITICAL, context,
        )


class SchemaVersionError(ReviewDbError):
    """On-disk schema stamp differs from the version this code writes."""
    def __init__(self, found: int, expected: int, context: ErrorContext | None = None):
        super().__init__(
            f"Schema version {found} found, {expected} expected",
            "SCHEMA_VERSION_MISMATCH", ErrorCategory.SCHEMA,
            ErrorSeverity.CRITICAL, context,
        )
        self.found = found
        self.expected = expected


class DatabaseError(ReviewDbError):
    """Database operation failed and its transaction was rolled back."""
    def __init__(
        self,
        message: str,
        operation: str,
        context: ErrorContext | None = None,
        code: str = "DATABASE_ERROR",
        category: ErrorCategory = ErrorCategory.TRANSACTION,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            code, category, ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation


class IntegrityViolationError(DatabaseError):
    """Foreign key or constraint violation (e.g. child row without parent)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "commit", context,
            code="INTEGRITY_VIOLATION", category=ErrorCategory.INTEGRITY,
        )
