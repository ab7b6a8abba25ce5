"""
Custom exceptions for the backup pipeline with structured error context.

Each exception carries a context dictionary so the operational log can dump
exactly what was being processed when it failed.

Exception Hierarchy:
    BackupException (base)
    ├── FetchError
    │   ├── AuthenticationError
    │   ├── ResourceNotFoundError
    │   └── RateLimitError
    ├── TransformationError
    │   ├── EmptyInputError
    │   ├── SchemaMismatchError
    │   └── RecordFormatError
    ├── PersistenceError
    └── ConfigurationError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class BackupException(Exception):
    """
    Base exception for all backup-related errors.

    Every subtree names the pipeline phase it belongs to, so one error log
    line says which collection failed and at which step.

    Attributes:
        message: Human-readable error message
        context: Additional context information (collection, counters, etc.)
        original_exception: The original exception that was caught (if any)
    """

    phase = "backup"

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    @property
    def collection(self) -> Optional[str]:
        """Logical collection name, falling back to the remote collection id"""
        return self.context.get("collection") or self.context.get("collection_id")

    def __str__(self) -> str:
        where = f"{self.phase} {self.collection}" if self.collection else self.phase
        text = f"[{where}] {self.__class__.__name__}: {self.message}"

        details = {k: v for k, v in self.context.items() if k != "collection"}
        if details:
            text += " (" + ", ".join(f"{k}={v}" for k, v in details.items()) + ")"

        if self.original_exception:
            text += f" <- {type(self.original_exception).__name__}: {self.original_exception}"

        return text

    def to_dict(self) -> Dict[str, Any]:
        """Structured form written to the operational log."""
        return {
            "error_type": self.__class__.__name__,
            "phase": self.phase,
            "collection": self.collection,
            "message": self.message,
            "context": self.context,
            "at": self.timestamp.isoformat(),
            "cause": repr(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Fetch Errors
# ============================================================================

class FetchError(BackupException):
    """
    Raised when paginating a remote collection fails.

    The whole collection fetch is aborted; no records are returned.

    Context should include:
        - collection_id: The collection being fetched
        - records_fetched: Records accumulated before the failure (discarded)
        - page: 1-based number of the failing page request
        - status_code: HTTP status code (if applicable)
    """

    phase = "fetch"


class AuthenticationError(FetchError):
    """Authentication failures (HTTP 401, 403)."""
    pass


class ResourceNotFoundError(FetchError):
    """Collection not found or not shared with the integration (HTTP 404)."""
    pass


class RateLimitError(FetchError):
    """Remote request-rate ceiling exceeded (HTTP 429)."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None,
        retry_after: Optional[int] = None
    ):
        super().__init__(message, context, original_exception)
        self.retry_after = retry_after  # Seconds suggested by the remote
        if retry_after:
            self.context["retry_after"] = retry_after


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(BackupException):
    """Base exception for record projection failures."""

    phase = "project"


class EmptyInputError(TransformationError):
    """
    Raised when a table projection is attempted on zero records.

    The header is learned from the first record, so there is nothing to
    derive it from.
    """
    pass


class SchemaMismatchError(TransformationError):
    """
    Raised when a record's property names differ from the header record's.

    Context should include:
        - record_id: ID of the diverging record
        - missing: Header properties the record lacks
        - unexpected: Properties the record has that the header lacks
    """
    pass


class RecordFormatError(TransformationError):
    """Raised when a raw record lacks the id/properties shape."""
    pass


# ============================================================================
# Persistence / Configuration Errors
# ============================================================================

class PersistenceError(BackupException):
    """
    Raised when writing or reading a backup artifact fails.

    Context should include:
        - path: Artifact path
        - collection: Logical collection name (if applicable)
    """

    phase = "persist"


class ConfigurationError(BackupException):
    """Raised when required settings (token, collection ids) are missing."""

    phase = "configure"
