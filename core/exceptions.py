"""
Custom exceptions for the planning import pipeline with structured error context.

Each exception carries a context dictionary so failures can be logged with
enough detail to locate the offending file, train or batch.

Exception Hierarchy:
    PipelineError (base)
    ├── FileSourceError
    │   ├── FileListingError
    │   └── DownloadError
    ├── DataValidityError
    │   ├── ParseError
    │   └── MappingError
    ├── CommitError
    │   └── CancellationCommitError
    ├── EventPublishError
    ├── ProgressTrackingError
    └── RetryableError / NonRetryableError (mixins)

Error classes map onto the pipeline's failure taxonomy:
    - transient infrastructure errors are RetryableError subclasses; the
      affected file is marked Failed and picked up again on the next run
    - data validity errors are NonRetryableError subclasses; retrying the
      same bytes would fail the same way
    - EventPublishError is raised after a durable commit and is reported,
      never rolled back
"""

from typing import Optional, Dict, Any
from datetime import datetime


class PipelineError(Exception):
    """
    Base exception for all planning import errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (file, train, batch size, ...)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(PipelineError):
    """
    Marker for errors that clear up on a later run.

    Use this for transient errors like:
    - File share or blob storage unavailable
    - Database connection drops and deadlocks
    - Message bus endpoint unavailable
    """


class NonRetryableError(PipelineError):
    """
    Marker for errors that will recur on the same input.

    Use this for permanent errors like:
    - Export file is not well-formed XML
    - Record is missing mandatory attributes
    """


# ============================================================================
# File Source Errors
# ============================================================================

class FileSourceError(RetryableError):
    """Base exception for file source failures."""
    pass


class FileListingError(FileSourceError):
    """
    Exception raised when pending planning files cannot be enumerated.

    Context should include:
        - location: Directory or container that was listed
        - prefix: File name prefix used for filtering
    """
    pass


class DownloadError(FileSourceError):
    """
    Exception raised when a planning file cannot be retrieved.

    Context should include:
        - file_name: Name of the file
    """
    pass


# ============================================================================
# Data Validity Errors
# ============================================================================

class DataValidityError(NonRetryableError):
    """Base exception for malformed export data."""
    pass


class ParseError(DataValidityError):
    """
    Exception raised when an export file cannot be parsed.

    Context should include:
        - file_name: Name of the file (when known)
        - line_number: Line where the parser gave up (if available)
    """
    pass


class MappingError(DataValidityError):
    """
    Exception raised when a single parsed record cannot be mapped.

    Context should include:
        - source_file: File the record came from
        - record_index: Position of the record in the file
        - field_errors: Validation errors reported for the record
    """
    pass


# ============================================================================
# Commit Errors
# ============================================================================

class CommitError(RetryableError):
    """
    Exception raised when the insert/update transaction fails.

    Context should include:
        - operation: UPSERT or CANCEL
        - table_name: Name of the table
        - batch_size: Number of rows in the failed transaction
    """
    pass


class CancellationCommitError(CommitError):
    """Exception raised when the cancellation transaction fails."""
    pass


class ProgressTrackingError(RetryableError):
    """
    Exception raised when the processing log cannot be read or appended.

    Context should include:
        - file_path: File whose progress was being tracked
        - operation: read or write
    """
    pass


# ============================================================================
# Post-commit Errors
# ============================================================================

class EventPublishError(PipelineError):
    """
    Exception raised when events for a committed batch cannot be published.

    The store is already consistent when this is raised; downstream
    consumers may have missed the events and need an out-of-band sweep.

    Context should include:
        - event_count: Number of events in the failed publish
        - endpoint: Message bus endpoint (if applicable)
    """
    pass
