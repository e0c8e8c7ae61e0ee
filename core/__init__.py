"""
Core utilities and configuration for the train formation planning import.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Database connection and session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities
    metrics: Prometheus counters and job timings

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import CommitError, DownloadError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "async_session_maker",
    "setup_logging",
    "ImportMetrics",
    # Exceptions
    "PipelineError",
    "RetryableError",
    "NonRetryableError",
    "FileSourceError",
    "FileListingError",
    "DownloadError",
    "DataValidityError",
    "ParseError",
    "MappingError",
    "CommitError",
    "CancellationCommitError",
    "ProgressTrackingError",
    "EventPublishError",
]
