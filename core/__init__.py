"""
Core utilities and configuration for the Notion backup tool.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and the operational error log format

Usage:
    from core.config import settings
    from core.exceptions import FetchError, SchemaMismatchError
    from core.logging import setup_logging, log_error

Example:
    # Initialize logging with a run log
    setup_logging(Path("logs") / "20260101T000000Z.log")
"""
