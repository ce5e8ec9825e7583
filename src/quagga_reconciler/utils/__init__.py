"""Utility modules for connection retries, logging and auditing."""
from .audit_log import ChangeRecord, ChangeTracker, get_recent_changes, setup_audit_logging
from .connection import RETRYABLE_EXCEPTIONS, connect_with_retry, is_retryable
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    perf_logger,
)

__all__ = [
    "ChangeRecord",
    "ChangeTracker",
    "get_recent_changes",
    "setup_audit_logging",
    "RETRYABLE_EXCEPTIONS",
    "connect_with_retry",
    "is_retryable",
    "setup_logging",
    "timed",
    "timed_section",
    "perf_logger",
]
