"""Utility modules for retries, logging and auditing."""
from .connection import with_retry, poll_until
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    perf_logger,
)
from .audit_log import (
    ChangeRecord,
    log_change,
    setup_audit_logging,
    get_recent_changes,
)

__all__ = [
    "with_retry",
    "poll_until",
    "setup_logging",
    "timed",
    "timed_section",
    "perf_logger",
    "ChangeRecord",
    "log_change",
    "setup_audit_logging",
    "get_recent_changes",
]
