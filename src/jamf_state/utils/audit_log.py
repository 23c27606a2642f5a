"""Audit logging for writes sent to the Jamf server.

Every create, update and delete (including dry runs) is recorded as one JSON
line in a dedicated audit file. Request bodies are not recorded because they
can carry passwords.
"""
import json
import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

audit_logger = logging.getLogger("jamf_state.audit")


def default_audit_file() -> str:
    return os.path.expanduser(
        os.environ.get("JAMF_STATE_AUDIT_FILE", "~/.jamf-state/audit.log")
    )


def setup_audit_logging(log_file: Optional[str] = None) -> str:
    """Configure audit logging to file.

    Args:
        log_file: Path of the audit log. Defaults to ~/.jamf-state/audit.log
            or $JAMF_STATE_AUDIT_FILE.

    Returns:
        The path the audit log is written to.
    """
    if log_file is None:
        log_file = default_audit_file()

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)

    # Don't propagate to the application log
    audit_logger.propagate = False
    return log_file


@dataclass
class ChangeRecord:
    """Record of one write against the server."""
    timestamp: str
    kind: str
    name: str
    operation: str  # create, modify, delete
    method: str
    url: str
    user: str
    dry_run: bool
    success: bool
    changes: list
    error: Optional[str] = None

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(asdict(self), indent=None)

    @classmethod
    def from_json(cls, json_str: str) -> "ChangeRecord":
        """Parse from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


def log_change(
    kind: str,
    name: str,
    operation: str,
    method: str,
    url: str,
    success: bool,
    changes: Optional[list[str]] = None,
    error: Optional[str] = None,
    dry_run: bool = False,
    user: str = "system",
) -> ChangeRecord:
    """Write one change to the audit log and return the record."""
    record = ChangeRecord(
        timestamp=datetime.now(timezone.utc).isoformat(),
        kind=kind,
        name=name,
        operation=operation,
        method=method,
        url=url,
        user=user,
        dry_run=dry_run,
        success=success,
        changes=list(changes or []),
        error=error,
    )
    audit_logger.info(record.to_json())
    return record


def get_recent_changes(
    log_file: Optional[str] = None,
    kind: Optional[str] = None,
    name: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read recent changes from the audit log.

    Args:
        log_file: Path to audit log. Defaults to the configured audit file
        kind: Filter by resource kind
        name: Filter by resource name
        limit: Maximum number of records to return

    Returns:
        List of ChangeRecords, most recent first
    """
    if log_file is None:
        log_file = default_audit_file()

    if not os.path.exists(log_file):
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if kind and record.kind != kind:
                continue
            if name and record.name != name:
                continue
            records.append(record)

    return list(reversed(records[-limit:]))
