"""Audit trail of command plans sent to routers.

One JSON object per line, written through the ``quagga_reconciler.audit``
logger. Each entry holds the vtysh command list, the resource records as
read before planning and as requested, and the console's verdict.
Dry runs are recorded too, flagged with ``dry_run``.
"""
import json
import logging
import os
from collections import deque
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

audit_logger = logging.getLogger("quagga_reconciler.audit")

DEFAULT_AUDIT_DIR = "~/.quagga-reconciler"
AUDIT_FILE_NAME = "audit.log"

# Console output kept per entry
MAX_OUTPUT = 1000


def audit_log_path(log_dir: Optional[str] = None) -> Path:
    """Location of the audit file inside ``log_dir`` (or the default dir)."""
    return Path(os.path.expanduser(log_dir or DEFAULT_AUDIT_DIR)) / AUDIT_FILE_NAME


def setup_audit_logging(log_dir: Optional[str] = None) -> Path:
    """Send audit entries to a rotating file.

    Args:
        log_dir: Directory for the audit file. Defaults to ~/.quagga-reconciler/

    Returns:
        Path of the audit log file
    """
    audit_file = audit_log_path(log_dir)
    audit_file.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(audit_file, maxBytes=10 * 1024 * 1024, backupCount=10)
    handler.setFormatter(logging.Formatter("%(message)s"))

    audit_logger.handlers.clear()
    audit_logger.addHandler(handler)
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False
    return audit_file


@dataclass
class ChangeRecord:
    """One command plan as sent (or previewed) on a router."""
    timestamp: str
    device_id: str
    operation: str  # create, modify, delete or reconcile
    user: str
    dry_run: bool
    success: bool
    parameters: dict
    commands: list = field(default_factory=list)
    before_state: Optional[dict] = None
    after_state: Optional[dict] = None
    output: str = ""
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, line: str) -> "ChangeRecord":
        return cls(**json.loads(line))

    def describe(self) -> str:
        """Single line summary for listings."""
        if self.dry_run:
            verdict = "dry-run"
        elif self.success:
            verdict = "ok"
        else:
            verdict = f"failed: {self.error}"
        resources = ", ".join(self.parameters.get("resources", [])) or "-"
        return (
            f"{self.timestamp} {self.device_id} {self.operation} [{resources}] "
            f"{len(self.commands)} commands by {self.user}, {verdict}"
        )


class ChangeTracker:
    """Writes audit entries for one router."""

    def __init__(self, device_id: str, user: str = "system"):
        self.device_id = device_id
        self.user = user

    def log_change(
        self,
        operation: str,
        parameters: dict,
        success: bool,
        commands: Optional[list] = None,
        output: str = "",
        error: Optional[str] = None,
        dry_run: bool = False,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None,
        user: Optional[str] = None,
    ) -> ChangeRecord:
        """Record one command plan.

        Args:
            operation: Change type of the plan ("create", "modify", "delete",
                or "reconcile" when it covers several changes)
            parameters: Resource labels and the caller's context string
            success: Whether vtysh accepted the batch
            commands: The command list sent (or previewed)
            output: Console output, truncated to MAX_OUTPUT characters
            error: Failure message
            dry_run: True when nothing was sent
            before_state: Records as read before planning
            after_state: Records as requested
            user: Requester, defaulting to the tracker's user

        Returns:
            The ChangeRecord that was written
        """
        record = ChangeRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            device_id=self.device_id,
            operation=operation,
            user=user or self.user,
            dry_run=dry_run,
            success=success,
            parameters=parameters,
            commands=list(commands or []),
            before_state=before_state,
            after_state=after_state,
            output=(output or "")[:MAX_OUTPUT],
            error=error,
        )
        audit_logger.info(record.to_json())
        return record


def iter_changes(log_file: Path) -> Iterator[ChangeRecord]:
    """Yield entries oldest first, skipping lines that are not records."""
    with open(log_file) as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                yield ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue


def get_recent_changes(
    log_file: Optional[str] = None,
    device_id: Optional[str] = None,
    operation: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read recent entries from the audit log.

    Args:
        log_file: Path to the audit file. Defaults to ~/.quagga-reconciler/audit.log
        device_id: Only entries for this router
        operation: Only entries of this change type
        limit: Maximum number of entries to return

    Returns:
        List of ChangeRecords, most recent first
    """
    path = Path(log_file) if log_file else audit_log_path()
    if not path.exists():
        return []

    recent: deque[ChangeRecord] = deque(maxlen=limit)
    for record in iter_changes(path):
        if device_id and record.device_id != device_id:
            continue
        if operation and record.operation != operation:
            continue
        recent.append(record)

    return list(reversed(recent))
