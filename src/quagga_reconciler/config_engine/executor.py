"""Executor for sending command plans to a router console.

A plan is sent as one ``exec`` call. A failed call is reported as a single
failure for the whole batch; nothing is retried here.
"""
import logging
from typing import Optional

from ..console.base import ConsoleError, ConsoleSession
from ..utils.audit_log import ChangeTracker
from ..utils.logging_config import timed_section
from .schema import (
    ChangeType,
    CommandPlan,
    ExecuteOptions,
    ExecuteResult,
    ResourceChange,
)

logger = logging.getLogger(__name__)


class ConfigExecutor:
    """Execute command plans on a vtysh console."""

    def __init__(self, device_id: str = "", tracker: Optional[ChangeTracker] = None):
        """
        Initialize executor.

        Args:
            device_id: Device the plans are for (audit log key)
            tracker: Audit change tracker (created for ``device_id`` if omitted)
        """
        self.device_id = device_id
        self.tracker = tracker or ChangeTracker(device_id)

    def execute(
        self,
        console: ConsoleSession,
        plan: CommandPlan,
        changes: list[ResourceChange],
        options: ExecuteOptions,
        before_state: Optional[list[dict]] = None,
    ) -> ExecuteResult:
        """
        Execute a command plan.

        Args:
            console: Open console session
            plan: Command plan to execute
            changes: The diff entries the plan was built from (for reporting)
            options: Execution options (dry_run, etc.)
            before_state: Records as read before planning (for the audit log)

        Returns:
            ExecuteResult with success and details

        Raises:
            ConsoleError: If the console fails or reports a non-zero status
        """
        result = ExecuteResult(dry_run=options.dry_run)

        commands = plan.commands
        if not commands:
            result.success = True
            result.changes_made = ["No changes needed"]
            return result

        if options.dry_run:
            result.success = True
            result.commands_executed = [f"[DRY-RUN] {cmd}" for cmd in commands]
            result.changes_made = [
                f"[PREVIEW] {change}" for change in self._extract_changes(changes)
            ]
            self._audit(changes, commands, result, options, before_state)
            return result

        try:
            logger.info(f"Executing {len(commands)} commands on {self.device_id}")
            with timed_section("exec", device_id=self.device_id, commands=len(commands)):
                output, status = console.exec(commands)
            result.commands_executed = list(commands)
            result.output = output

            if status != 0:
                raise ConsoleError(
                    f"vtysh returned status {status} for {len(commands)} commands",
                    status=status,
                    output=output,
                )

            result.changes_made = self._extract_changes(changes)
            result.success = True

        except ConsoleError as e:
            logger.error(f"Command batch on {self.device_id} failed: {e}")
            result.success = False
            result.error = str(e)
            raise

        finally:
            self._audit(changes, commands, result, options, before_state)

        return result

    def _extract_changes(self, changes: list[ResourceChange]) -> list[str]:
        """Extract human-readable change descriptions."""
        descriptions = []

        for change in changes:
            label = f"{change.kind} {change.identity}"
            if change.change_type == ChangeType.CREATE:
                descriptions.append(f"Created {label}")
            elif change.change_type == ChangeType.DELETE:
                descriptions.append(f"Deleted {label}")
            elif change.change_type == ChangeType.MODIFY:
                parts = [f"{name}={value!r}" for name, value in change.changes.items()]
                descriptions.append(f"Modified {label}: {', '.join(parts)}")

        return descriptions

    def _audit(
        self,
        changes: list[ResourceChange],
        commands: list[str],
        result: ExecuteResult,
        options: ExecuteOptions,
        before_state: Optional[list[dict]],
    ) -> None:
        """Write the audit log entry for one plan."""
        if len(changes) == 1:
            operation = changes[0].change_type.value
        else:
            operation = "reconcile"

        after_state = [
            change.desired.to_dict() if change.desired else None
            for change in changes
        ]

        self.tracker.log_change(
            operation=operation,
            parameters={
                "resources": [f"{c.kind} {c.identity}" for c in changes],
                "context": options.audit_context,
            },
            success=result.success,
            commands=commands,
            output=result.output,
            error=result.error,
            dry_run=options.dry_run,
            before_state={"records": before_state} if before_state is not None else None,
            after_state={"records": after_state},
            user=options.user,
        )
