"""Reconcile Engine - orchestrates one reconciliation cycle per resource.

For each desired resource:
1. Read the running configuration (one console round-trip)
2. Materialize current records of the resource's kind
3. Diff against the desired resource
4. Generate the command plan
5. Execute it (one console round-trip, skipped when there is nothing to do)

Parsing and validating a whole desired state document happens up front in
``apply``; each resource is then reconciled against a fresh read, so a
resource created earlier in the document is visible to later ones.
"""
import copy
import logging
from typing import Any, Optional, Union

from ..console.base import ConsoleError, ConsoleSession
from ..utils.audit_log import ChangeTracker
from ..utils.logging_config import timed_section
from .diff import DiffEngine, find_record, summarize_diff
from .errors import ReconcileError, StateTransitionError
from .executor import ConfigExecutor
from .generator import CommandGenerator
from .materializer import parse_running_config
from .parser import DesiredStateParser
from .resources import get_kind
from .schema import (
    ChangeType,
    CommandPlan,
    DesiredResource,
    DesiredState,
    DiffResult,
    ExecuteOptions,
    ExecuteResult,
    ResourceChange,
    ResourceRecord,
    ValidationResult,
)
from .validator import ConfigValidator

logger = logging.getLogger(__name__)


class ReconcileEngine:
    """
    Reconcile desired state against one router's running configuration.

    Usage:
        with create_console("edge-1", console_config) as console:
            engine = ReconcileEngine(console)
            result = engine.apply(config_dict, dry_run=True)
    """

    def __init__(
        self,
        console: ConsoleSession,
        device_id: Optional[str] = None,
        save_config: bool = True,
        tracker: Optional[ChangeTracker] = None,
    ):
        """
        Initialize the engine.

        Args:
            console: Console session for the router
            device_id: Router identifier (defaults to the console's)
            save_config: Append ``write memory`` to every plan
            tracker: Audit change tracker
        """
        self.console = console
        self.device_id = device_id or console.device_id
        self.parser = DesiredStateParser()
        self.validator = ConfigValidator()
        self.diff_engine = DiffEngine()
        self.generator = CommandGenerator(save_config=save_config)
        self.executor = ConfigExecutor(self.device_id, tracker)

    # --- Reading ---

    def read_running_config(self) -> str:
        """Read the router's running configuration."""
        with timed_section("read", device_id=self.device_id):
            return self.console.get_running_config()

    def read_state(self, kind_name: str, running_config: Optional[str] = None) -> list[ResourceRecord]:
        """Materialize the current records of one kind."""
        kind = get_kind(kind_name)
        if running_config is None:
            running_config = self.read_running_config()
        return parse_running_config(running_config, kind)

    # --- Planning ---

    def _check_transition(self, change: ResourceChange) -> None:
        """Reject lifecycle transitions the planner must never see."""
        present = change.current is not None and change.current.present
        label = f"{change.kind} {change.identity}"

        if change.change_type == ChangeType.CREATE and present:
            raise StateTransitionError(f"Cannot create {label}: it is already present")
        if change.change_type in (ChangeType.MODIFY, ChangeType.DELETE) and not present:
            raise StateTransitionError(
                f"Cannot {change.change_type.value} {label}: it is absent"
            )

    def plan_changes(self, changes: list[ResourceChange]) -> CommandPlan:
        """Generate one command plan for an ordered list of changes."""
        plan = CommandPlan()
        for change in changes:
            self._check_transition(change)
            step = self.generator.generate(get_kind(change.kind), change)
            plan = step if plan.is_empty else plan.extend(step)
        return plan

    def diff(self, desired: DesiredResource, running_config: str) -> list[ResourceChange]:
        """Changes needed to bring one resource to its desired state."""
        kind = get_kind(desired.kind)
        current = find_record(parse_running_config(running_config, kind), desired.identity)
        return self.diff_engine.diff_resource(kind, desired, current, running_config)

    # --- Reconciliation ---

    def reconcile(
        self,
        desired: DesiredResource,
        dry_run: bool = False,
        audit_context: str = "",
        user: Optional[str] = None,
    ) -> ExecuteResult:
        """
        Reconcile a single resource.

        Raises:
            ConsoleError: If reading or executing fails
            TypeDecodeError: If the running configuration holds an undecodable value
            IdentityResolutionError: If the parent block cannot be resolved
            StateTransitionError: If the diff asks for an impossible transition
        """
        label = f"{desired.kind} {desired.identity}"
        logger.info(f"Reconciling {label} on {self.device_id}")

        running_config = self.read_running_config()
        changes = self.diff(desired, running_config)

        if not changes:
            logger.info(f"{label}: no changes needed")
            return ExecuteResult(
                success=True,
                dry_run=dry_run,
                changes_made=["No changes needed"],
            )

        # The planner updates current records in place
        before_state = copy.deepcopy([
            change.current.to_dict() if change.current else None
            for change in changes
        ])

        plan = self.plan_changes(changes)
        logger.info(
            f"{label}: {len(changes)} change(s), {plan.total_commands} commands"
        )

        options = ExecuteOptions(dry_run=dry_run, audit_context=audit_context, user=user)
        return self.executor.execute(
            self.console, plan, changes, options, before_state=before_state
        )

    def apply(
        self,
        config: Union[dict[str, Any], DesiredState],
        dry_run: bool = False,
        audit_context: str = "",
        user: Optional[str] = None,
    ) -> ExecuteResult:
        """
        Apply a desired state document to the router.

        Parse and validation failures are returned in ``result.error``.
        Processing stops at the first resource that fails.

        Args:
            config: Desired state dict or an already parsed DesiredState
            dry_run: If True, preview changes without applying
            audit_context: Description for audit log
            user: User identifier for audit log

        Returns:
            ExecuteResult combining every resource's result
        """
        result = ExecuteResult(dry_run=dry_run)

        if isinstance(config, DesiredState):
            desired = config
        else:
            logger.info("Parsing desired state configuration")
            try:
                desired = self.parser.parse(config)
            except ReconcileError as e:
                result.error = f"Parse error: {e}"
                return result

        logger.info(f"Validating configuration for device {desired.device_id}")
        validation = self.validator.validate(desired)
        if not validation.valid:
            result.error = f"Validation failed: {'; '.join(validation.errors)}"
            return result
        for warning in validation.warnings:
            logger.warning(warning)

        for resource in desired.resources:
            try:
                step = self.reconcile(
                    resource, dry_run=dry_run, audit_context=audit_context, user=user
                )
            except (ReconcileError, ConsoleError) as e:
                logger.error(f"Reconciling {resource.kind} {resource.identity} failed: {e}")
                result.error = f"{resource.kind} {resource.identity}: {e}"
                result.success = False
                return result

            if step.commands_executed:
                result.changes_made.extend(step.changes_made)
                result.commands_executed.extend(step.commands_executed)
            if step.output:
                result.output = f"{result.output}\n{step.output}".strip()

        if not result.changes_made:
            result.changes_made = ["No changes needed - state already matches"]
        result.success = True
        return result

    # --- Preview ---

    def calculate(self, desired: DesiredState) -> DiffResult:
        """Diff a whole desired state against one read of the router."""
        return self.diff_engine.calculate(desired, self.read_running_config())

    def validate(self, desired: DesiredState) -> ValidationResult:
        """Validate a DesiredState (for external use)."""
        return self.validator.validate(desired)

    def preview(self, config: Union[dict[str, Any], DesiredState]) -> tuple[str, CommandPlan]:
        """
        Preview changes without applying.

        Returns:
            Tuple of (human-readable diff summary, command plan)
        """
        desired = config if isinstance(config, DesiredState) else self.parser.parse(config)

        validation = self.validator.validate(desired)
        if not validation.valid:
            return "Validation failed:\n" + "\n".join(validation.errors), CommandPlan()

        diff = self.calculate(desired)
        summary = summarize_diff(diff)
        plan = self.plan_changes(diff.resource_changes)

        if validation.warnings:
            summary += "\n\nWarnings:\n" + "\n".join(
                f"  - {w}" for w in validation.warnings
            )

        return summary, plan
