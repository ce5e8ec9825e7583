"""Diff engine for calculating changes between desired and current state.

Computes the minimal set of changes needed to reach the desired state.
"""
import copy
import logging
from typing import Any, Optional

from .classifier import scan_headers
from .errors import IdentityResolutionError
from .fields import values_equal
from .materializer import parse_running_config
from .resources import ResourceKind, get_kind
from .schema import (
    ChangeType,
    DesiredResource,
    DesiredState,
    DiffResult,
    Existence,
    ResourceChange,
    ResourceRecord,
)

logger = logging.getLogger(__name__)


def find_record(
    records: list[ResourceRecord],
    identity: str,
) -> Optional[ResourceRecord]:
    """Find the record with ``identity``, if any."""
    for record in records:
        if record.identity == identity:
            return record
    return None


def resolve_context(
    kind: ResourceKind,
    desired: DesiredResource,
    current: Optional[ResourceRecord],
    running_config: str,
) -> dict[str, Any]:
    """Resolve the context a desired resource's commands are emitted under.

    Parent keys (the BGP AS number) come from the enclosing block headers of
    the running configuration; a desired value may fill them in when the block
    does not exist yet but may never contradict them.

    Raises:
        IdentityResolutionError: If a parent key cannot be determined or
            conflicts with the running configuration
    """
    context: dict[str, Any] = dict(current.context) if current else {}

    if kind.parent_keys:
        headers = scan_headers(running_config, kind)
        running = kind.context_from_hints(headers[0]) if headers else {}

        for key in kind.parent_keys:
            running_value = running.get(key)
            desired_value = desired.context.get(key)

            if (running_value is not None and desired_value is not None
                    and running_value != desired_value):
                raise IdentityResolutionError(
                    f"{kind.name} {desired.identity}: {key} {desired_value} "
                    f"does not match running configuration ({running_value})"
                )

            value = running_value if running_value is not None else desired_value
            if value is None:
                raise IdentityResolutionError(
                    f"{kind.name} {desired.identity}: cannot resolve {key}, "
                    f"no enclosing block in running configuration"
                )
            context[key] = value

    for key, value in desired.context.items():
        if key not in kind.parent_keys:
            context[key] = value

    return context


class DiffEngine:
    """Calculate differences between desired and current state."""

    def desired_record(
        self,
        kind: ResourceKind,
        desired: DesiredResource,
        context: dict[str, Any],
        base: Optional[ResourceRecord] = None,
    ) -> ResourceRecord:
        """Materialize a desired resource: declared values over defaults.

        With ``base``, undeclared fields keep the base record's values.
        """
        record = kind.new_record(desired.identity, context=context)
        if base is not None:
            record.fields.update(copy.deepcopy(base.fields))
        for name, value in desired.values.items():
            kind.field(name)
            record.fields[name] = copy.copy(value)
        return record

    def diff_resource(
        self,
        kind: ResourceKind,
        desired: DesiredResource,
        current: Optional[ResourceRecord],
        running_config: str,
    ) -> list[ResourceChange]:
        """
        Calculate the changes needed for a single resource.

        Returns an empty list if no changes are needed.
        """
        present = current is not None and current.present

        # Handle deletion
        if desired.ensure == Existence.ABSENT:
            if present:
                return [ResourceChange(
                    kind=kind.name,
                    identity=desired.identity,
                    change_type=ChangeType.DELETE,
                    current=current,
                )]
            return []

        context = resolve_context(kind, desired, current, running_config)

        # Handle create
        if not present:
            return [ResourceChange(
                kind=kind.name,
                identity=desired.identity,
                change_type=ChangeType.CREATE,
                desired=self.desired_record(kind, desired, context),
                current=current,
            )]

        # Context that cannot change in place: recreate
        recreate = [
            key for key in kind.recreate_on
            if key in desired.context and desired.context[key] != current.context.get(key)
        ]
        if recreate:
            logger.info(
                f"{kind.name} {desired.identity}: {', '.join(recreate)} changed, recreating"
            )
            return [
                ResourceChange(
                    kind=kind.name,
                    identity=desired.identity,
                    change_type=ChangeType.DELETE,
                    current=current,
                ),
                ResourceChange(
                    kind=kind.name,
                    identity=desired.identity,
                    change_type=ChangeType.CREATE,
                    desired=self.desired_record(kind, desired, context, base=current),
                ),
            ]

        # Resource exists, check for modifications
        changes: dict[str, Any] = {}
        for name, value in desired.values.items():
            descriptor = kind.field(name)
            accessor = kind.accessors[name]
            if not values_equal(descriptor, accessor.get(current), value):
                accessor.set(changes, value)

        if not changes:
            return []

        return [ResourceChange(
            kind=kind.name,
            identity=desired.identity,
            change_type=ChangeType.MODIFY,
            desired=self.desired_record(kind, desired, context, base=current),
            current=current,
            changes=changes,
        )]

    def calculate(self, desired: DesiredState, running_config: str) -> DiffResult:
        """
        Calculate diff between desired state and a running configuration.

        Args:
            desired: Desired state configuration
            running_config: Output of ``show running-config``

        Returns:
            DiffResult with all changes needed
        """
        result = DiffResult()
        parsed: dict[str, list[ResourceRecord]] = {}

        for resource in desired.resources:
            kind = get_kind(resource.kind)
            if kind.name not in parsed:
                parsed[kind.name] = parse_running_config(running_config, kind)

            current = find_record(parsed[kind.name], resource.identity)
            result.resource_changes.extend(
                self.diff_resource(kind, resource, current, running_config)
            )

        return result


def summarize_diff(diff: DiffResult) -> str:
    """
    Create a human-readable summary of a diff.

    Useful for dry-run output and logging.
    """
    if diff.no_change:
        return "No changes needed - current state matches desired state"

    lines = [f"Changes to apply ({diff.total_changes} total):", ""]

    for change in diff.resource_changes:
        label = f"{change.kind} {change.identity}"

        if change.change_type == ChangeType.CREATE:
            lines.append(f"  [+] Create {label}")
            kind = get_kind(change.kind)
            for descriptor in kind.fields:
                value = change.desired.fields[descriptor.name]
                if not values_equal(descriptor, value, descriptor.default):
                    lines.append(f"      {descriptor.name}: {value!r}")

        elif change.change_type == ChangeType.DELETE:
            lines.append(f"  [-] Delete {label}")

        elif change.change_type == ChangeType.MODIFY:
            lines.append(f"  [~] Modify {label}")
            for name, value in change.changes.items():
                was = change.current.fields.get(name)
                lines.append(f"      {name}: {was!r} -> {value!r}")

    return "\n".join(lines)
