"""Command generator for vtysh command batches.

Turns resource records and change maps into command plans:

    configure terminal
    <context commands entering the resource's block>
    <field commands>
    end
    write memory

A plan with no field-level work is empty and must not be sent.
"""
import logging
from typing import Any

from .fields import negate, render, values_equal
from .resources import ResourceKind
from .schema import (
    ABSENT,
    ChangeType,
    CommandPlan,
    FieldType,
    ResourceChange,
    ResourceRecord,
)

logger = logging.getLogger(__name__)

ENTER_CONFIG = "configure terminal"
LEAVE_CONFIG = "end"
PERSIST_CONFIG = "write memory"


def _unset(value: Any) -> bool:
    return value is False or value is ABSENT


class CommandGenerator:
    """Generate vtysh command plans for create, update and delete."""

    def __init__(self, save_config: bool = True):
        self.save_config = save_config

    def _post_commands(self) -> list[str]:
        post = [LEAVE_CONFIG]
        if self.save_config:
            post.append(PERSIST_CONFIG)
        return post

    def create(self, kind: ResourceKind, desired: ResourceRecord) -> CommandPlan:
        """Plan creation of ``desired``.

        The block is opened and every field that differs from its default is
        set, in descriptor order. Fields left at default are not emitted.
        """
        plan = CommandPlan(
            pre_commands=[ENTER_CONFIG],
            post_commands=self._post_commands(),
        )
        if kind.has_block:
            context = kind.context_commands(desired)
            plan.pre_commands.extend(context[:-1])
            plan.main_commands.append(context[-1])

        for descriptor in kind.fields:
            value = kind.accessors[descriptor.name].get(desired)
            if values_equal(descriptor, value, descriptor.default):
                continue

            if descriptor.is_list:
                for element in value:
                    plan.main_commands.append(render(descriptor, element))
            elif _unset(value):
                plan.main_commands.append(negate(render(descriptor)))
            else:
                plan.main_commands.append(render(descriptor, value))

        logger.debug(f"[create] {kind.name} {desired.identity}: {plan.main_commands}")
        return plan

    def effective_changes(
        self,
        kind: ResourceKind,
        current: ResourceRecord,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """Drop entries that already match the current record, in table order."""
        effective = {}
        for descriptor in kind.fields:
            if descriptor.name not in changes:
                continue
            value = changes[descriptor.name]
            current_value = kind.accessors[descriptor.name].get(current)
            if not values_equal(descriptor, current_value, value):
                effective[descriptor.name] = value

        unknown = set(changes) - set(kind.accessors)
        if unknown:
            raise KeyError(f"Unknown fields for {kind.name}: {sorted(unknown)}")
        return effective

    def update(
        self,
        kind: ResourceKind,
        current: ResourceRecord,
        changes: dict[str, Any],
    ) -> CommandPlan:
        """Plan a sparse update of ``current`` and apply it to the record.

        Named values cannot be replaced in place on the device, so a symbol
        or string field switched back to its bare flag form is removed and
        re-added. List fields only touch the elements that differ.
        """
        changes = self.effective_changes(kind, current, changes)
        plan = CommandPlan(post_commands=self._post_commands())
        if not changes:
            return plan

        plan.pre_commands = [ENTER_CONFIG] + kind.context_commands(current)

        for name, value in changes.items():
            descriptor = kind.field(name)
            accessor = kind.accessors[name]
            current_value = accessor.get(current)

            if descriptor.is_list:
                desired_list = [] if _unset(value) else list(value)
                current_list = [] if _unset(current_value) else list(current_value)
                for element in current_list:
                    if element not in desired_list:
                        plan.main_commands.append(negate(render(descriptor, element)))
                for element in desired_list:
                    if element not in current_list:
                        plan.main_commands.append(render(descriptor, element))
                value = desired_list

            elif _unset(value):
                plan.main_commands.append(negate(render(descriptor, current_value)))

            elif value is True and descriptor.value_type in (FieldType.SYMBOL, FieldType.STRING):
                plan.main_commands.append(negate(render(descriptor)))
                plan.main_commands.append(render(descriptor))

            else:
                plan.main_commands.append(render(descriptor, value))

            current.fields[name] = value

        logger.debug(f"[update] {kind.name} {current.identity}: {plan.main_commands}")
        return plan

    def delete(self, kind: ResourceKind, current: ResourceRecord) -> CommandPlan:
        """Plan removal of ``current``.

        The whole block is negated; the device drops its fields with it.
        Kinds without a block, and kinds whose block cannot be negated
        (bgp address families), return each configured field to its default
        instead.
        """
        plan = CommandPlan(
            pre_commands=[ENTER_CONFIG] + kind.context_commands(current),
            post_commands=self._post_commands(),
        )

        if kind.has_block and kind.delete_negates_block:
            plan.main_commands.append(negate(kind.block_command(current)))
        else:
            for descriptor in kind.fields:
                value = kind.accessors[descriptor.name].get(current)
                if values_equal(descriptor, value, descriptor.default):
                    continue
                if descriptor.is_list:
                    for element in value:
                        plan.main_commands.append(negate(render(descriptor, element)))
                elif value is False:
                    # Off where the device default is on
                    plan.main_commands.append(render(descriptor))
                else:
                    plan.main_commands.append(negate(render(descriptor, value)))

        logger.debug(f"[delete] {kind.name} {current.identity}: {plan.main_commands}")
        return plan

    def generate(self, kind: ResourceKind, change: ResourceChange) -> CommandPlan:
        """Plan a single diff entry."""
        if change.change_type == ChangeType.CREATE:
            return self.create(kind, change.desired)
        if change.change_type == ChangeType.MODIFY:
            return self.update(kind, change.current, change.changes)
        if change.change_type == ChangeType.DELETE:
            return self.delete(kind, change.current)
        return CommandPlan()
