"""Field descriptors: how one configurable attribute is read and written.

A descriptor pairs a line pattern with a value type, a default and the
command that sets the attribute. Descriptor tables are built once at import
time and never mutated.
"""
import copy
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple, Optional, Sequence

from .schema import ABSENT, FieldType, ResourceRecord


@dataclass(frozen=True)
class FieldDescriptor:
    """Static metadata for one configurable attribute.

    ``pattern`` is matched against a full configuration line. Group 1, when it
    participates in the match, is the raw value; otherwise the line is a
    presence flag.
    """
    name: str
    pattern: re.Pattern
    value_type: FieldType
    default: Any
    command: str

    def match(self, line: str) -> Optional[re.Match]:
        return self.pattern.match(line)

    def default_value(self) -> Any:
        """A fresh copy of the default (lists must not be shared)."""
        return copy.copy(self.default)

    @property
    def is_list(self) -> bool:
        return self.value_type == FieldType.LIST


def field_descriptor(
    name: str,
    pattern: str,
    value_type: FieldType,
    command: str,
    default: Any = None,
) -> FieldDescriptor:
    """Build a descriptor, filling the type's natural default."""
    if default is None:
        default = {
            FieldType.BOOLEAN: False,
            FieldType.LIST: [],
        }.get(value_type, ABSENT)

    return FieldDescriptor(
        name=name,
        pattern=re.compile(pattern),
        value_type=value_type,
        default=default,
        command=command,
    )


def render(descriptor: FieldDescriptor, value: Any = None) -> str:
    """Render the console command that sets ``descriptor`` to ``value``.

    Flag-like values (None, True, False, ABSENT) render the bare command;
    anything else is appended as the argument.
    """
    if value is None or value is ABSENT or isinstance(value, bool):
        return descriptor.command
    return f"{descriptor.command} {value}"


def negate(command: str) -> str:
    return f"no {command}"


class FieldAccessor(NamedTuple):
    """Read a field from a record, write it into a sparse change map."""
    get: Callable[[ResourceRecord], Any]
    set: Callable[[dict[str, Any], Any], None]


def _accessor(name: str) -> FieldAccessor:
    def getter(record: ResourceRecord) -> Any:
        return record.fields.get(name, ABSENT)

    def setter(changes: dict[str, Any], value: Any) -> None:
        changes[name] = value

    return FieldAccessor(get=getter, set=setter)


def build_accessors(
    fields: Sequence[FieldDescriptor],
) -> Mapping[str, FieldAccessor]:
    """Build the read-only name -> accessor mapping for a descriptor table."""
    names = [f.name for f in fields]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
        raise ValueError(f"Duplicate field names: {sorted(duplicates)}")

    return MappingProxyType({name: _accessor(name) for name in names})


def values_equal(descriptor: FieldDescriptor, left: Any, right: Any) -> bool:
    """Compare two values of a field; list order is not significant."""
    if descriptor.is_list:
        return set(left or []) == set(right or [])
    if left is ABSENT or right is ABSENT:
        return left is right
    return left == right
