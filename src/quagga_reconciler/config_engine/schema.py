"""Data types shared by the reconciliation pipeline.

Records read from the router, desired resources, diff entries, command
plans and execution results.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class _Absent:
    """Marker for a field that is not configured at all."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Absent":
        return self

    def __deepcopy__(self, memo: dict) -> "_Absent":
        return self


ABSENT = _Absent()


class FieldType(str, Enum):
    """How a captured value is decoded and re-rendered."""
    BOOLEAN = "boolean"
    STRING = "string"
    SYMBOL = "symbol"
    INTEGER = "integer"
    LIST = "list"


class Existence(str, Enum):
    """Whether a resource is configured on the device."""
    PRESENT = "present"
    ABSENT = "absent"


class ChangeType(str, Enum):
    """Type of change in a diff."""
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


@dataclass
class ResourceRecord:
    """One reconciled unit of configuration.

    ``fields`` always holds every field of the kind's descriptor table.
    ``context`` carries the enclosing block's data (AS number, route-map
    header) which is not part of the field set.
    """
    kind: str
    identity: str
    existence: Existence = Existence.PRESENT
    fields: dict[str, Any] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def present(self) -> bool:
        return self.existence == Existence.PRESENT

    def to_dict(self) -> dict:
        """Convert to a plain dict for display."""
        return {
            "kind": self.kind,
            "identity": self.identity,
            "existence": self.existence.value,
            "fields": {
                name: ("absent" if value is ABSENT else value)
                for name, value in self.fields.items()
            },
            "context": dict(self.context),
        }


# --- Classifier events ---

@dataclass(frozen=True)
class BlockStart:
    """A block (or section of a block) begins."""
    hints: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldMatch:
    """A line inside the open block set a field."""
    field_name: str
    raw: Optional[str] = None


@dataclass(frozen=True)
class BlockEnd:
    """The open block ends."""
    pass


# --- Desired state ---

@dataclass
class DesiredResource:
    """Desired state for a single resource.

    ``values`` is sparse: only the fields the user declared. Fields left out
    are not managed.
    """
    kind: str
    identity: str
    ensure: Existence = Existence.PRESENT
    values: dict[str, Any] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class DesiredState:
    """Complete desired state for a router."""
    device_id: str
    resources: list[DesiredResource] = field(default_factory=list)

    def for_kind(self, kind: str) -> list[DesiredResource]:
        """Desired resources of one kind, in declaration order."""
        return [r for r in self.resources if r.kind == kind]


# --- Validation Results ---

@dataclass
class ValidationResult:
    """Result of config validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# --- Diff Results ---

@dataclass
class ResourceChange:
    """A single resource change."""
    kind: str
    identity: str
    change_type: ChangeType
    desired: Optional[ResourceRecord] = None
    current: Optional[ResourceRecord] = None
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass
class DiffResult:
    """Result of diffing desired vs current state."""
    resource_changes: list[ResourceChange] = field(default_factory=list)

    @property
    def no_change(self) -> bool:
        """Check if there are any changes."""
        return len(self.resource_changes) == 0

    @property
    def total_changes(self) -> int:
        """Total number of changes."""
        return len(self.resource_changes)


# --- Command Plan ---

@dataclass
class CommandPlan:
    """Plan of commands to execute.

    ``pre_commands`` enter configuration mode and the resource's block,
    ``main_commands`` change it and ``post_commands`` leave and persist.
    """
    pre_commands: list[str] = field(default_factory=list)
    main_commands: list[str] = field(default_factory=list)
    post_commands: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.main_commands

    @property
    def commands(self) -> list[str]:
        """Flat ordered command list; empty when there is nothing to change."""
        if self.is_empty:
            return []
        return self.pre_commands + self.main_commands + self.post_commands

    @property
    def total_commands(self) -> int:
        """Total number of commands."""
        return len(self.commands)

    def extend(self, other: "CommandPlan") -> "CommandPlan":
        """Append another plan as its own bracketed batch."""
        return CommandPlan(main_commands=self.commands + other.commands)


# --- Execution Results ---

@dataclass
class ExecuteOptions:
    """Options for config execution."""
    dry_run: bool = False
    audit_context: str = ""
    user: Optional[str] = None


@dataclass
class ExecuteResult:
    """Result of config execution."""
    success: bool = False
    dry_run: bool = False
    changes_made: list[str] = field(default_factory=list)
    commands_executed: list[str] = field(default_factory=list)
    output: str = ""
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "dry_run": self.dry_run,
            "changes_made": self.changes_made,
            "commands_executed": self.commands_executed,
            "output": self.output,
            "error": self.error,
        }

