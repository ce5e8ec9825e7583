"""Config Engine - declarative reconciliation of Quagga/FRR configuration.

The engine reads the running configuration through vtysh, materializes
typed resource records, diffs them against desired state and emits the
minimal command batch:
- Send desired state, not individual commands
- Fields left at their defaults are never emitted
- Nothing is sent when nothing differs

Usage:
    from quagga_reconciler.config_engine import ReconcileEngine

    engine = ReconcileEngine(console)
    result = engine.apply({
        "device": "edge-1",
        "ospf": {"router_id": "10.0.0.1", "opaque": True},
        "route_map": {
            "RM-OUT 10": {"action": "permit", "match": ["ip address prefix-list PL-OUT"]},
        },
    }, dry_run=True)
"""

from .engine import ReconcileEngine
from .errors import (
    IdentityResolutionError,
    ParseError,
    ReconcileError,
    StateTransitionError,
    TypeDecodeError,
)
from .schema import (
    ABSENT,
    ChangeType,
    CommandPlan,
    DesiredResource,
    DesiredState,
    DiffResult,
    ExecuteOptions,
    ExecuteResult,
    Existence,
    FieldType,
    ResourceChange,
    ResourceRecord,
    ValidationResult,
)
from .fields import FieldDescriptor, field_descriptor, negate, render
from .resources import RESOURCE_KINDS, ResourceKind, get_kind
from .classifier import LineClassifier, scan_headers
from .materializer import StateMaterializer, parse_running_config
from .parser import DesiredStateParser
from .validator import ConfigValidator
from .diff import DiffEngine, summarize_diff
from .generator import CommandGenerator
from .executor import ConfigExecutor

__all__ = [
    # Main engine
    "ReconcileEngine",
    # Errors
    "ReconcileError",
    "ParseError",
    "TypeDecodeError",
    "IdentityResolutionError",
    "StateTransitionError",
    # Schema classes
    "ABSENT",
    "ChangeType",
    "CommandPlan",
    "DesiredResource",
    "DesiredState",
    "DiffResult",
    "ExecuteOptions",
    "ExecuteResult",
    "Existence",
    "FieldType",
    "ResourceChange",
    "ResourceRecord",
    "ValidationResult",
    # Descriptor tables
    "FieldDescriptor",
    "field_descriptor",
    "negate",
    "render",
    "RESOURCE_KINDS",
    "ResourceKind",
    "get_kind",
    # Components (for advanced use)
    "LineClassifier",
    "scan_headers",
    "StateMaterializer",
    "parse_running_config",
    "DesiredStateParser",
    "ConfigValidator",
    "DiffEngine",
    "summarize_diff",
    "CommandGenerator",
    "ConfigExecutor",
]
