"""Resource kinds managed through vtysh.

Each kind owns its field descriptor table (in emission order), the patterns
that delimit its block in ``show running-config`` and the commands that
enter that block.
"""
import re
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from .errors import IdentityResolutionError
from .fields import FieldAccessor, FieldDescriptor, build_accessors, field_descriptor
from .schema import Existence, FieldType, ResourceRecord


def _indented(expr: str) -> str:
    """Pattern for a line nested inside a block."""
    return rf"^\s+{expr}$"


class ResourceKind(ABC):
    """A kind of configuration block and the fields it carries."""

    name: str = ""
    fields: tuple[FieldDescriptor, ...] = ()
    singleton: bool = False

    # Column-0 line opening the block; None for kinds made of top-level lines
    header_pattern: Optional[re.Pattern] = None
    # Indented line opening another record inside the same block
    section_pattern: Optional[re.Pattern] = None
    # Indented line returning from a section to the block's default record
    section_exit_pattern: Optional[re.Pattern] = None
    # Indented line opening a section this kind does not manage; its lines are
    # skipped until the section exits or a managed section starts
    foreign_section_pattern: Optional[re.Pattern] = None
    # Context keys recovered from the enclosing block header
    parent_keys: tuple[str, ...] = ()
    # Context keys that cannot change in place; a change recreates the record
    recreate_on: tuple[str, ...] = ()
    # Delete negates the block header; otherwise each configured field is negated
    delete_negates_block: bool = True

    def __init__(self) -> None:
        self.accessors: Mapping[str, FieldAccessor] = build_accessors(self.fields)
        self._by_name = {f.name: f for f in self.fields}

    @property
    def has_block(self) -> bool:
        return self.header_pattern is not None

    def field(self, name: str) -> FieldDescriptor:
        if name not in self._by_name:
            raise KeyError(f"Unknown field for {self.name}: {name}")
        return self._by_name[name]

    def default_fields(self) -> dict[str, Any]:
        return {f.name: f.default_value() for f in self.fields}

    def new_record(
        self,
        identity: str,
        context: Optional[dict[str, Any]] = None,
        existence: Existence = Existence.PRESENT,
    ) -> ResourceRecord:
        """A record with every field at its default."""
        return ResourceRecord(
            kind=self.name,
            identity=identity,
            existence=existence,
            fields=self.default_fields(),
            context=dict(context or {}),
        )

    def absent_record(self) -> ResourceRecord:
        """The fully-defaulted record of a singleton kind that is not configured."""
        return self.new_record(self.identity({}), existence=Existence.ABSENT)

    def context_from_hints(self, hints: dict[str, Any]) -> dict[str, Any]:
        return {}

    def identity_context(self, identity: str) -> dict[str, Any]:
        """Context data encoded in the identity string itself."""
        return {}

    def validate_identity(self, identity: str) -> Optional[str]:
        """Return an error message if ``identity`` is malformed."""
        expected = self.identity({})
        if self.singleton and identity != expected:
            return f"{self.name} identity must be {expected!r}, got {identity!r}"
        return None

    @abstractmethod
    def identity(self, hints: dict[str, Any]) -> str:
        """Compute a record's identity from block-start hints."""
        pass

    @abstractmethod
    def context_commands(self, record: ResourceRecord) -> list[str]:
        """Commands entering the record's block; the last one opens it."""
        pass

    def block_command(self, record: ResourceRecord) -> Optional[str]:
        if not self.has_block:
            return None
        return self.context_commands(record)[-1]


class OSPFProcess(ResourceKind):
    """The ``router ospf`` process."""

    name = "ospf"
    singleton = True
    header_pattern = re.compile(r"^router ospf$")
    fields = (
        field_descriptor(
            "router_id", _indented(r"ospf router-id (\S+)"),
            FieldType.STRING, "ospf router-id",
        ),
        field_descriptor(
            "opaque", _indented(r"capability opaque"),
            FieldType.BOOLEAN, "capability opaque",
        ),
        field_descriptor(
            "rfc1583", _indented(r"compatible rfc1583"),
            FieldType.BOOLEAN, "compatible rfc1583",
        ),
        field_descriptor(
            "abr_type", _indented(r"ospf abr-type (\w+)"),
            FieldType.SYMBOL, "ospf abr-type", default="cisco",
        ),
        field_descriptor(
            "log_adjacency_changes", _indented(r"log-adjacency-changes(?: (detail))?"),
            FieldType.SYMBOL, "log-adjacency-changes", default=False,
        ),
    )

    def identity(self, hints: dict[str, Any]) -> str:
        return "ospf"

    def context_commands(self, record: ResourceRecord) -> list[str]:
        return ["router ospf"]


class PIMRouter(ResourceKind):
    """Global PIM settings, configured as top-level lines."""

    name = "pim_router"
    singleton = True
    fields = (
        field_descriptor(
            "ip_multicast_routing", r"^ip multicast-routing$",
            FieldType.BOOLEAN, "ip multicast-routing",
        ),
    )

    def identity(self, hints: dict[str, Any]) -> str:
        return "pim"

    def context_commands(self, record: ResourceRecord) -> list[str]:
        return []


class BGPAddressFamily(ResourceKind):
    """One address-family of the ``router bgp <asn>`` block.

    Lines directly under ``router bgp`` belong to ipv4 unicast.
    """

    name = "bgp_address_family"
    header_pattern = re.compile(r"^router bgp (?P<asn>\d+)$")
    section_pattern = re.compile(
        r"^\s+address-family (?P<afi>ipv4|ipv6)(?: (?P<safi>unicast|multicast))?$"
    )
    section_exit_pattern = re.compile(r"^\s+exit-address-family$")
    foreign_section_pattern = re.compile(r"^\s+address-family .+$")
    # Quagga has no "no address-family"; the family is emptied field by field
    delete_negates_block = False
    parent_keys = ("asn",)
    # maximum-paths is listed before maximum-paths ibgp; both are anchored
    fields = (
        field_descriptor(
            "aggregate_address", _indented(r"aggregate-address (.+)"),
            FieldType.LIST, "aggregate-address",
        ),
        field_descriptor(
            "maximum_ebgp_paths", _indented(r"maximum-paths (\d+)"),
            FieldType.INTEGER, "maximum-paths", default=1,
        ),
        field_descriptor(
            "maximum_ibgp_paths", _indented(r"maximum-paths ibgp (\d+)"),
            FieldType.INTEGER, "maximum-paths ibgp", default=1,
        ),
        field_descriptor(
            "networks", _indented(r"network (.+)"),
            FieldType.LIST, "network",
        ),
    )

    IDENTITY_PATTERN = re.compile(r"^(?P<afi>ipv4|ipv6)_(?P<safi>unicast|multicast)$")

    def identity(self, hints: dict[str, Any]) -> str:
        afi = hints.get("afi") or "ipv4"
        safi = hints.get("safi") or "unicast"
        return f"{afi}_{safi}"

    def context_from_hints(self, hints: dict[str, Any]) -> dict[str, Any]:
        return {"asn": int(hints["asn"])} if hints.get("asn") else {}

    def identity_context(self, identity: str) -> dict[str, Any]:
        match = self.IDENTITY_PATTERN.match(identity)
        if not match:
            return {}
        return match.groupdict()

    def validate_identity(self, identity: str) -> Optional[str]:
        if not self.IDENTITY_PATTERN.match(identity):
            return (
                f"Invalid address family {identity!r}: expected "
                f"ipv4_unicast, ipv4_multicast, ipv6_unicast or ipv6_multicast"
            )
        return None

    def context_commands(self, record: ResourceRecord) -> list[str]:
        asn = record.context.get("asn")
        if asn is None:
            raise IdentityResolutionError(
                f"No AS number known for bgp address family {record.identity}"
            )

        parts = self.identity_context(record.identity)
        afi, safi = parts.get("afi", "ipv4"), parts.get("safi", "unicast")
        if afi == "ipv6" and safi == "unicast":
            family = "ipv6"
        else:
            family = f"{afi} {safi}"

        return [f"router bgp {asn}", f"address-family {family}"]


class RouteMapEntry(ResourceKind):
    """One ``route-map <name> <action> <sequence>`` entry."""

    name = "route_map"
    header_pattern = re.compile(
        r"^route-map (?P<name>[\w-]+) (?P<action>deny|permit) (?P<sequence>\d+)$"
    )
    fields = (
        field_descriptor(
            "match", _indented(r"match (.+)"),
            FieldType.LIST, "match",
        ),
        field_descriptor(
            "on_match", _indented(r"on-match (.+)"),
            FieldType.STRING, "on-match",
        ),
        field_descriptor(
            "set", _indented(r"set (.+)"),
            FieldType.LIST, "set",
        ),
    )

    recreate_on = ("action",)

    ACTIONS = ("permit", "deny")
    IDENTITY_PATTERN = re.compile(r"^(?P<name>[\w-]+) (?P<sequence>\d+)$")

    def identity(self, hints: dict[str, Any]) -> str:
        return f"{hints.get('name')} {hints.get('sequence')}"

    def context_from_hints(self, hints: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": hints["name"],
            "action": hints["action"],
            "sequence": int(hints["sequence"]),
        }

    def identity_context(self, identity: str) -> dict[str, Any]:
        match = self.IDENTITY_PATTERN.match(identity)
        if not match:
            return {}
        return {"name": match.group("name"), "sequence": int(match.group("sequence"))}

    def validate_identity(self, identity: str) -> Optional[str]:
        if not self.IDENTITY_PATTERN.match(identity):
            return f"Invalid route-map {identity!r}: expected '<name> <sequence>'"
        return None

    def context_commands(self, record: ResourceRecord) -> list[str]:
        context = {**self.identity_context(record.identity), **record.context}
        action = context.get("action")
        if action not in self.ACTIONS:
            raise IdentityResolutionError(
                f"No action (permit/deny) known for route-map {record.identity}"
            )
        return [f"route-map {context['name']} {action} {context['sequence']}"]


RESOURCE_KINDS: dict[str, ResourceKind] = {
    kind.name: kind
    for kind in (OSPFProcess(), PIMRouter(), BGPAddressFamily(), RouteMapEntry())
}


def get_kind(name: str) -> ResourceKind:
    """Look up a resource kind by name."""
    if name not in RESOURCE_KINDS:
        raise KeyError(f"Unknown resource kind: {name}")
    return RESOURCE_KINDS[name]
