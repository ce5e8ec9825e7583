"""Parser for desired state configuration.

Converts dict/YAML input to strongly-typed DesiredState objects.

Example document:

    device: edge-1
    ospf:
      router_id: 10.0.0.1
      log_adjacency_changes: detail
    bgp_address_family:
      ipv6_unicast:
        asn: 65000
        networks: ["2001:db8::/48"]
    route_map:
      RM-OUT 10:
        action: permit
        match: ["ip address prefix-list PL-OUT"]
"""
from pathlib import Path
from typing import Any, Union

import yaml

from .errors import ParseError
from .resources import RESOURCE_KINDS, ResourceKind
from .schema import ABSENT, DesiredResource, DesiredState, Existence, FieldType

ABSENT_WORDS = ("absent", "none")


class DesiredStateParser:
    """Parse desired state from dict/YAML format."""

    def parse(self, config: dict[str, Any]) -> DesiredState:
        """
        Parse a configuration dict into a DesiredState object.

        Args:
            config: Dict with device and one key per resource kind

        Returns:
            DesiredState object

        Raises:
            ParseError: If config is invalid
        """
        if not isinstance(config, dict):
            raise ParseError("Desired state must be a mapping")

        device_id = config.get("device_id") or config.get("device")
        if not device_id:
            raise ParseError("Missing required field: device_id or device")

        state = DesiredState(device_id=str(device_id))

        for key, section in config.items():
            if key in ("device", "device_id"):
                continue
            if key not in RESOURCE_KINDS:
                raise ParseError(
                    f"Unknown resource kind: {key}. "
                    f"Must be one of {', '.join(RESOURCE_KINDS)}"
                )
            state.resources.extend(self._parse_kind(RESOURCE_KINDS[key], section))

        return state

    def parse_file(self, path: Union[str, Path]) -> DesiredState:
        """Load and parse a YAML desired state file."""
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ParseError(f"Invalid YAML in {path}: {e}") from e
        return self.parse(data or {})

    def _parse_kind(
        self,
        kind: ResourceKind,
        section: Any,
    ) -> list[DesiredResource]:
        """Parse the section of one resource kind."""
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ParseError(f"Section {kind.name} must be a mapping")

        if kind.singleton:
            return [self._parse_resource(kind, kind.identity({}), section)]

        return [
            self._parse_resource(kind, str(identity), body)
            for identity, body in section.items()
        ]

    def _parse_resource(
        self,
        kind: ResourceKind,
        identity: str,
        body: Any,
    ) -> DesiredResource:
        """Parse a single resource body."""
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ParseError(f"{kind.name} {identity}: body must be a mapping")

        ensure_str = str(body.get("ensure", "present"))
        try:
            ensure = Existence(ensure_str)
        except ValueError:
            raise ParseError(
                f"Invalid ensure for {kind.name} {identity}: {ensure_str}. "
                f"Must be 'present' or 'absent'"
            )

        context_keys = kind.parent_keys + kind.recreate_on
        resource = DesiredResource(kind=kind.name, identity=identity, ensure=ensure)

        for key, value in body.items():
            if key == "ensure":
                continue
            if key in context_keys:
                resource.context[key] = self._parse_context(kind, identity, key, value)
                continue
            resource.values[key] = self._coerce(kind, identity, key, value)

        return resource

    def _parse_context(self, kind: ResourceKind, identity: str, key: str, value: Any) -> Any:
        if key == "asn":
            try:
                return int(value)
            except (ValueError, TypeError):
                raise ParseError(f"Invalid AS number for {kind.name} {identity}: {value}")
        return str(value)

    def _coerce(self, kind: ResourceKind, identity: str, name: str, value: Any) -> Any:
        """Bring a YAML value into the field's value domain.

        Unknown fields are kept as-is; the validator reports them.
        """
        try:
            descriptor = kind.field(name)
        except KeyError:
            return value

        if descriptor.value_type == FieldType.LIST:
            if value is None or value is False:
                return []
            if isinstance(value, str):
                return [value]
            return [str(v) for v in value] if isinstance(value, list) else value

        if value is None:
            return ABSENT
        if isinstance(value, str) and value.lower() in ABSENT_WORDS:
            return ABSENT
        if isinstance(value, bool):
            return value

        if descriptor.value_type == FieldType.INTEGER:
            try:
                return int(value)
            except (ValueError, TypeError):
                raise ParseError(
                    f"Invalid integer for {kind.name} {identity} {name}: {value}"
                )
        if descriptor.value_type == FieldType.SYMBOL:
            return str(value).replace("-", "_")
        if descriptor.value_type == FieldType.STRING:
            return str(value)
        return value

