"""Pre-flight validation for desired state configurations.

Catches logical errors before any console communication.
"""
import ipaddress
from typing import Any

from .fields import FieldDescriptor
from .resources import RESOURCE_KINDS, ResourceKind, RouteMapEntry
from .schema import (
    ABSENT,
    DesiredResource,
    DesiredState,
    Existence,
    FieldType,
    ValidationResult,
)

MAX_ASN = 4294967295

# Quagga's compiled-in multipath limit
MAX_PATHS = 64


class ConfigValidator:
    """Validate desired state for logical errors before execution."""

    def validate(self, desired: DesiredState) -> ValidationResult:
        """
        Validate a desired state configuration.

        Performs pre-flight checks:
        - Known resource kinds and well-formed identities
        - Duplicate resources
        - Known field names and value types
        - Context values (AS number range, route-map action)

        Args:
            desired: The desired state to validate

        Returns:
            ValidationResult with valid flag, errors, and warnings
        """
        errors: list[str] = []
        warnings: list[str] = []

        seen: set[tuple[str, str]] = set()
        for resource in desired.resources:
            key = (resource.kind, resource.identity)
            if key in seen:
                errors.append(f"Duplicate resource: {resource.kind} {resource.identity}")
                continue
            seen.add(key)

            kind = RESOURCE_KINDS.get(resource.kind)
            if kind is None:
                errors.append(f"Unknown resource kind: {resource.kind}")
                continue

            self._validate_resource(kind, resource, errors, warnings)

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _validate_resource(
        self,
        kind: ResourceKind,
        resource: DesiredResource,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        label = f"{kind.name} {resource.identity}"

        problem = kind.validate_identity(resource.identity)
        if problem:
            errors.append(problem)
            return

        asn = resource.context.get("asn")
        if asn is not None and not 1 <= asn <= MAX_ASN:
            errors.append(f"Invalid AS number {asn} for {label}: must be 1-{MAX_ASN}")

        if isinstance(kind, RouteMapEntry):
            action = resource.context.get("action")
            if action is not None and action not in kind.ACTIONS:
                errors.append(
                    f"Invalid action '{action}' for {label}. Valid: permit, deny"
                )
            if action is None and resource.ensure == Existence.PRESENT:
                warnings.append(
                    f"{label} has no action; it can only be updated, not created"
                )

        if resource.ensure == Existence.ABSENT and resource.values:
            warnings.append(f"{label} is ensured absent; field values are ignored")

        for name, value in resource.values.items():
            try:
                descriptor = kind.field(name)
            except KeyError:
                errors.append(f"Unknown field '{name}' for {label}")
                continue
            message = self._check_value(descriptor, value)
            if message:
                errors.append(f"{label} {name}: {message}")

        router_id = resource.values.get("router_id")
        if isinstance(router_id, str):
            try:
                ipaddress.IPv4Address(router_id)
            except ValueError:
                errors.append(f"{label} router_id: '{router_id}' is not an IPv4 address")

        for name in ("maximum_ebgp_paths", "maximum_ibgp_paths"):
            paths = resource.values.get(name)
            if isinstance(paths, int) and not isinstance(paths, bool) and paths > MAX_PATHS:
                warnings.append(f"{label} {name}: {paths} exceeds {MAX_PATHS} paths")

    def _check_value(self, descriptor: FieldDescriptor, value: Any) -> str:
        """Return an error message if ``value`` does not fit the field type."""
        value_type = descriptor.value_type

        if value_type == FieldType.LIST:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                return "must be a list of strings"
            return ""

        if value is ABSENT:
            return ""

        if value_type == FieldType.BOOLEAN:
            if not isinstance(value, bool):
                return f"must be true or false, got {value!r}"
        elif value_type == FieldType.INTEGER:
            if isinstance(value, bool) or not isinstance(value, int):
                return f"must be an integer, got {value!r}"
            if value < 1:
                return f"must be positive, got {value}"
        elif not isinstance(value, (str, bool)):
            return f"must be a string or a flag, got {value!r}"

        return ""
