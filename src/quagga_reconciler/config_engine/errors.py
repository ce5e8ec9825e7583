"""Exceptions raised by the reconciliation engine."""


class ReconcileError(Exception):
    """Base class for reconciliation failures."""
    pass


class ParseError(ReconcileError):
    """Error parsing a desired state document or a running configuration."""
    pass


class TypeDecodeError(ParseError):
    """A captured configuration value cannot be decoded to its field type."""

    def __init__(self, field_name: str, raw: str, value_type: str):
        self.field_name = field_name
        self.raw = raw
        self.value_type = value_type
        super().__init__(
            f"Cannot decode {field_name!r} value {raw!r} as {value_type}"
        )


class IdentityResolutionError(ReconcileError):
    """Parent block context for a resource could not be determined."""
    pass


class StateTransitionError(ReconcileError):
    """Requested operation is not valid for the resource's existence."""
    pass
