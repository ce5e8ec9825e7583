"""Fold classifier events into fully-defaulted resource records."""
import logging
from typing import Any, Iterable, Optional

from .classifier import Event, LineClassifier
from .errors import TypeDecodeError
from .fields import FieldDescriptor
from .resources import ResourceKind
from .schema import BlockEnd, BlockStart, FieldMatch, FieldType, ResourceRecord

logger = logging.getLogger(__name__)


def decode_value(descriptor: FieldDescriptor, raw: Optional[str]) -> Any:
    """Decode a captured value per the descriptor's type.

    A match without a capture is a presence flag and decodes to True
    whatever the type. A bare ``log-adjacency-changes`` is therefore True,
    and a desired True against it plans nothing. List fields decode to the
    single element; the caller appends it.
    """
    if raw is None:
        return True

    value_type = descriptor.value_type
    if value_type == FieldType.BOOLEAN:
        return True
    if value_type == FieldType.INTEGER:
        try:
            return int(raw)
        except ValueError:
            raise TypeDecodeError(descriptor.name, raw, value_type.value) from None
    if value_type == FieldType.SYMBOL:
        return raw.replace("-", "_")
    return raw


class StateMaterializer:
    """Build resource records of one kind from classifier events."""

    def __init__(self, kind: ResourceKind):
        self.kind = kind

    def materialize(self, events: Iterable[Event]) -> list[ResourceRecord]:
        """Return records in first-seen order.

        A section whose identity was already seen is re-entered rather than
        reset. Singleton kinds always yield exactly one record.
        """
        records: dict[str, ResourceRecord] = {}
        current: Optional[ResourceRecord] = None

        for event in events:
            if isinstance(event, BlockStart):
                current = self._open(records, event.hints)
            elif isinstance(event, BlockEnd):
                current = None
            elif isinstance(event, FieldMatch) and current is not None:
                self._apply(current, event)

        for record in records.values():
            logger.debug(f"Instantiated {self.kind.name} {record.identity}")

        if self.kind.singleton:
            if not records:
                return [self.kind.absent_record()]
            return [next(iter(records.values()))]

        return list(records.values())

    def _open(
        self,
        records: dict[str, ResourceRecord],
        hints: dict[str, Any],
    ) -> ResourceRecord:
        identity = self.kind.identity(hints)
        if identity not in records:
            records[identity] = self.kind.new_record(
                identity, context=self.kind.context_from_hints(hints)
            )
        return records[identity]

    def _apply(self, record: ResourceRecord, event: FieldMatch) -> None:
        descriptor = self.kind.field(event.field_name)
        value = decode_value(descriptor, event.raw)

        if descriptor.is_list:
            record.fields[descriptor.name].append(value)
        else:
            record.fields[descriptor.name] = value


def parse_running_config(text: str, kind: ResourceKind) -> list[ResourceRecord]:
    """Parse a running-config dump into records of ``kind``."""
    events = LineClassifier(kind).classify(text)
    return StateMaterializer(kind).materialize(events)
