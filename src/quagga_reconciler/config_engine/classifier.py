"""Line classifier for ``show running-config`` output.

Scans the dump line by line and turns the lines relevant to one resource
kind into a stream of events:

    BlockStart(hints)           a block or a section of it begins
    FieldMatch(name, raw)       a line inside it sets a field
    BlockEnd()                  the open block or section ends

Rules:
- ``!`` and blank lines are skipped.
- A column-0 line matching the kind's header starts a block.
- Any other column-0 line ends the open block; scanning goes on, so a later
  header opens a new one.
- Inside a block each line is tried against the field descriptors in table
  order and the first match wins. Unrecognized lines are ignored.
- A section the kind does not manage (e.g. ``address-family ipv4 vpn``)
  closes the open record; its lines are dropped until the section exits or
  a managed section begins.
"""
import logging
from typing import Any, Iterator, Optional, Union

from .resources import ResourceKind
from .schema import BlockEnd, BlockStart, FieldMatch

logger = logging.getLogger(__name__)

Event = Union[BlockStart, FieldMatch, BlockEnd]

COMMENT = "!"


def _config_lines(text: str) -> Iterator[str]:
    for raw in text.splitlines():
        line = raw.rstrip()
        if not line or line == COMMENT:
            continue
        yield line


def _is_top_level(line: str) -> bool:
    return not line[0].isspace()


class LineClassifier:
    """Classify running-config lines for one resource kind."""

    def __init__(self, kind: ResourceKind):
        self.kind = kind

    def classify(self, text: str) -> Iterator[Event]:
        """Yield classification events for ``text`` in encounter order."""
        if not self.kind.has_block:
            yield from self._classify_top_level(text)
            return

        inside = False
        # False while inside the block but in a section this kind skips
        recording = False
        header_hints: dict[str, Any] = {}

        for line in _config_lines(text):
            if _is_top_level(line):
                match = self.kind.header_pattern.match(line)
                if recording:
                    yield BlockEnd()
                inside = recording = False
                if match:
                    header_hints = match.groupdict()
                    inside = recording = True
                    yield BlockStart(dict(header_hints))
                continue

            if not inside:
                continue

            section = self._section_hints(line)
            if section is not None:
                if recording:
                    yield BlockEnd()
                recording = True
                yield BlockStart({**header_hints, **section})
                continue

            if self._is_foreign_section(line):
                if recording:
                    yield BlockEnd()
                recording = False
                logger.debug(f"[{self.kind.name}] skipping section: {line.strip()}")
                continue

            if self._is_section_exit(line):
                if recording:
                    yield BlockEnd()
                recording = True
                yield BlockStart(dict(header_hints))
                continue

            if not recording:
                continue

            event = self.match_field(line)
            if event is not None:
                yield event
            else:
                logger.debug(f"[{self.kind.name}] ignoring line: {line.strip()}")

        if recording:
            yield BlockEnd()

    def _classify_top_level(self, text: str) -> Iterator[Event]:
        """Kinds without a block are made of column-0 lines."""
        started = False
        for line in _config_lines(text):
            event = self.match_field(line)
            if event is None:
                continue
            if not started:
                started = True
                yield BlockStart({})
            yield event

        if started:
            yield BlockEnd()

    def match_field(self, line: str) -> Optional[FieldMatch]:
        """Match ``line`` against the descriptor table; first match wins."""
        for descriptor in self.kind.fields:
            match = descriptor.match(line)
            if match:
                raw = match.group(1) if match.re.groups else None
                return FieldMatch(descriptor.name, raw)
        return None

    def _section_hints(self, line: str) -> Optional[dict[str, Any]]:
        pattern = self.kind.section_pattern
        if pattern is None:
            return None
        match = pattern.match(line)
        if not match:
            return None
        return {k: v for k, v in match.groupdict().items() if v is not None}

    def _is_foreign_section(self, line: str) -> bool:
        pattern = self.kind.foreign_section_pattern
        return bool(pattern and pattern.match(line))

    def _is_section_exit(self, line: str) -> bool:
        pattern = self.kind.section_exit_pattern
        return bool(pattern and pattern.match(line))


def scan_headers(text: str, kind: ResourceKind) -> list[dict[str, Any]]:
    """First pass of a two-phase read: hints of every block header in ``text``."""
    if not kind.has_block:
        return []

    headers = []
    for line in _config_lines(text):
        if not _is_top_level(line):
            continue
        match = kind.header_pattern.match(line)
        if match:
            headers.append(match.groupdict())
    return headers
