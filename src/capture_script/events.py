"""Pull-based access to the YAML event stream of a capture script.

The script grammar is imposed on PyYAML's low-level events rather than on a
loaded document, so that every violation can be reported with the position
of the offending node.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import IO, Iterator

import yaml

from .errors import ScriptGrammarError, ScriptSyntaxError


class EventKind(str, Enum):
    """Kinds of YAML events; the values are the names used in diagnostics."""

    STREAM_START = "stream-start"
    STREAM_END = "stream-end"
    DOCUMENT_START = "document-start"
    DOCUMENT_END = "document-end"
    ALIAS = "alias"
    SCALAR = "scalar"
    SEQUENCE_START = "sequence-start"
    SEQUENCE_END = "sequence-end"
    MAPPING_START = "mapping-start"
    MAPPING_END = "mapping-end"


_KINDS: dict[type, EventKind] = {
    yaml.StreamStartEvent: EventKind.STREAM_START,
    yaml.StreamEndEvent: EventKind.STREAM_END,
    yaml.DocumentStartEvent: EventKind.DOCUMENT_START,
    yaml.DocumentEndEvent: EventKind.DOCUMENT_END,
    yaml.AliasEvent: EventKind.ALIAS,
    yaml.ScalarEvent: EventKind.SCALAR,
    yaml.SequenceStartEvent: EventKind.SEQUENCE_START,
    yaml.SequenceEndEvent: EventKind.SEQUENCE_END,
    yaml.MappingStartEvent: EventKind.MAPPING_START,
    yaml.MappingEndEvent: EventKind.MAPPING_END,
}


@dataclass(frozen=True)
class Event:
    kind: EventKind
    line: int
    column: int
    value: str | None = None  # scalar payload only


def scalar_text(event: Event) -> str:
    """Return the decoded text of a scalar event.

    Only valid once the event kind has been checked (``expect=SCALAR``).
    """

    assert event.kind == EventKind.SCALAR, event.kind
    return event.value or ""


class EventCursor:
    """Hands out script events one at a time.

    Use as a context manager: the underlying event generator is closed on
    exit, including when parsing fails half-way.
    """

    def __init__(self, stream: str | IO[str]):
        self._events: Iterator[yaml.Event] = yaml.parse(stream, Loader=yaml.SafeLoader)
        self._last: Event | None = None

    def __enter__(self) -> "EventCursor":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self) -> None:
        close = getattr(self._events, "close", None)
        if close is not None:
            close()

    def next(self, expect: EventKind | None = None) -> Event:
        """Pull the next event, optionally requiring it to be of kind ``expect``."""

        try:
            raw = next(self._events)
        except StopIteration:
            line, column = (self._last.line, self._last.column) if self._last else (None, None)
            raise ScriptGrammarError(
                "Unexpected end of script",
                expected=expect.value if expect else None,
                actual=None,
                line=line,
                column=column,
            ) from None
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            raise ScriptSyntaxError(
                f"Invalid YAML: {e.problem or e.context or 'syntax error'}",
                line=mark.line if mark else None,
                column=mark.column if mark else None,
            ) from e
        except yaml.YAMLError as e:
            raise ScriptSyntaxError(f"Invalid YAML: {e}") from e

        mark = raw.start_mark
        event = Event(
            kind=_KINDS[type(raw)],
            line=mark.line if mark else 0,
            column=mark.column if mark else 0,
            value=raw.value if isinstance(raw, yaml.ScalarEvent) else None,
        )
        self._last = event

        if expect is not None:
            check_event(event, expect)
        return event


def check_event(event: Event, expect: EventKind) -> None:
    """Raise :class:`ScriptGrammarError` unless ``event`` is of kind ``expect``."""

    if event.kind != expect:
        raise ScriptGrammarError(
            f"Expected {expect.value} event, got {event.kind.value}",
            expected=expect.value,
            actual=event.kind.value,
            line=event.line,
            column=event.column,
        )
