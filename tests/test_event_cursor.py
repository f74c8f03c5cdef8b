from __future__ import annotations

import io

import pytest

from capture_script.errors import ScriptGrammarError, ScriptSyntaxError
from capture_script.events import EventCursor, EventKind, check_event, scalar_text


def test_events_come_out_in_document_order() -> None:
    with EventCursor("exposure: '100'\n") as cur:
        kinds = []
        texts = []
        while True:
            ev = cur.next()
            kinds.append(ev.kind)
            if ev.kind == EventKind.SCALAR:
                texts.append(scalar_text(ev))
            if ev.kind == EventKind.STREAM_END:
                break

    assert kinds == [
        EventKind.STREAM_START,
        EventKind.DOCUMENT_START,
        EventKind.MAPPING_START,
        EventKind.SCALAR,
        EventKind.SCALAR,
        EventKind.MAPPING_END,
        EventKind.DOCUMENT_END,
        EventKind.STREAM_END,
    ]
    # Scalars stay untyped text.
    assert texts == ["exposure", "100"]


def test_expected_kind_mismatch_names_both_kinds() -> None:
    with EventCursor(io.StringIO("- a\n- b\n")) as cur:
        cur.next(EventKind.STREAM_START)
        cur.next(EventKind.DOCUMENT_START)
        with pytest.raises(ScriptGrammarError) as ei:
            cur.next(EventKind.MAPPING_START)

    err = ei.value
    assert err.expected == "mapping-start"
    assert err.actual == "sequence-start"
    assert (err.line, err.column) == (0, 0)
    assert "Expected mapping-start event, got sequence-start" in str(err)
    assert str(err).startswith("line 1, column 1:")


def test_scalar_positions_are_reported() -> None:
    with EventCursor("frames:\n  - 12:\n") as cur:
        for _ in range(6):
            cur.next()
        ev = cur.next(EventKind.SCALAR)

    assert scalar_text(ev) == "12"
    assert (ev.line, ev.column) == (1, 4)


def test_alias_events_are_surfaced() -> None:
    with EventCursor("a: *missing\n") as cur:
        for _ in range(4):
            cur.next()
        ev = cur.next()
    assert ev.kind == EventKind.ALIAS
    with pytest.raises(ScriptGrammarError):
        check_event(ev, EventKind.SCALAR)


def test_malformed_yaml_is_a_syntax_error() -> None:
    with pytest.raises(ScriptSyntaxError) as ei:
        with EventCursor("frames: [1, 2\n") as cur:
            for _ in range(20):
                cur.next()
    assert ei.value.line is not None
    assert "Invalid YAML" in str(ei.value)


def test_reading_past_the_end_fails() -> None:
    with EventCursor("") as cur:
        cur.next(EventKind.STREAM_START)
        cur.next(EventKind.STREAM_END)
        with pytest.raises(ScriptGrammarError, match="Unexpected end of script"):
            cur.next()


def test_closed_cursor_yields_no_more_events() -> None:
    cur = EventCursor("a: 1\n")
    with cur:
        cur.next(EventKind.STREAM_START)
    with pytest.raises(ScriptGrammarError):
        cur.next()
