"""Typed decoding of script scalars into control values.

Numeric text is read the way the C library reads it (``strtol`` /
``strtoll`` / ``strtof`` / ``atoi``): leading whitespace and a sign are
accepted, the longest numeric prefix is used and trailing garbage is
ignored. Floats may also be written in C hexadecimal form (``0x1.8p3``).
Text with no numeric prefix decodes to zero. Only booleans have a
rejectable representation.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re

import numpy as np

from .controls import INTEGER_DTYPES, ControlId, ControlType, ControlValue


log = logging.getLogger(__name__)

_C_SPACE = " \t\n\v\f\r"
_INT_PREFIX = re.compile(r"[+-]?[0-9]+")
_FLOAT_PREFIX = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_HEX_FLOAT_PREFIX = re.compile(
    r"[+-]?0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?[0-9]+)?",
    re.IGNORECASE,
)

_INT64 = np.iinfo(np.int64)


class UnsupportedRepresentation(ValueError):
    """Text that has no meaning for the requested control type."""

    def __init__(self, control_type: ControlType, text: str):
        self.control_type = control_type
        self.text = text
        super().__init__(f"Unsupported representation {text!r} for {control_type.value}")


@dataclass(frozen=True)
class DecodeIssue:
    """A control whose value could not be decoded (stored as empty)."""

    control: str
    type_name: str
    text: str

    @property
    def message(self) -> str:
        return f"Unsupported control '{self.text}' for {self.type_name} control {self.control}"


def parse_integer(text: str) -> int:
    """``strtoll`` semantics: decimal prefix, 0 when absent, saturate at int64."""

    m = _INT_PREFIX.match(text.lstrip(_C_SPACE))
    if m is None:
        return 0
    return max(_INT64.min, min(_INT64.max, int(m.group(0))))


def parse_float(text: str) -> float:
    """``strtof`` semantics: decimal or hex float prefix, 0.0 when absent, float32 result."""

    text = text.lstrip(_C_SPACE)
    m = _HEX_FLOAT_PREFIX.match(text)
    if m is not None:
        try:
            value = float.fromhex(m.group(0))
        except OverflowError:
            value = -np.inf if m.group(0).startswith("-") else np.inf
    else:
        m = _FLOAT_PREFIX.match(text)
        if m is None:
            return 0.0
        value = float(m.group(0))
    with np.errstate(over="ignore"):
        return float(np.float32(value))


def parse_frame_number(text: str) -> int:
    """``atoi`` into an unsigned frame counter.

    Non-numeric text gives frame 0; negative and oversized numbers wrap
    modulo 2**32 like the C conversion does, with a warning.
    """

    raw = parse_integer(text)
    frame = int(np.array(raw, dtype=np.int64).astype(np.uint32))
    if frame != raw:
        log.warning("Frame number %r is out of range; using frame %d", text, frame)
    return frame


def _wrap(value: int, control_type: ControlType) -> int:
    # Same truncation as assigning a C long to a narrower integer.
    return int(np.array(value, dtype=np.int64).astype(INTEGER_DTYPES[control_type]))


def decode_value(control_type: ControlType, text: str) -> ControlValue:
    """Convert ``text`` into a value of ``control_type``.

    Raises :class:`UnsupportedRepresentation` for boolean text other than
    ``true``/``false``. Rectangle and Size have no textual form and always
    decode to the empty value.
    """

    control_type = ControlType(control_type)

    if control_type == ControlType.NONE:
        return ControlValue()
    elif control_type == ControlType.BOOL:
        if text == "true":
            return ControlValue(ControlType.BOOL, True)
        if text == "false":
            return ControlValue(ControlType.BOOL, False)
        raise UnsupportedRepresentation(control_type, text)
    elif control_type in (ControlType.BYTE, ControlType.INT32, ControlType.INT64):
        return ControlValue(control_type, _wrap(parse_integer(text), control_type))
    elif control_type == ControlType.FLOAT:
        return ControlValue(ControlType.FLOAT, parse_float(text))
    elif control_type == ControlType.STRING:
        return ControlValue(ControlType.STRING, text)
    elif control_type in (ControlType.RECTANGLE, ControlType.SIZE):
        # TODO: parse Rectangle "[x, y, w, h]" and Size "[w, h]" sequences.
        return ControlValue()

    raise AssertionError(f"unhandled control type {control_type!r}")


def unpack_control(
    control: ControlId,
    text: str,
    issues: list[DecodeIssue] | None = None,
) -> ControlValue:
    """Decode ``text`` for ``control``; failures are reported, never raised.

    An undecodable value is logged, appended to ``issues`` when given, and
    replaced by the empty value so parsing can go on.
    """

    try:
        return decode_value(control.type, text)
    except UnsupportedRepresentation:
        issue = DecodeIssue(control=control.name, type_name=control.type.value, text=text)
        log.warning("%s", issue.message)
        if issues is not None:
            issues.append(issue)
        return ControlValue()
