"""Failures raised while reading a capture script.

All of them abort the parse. :class:`capture_script.script.CaptureScript`
catches them once, logs them and marks itself invalid, so callers normally
only see them through ``CaptureScript.error``.
"""

from __future__ import annotations

from typing import Any


class CaptureScriptError(RuntimeError):
    """Base class for structural capture script failures.

    ``line`` and ``column`` are 0-based, as in YAML marks; the message shows
    them 1-based.
    """

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.reason = message
        self.line = line
        self.column = column
        self.context = context or {}
        base = message
        if line is not None:
            base = f"line {line + 1}, column {(column or 0) + 1}: {base}"
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in list(self.context.items())[:8])
            base += f" | ctx: {ctx}"
        super().__init__(base)


class ScriptOpenError(CaptureScriptError):
    """The script file could not be opened or read."""


class ScriptSyntaxError(CaptureScriptError):
    """The YAML event source rejected the text itself."""


class ScriptGrammarError(CaptureScriptError):
    """An event of the wrong kind appeared where the script grammar needs another."""

    def __init__(
        self,
        message: str,
        *,
        expected: str | None = None,
        actual: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        self.expected = expected
        self.actual = actual
        super().__init__(message, line=line, column=column)


class UnsupportedSectionError(CaptureScriptError):
    """A top-level key other than ``frames``."""

    def __init__(self, section: str, *, line: int | None = None, column: int | None = None):
        self.section = section
        super().__init__(f"Unsupported section '{section}'", line=line, column=column)


class UnsupportedControlError(CaptureScriptError):
    """A control name the camera does not expose."""

    def __init__(self, name: str, *, line: int | None = None, column: int | None = None):
        self.name = name
        super().__init__(f"Unsupported control '{name}'", line=line, column=column)
