"""Frame-synchronous capture scripts.

A capture script lists, for numbered frames of a capture session, the
control values to apply on that frame::

    frames:
      - 0:
          Brightness: 128
      - 5:
          AwbEnable: true

:class:`CaptureScript` compiles such a file into a frame -> ControlList table
in a single pass over the YAML event stream. The first structural problem
aborts the whole script: the object is then invalid and answers every frame
lookup with an empty list.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import IO, Mapping, Protocol

from .controls import ControlId, ControlInfo, ControlList
from .decode import DecodeIssue, parse_frame_number, unpack_control
from .errors import (
    CaptureScriptError,
    ScriptGrammarError,
    ScriptOpenError,
    UnsupportedControlError,
    UnsupportedSectionError,
)
from .events import Event, EventCursor, EventKind, check_event, scalar_text


log = logging.getLogger(__name__)

FRAMES_SECTION = "frames"


class Camera(Protocol):
    def controls(self) -> Mapping[ControlId, ControlInfo]: ...


class CaptureScript:
    """Per-frame controls compiled from a capture script file."""

    def __init__(self, camera: Camera, file_name: str | Path):
        self.file_name = str(file_name)
        self._setup(camera)

        try:
            with open(file_name, "r", encoding="utf-8") as fh:
                self._load(fh)
        except (OSError, UnicodeDecodeError) as e:
            reason = getattr(e, "strerror", None) or e
            self._fail(ScriptOpenError(f"Failed to open capture script {file_name}: {reason}"))

    @classmethod
    def from_text(cls, camera: Camera, text: str, *, name: str = "<string>") -> "CaptureScript":
        """Compile a script held in memory."""

        script = cls.__new__(cls)
        script.file_name = name
        script._setup(camera)
        script._load(text)
        return script

    def _setup(self, camera: Camera) -> None:
        self.valid = False
        self.error: CaptureScriptError | None = None
        self.issues: list[DecodeIssue] = []
        self._frame_controls: dict[int, ControlList] = {}

        # Map the camera's controls to their names so that script keys can be
        # resolved while parsing.
        self._controls: dict[str, ControlId] = {c.name: c for c in camera.controls()}

    def _load(self, stream: str | IO[str]) -> None:
        try:
            with EventCursor(stream) as cursor:
                self._parse_script(cursor)
        except CaptureScriptError as e:
            self._fail(e)
            return

        for ctrls in self._frame_controls.values():
            ctrls.freeze()
        self._frame_controls = MappingProxyType(self._frame_controls)
        self.valid = True
        log.debug("Capture script %s: %d frame(s) scripted", self.file_name, len(self._frame_controls))

    def _fail(self, err: CaptureScriptError) -> None:
        log.error("Capture script %s: %s", self.file_name, err)
        self.error = err
        self.valid = False
        self._frame_controls = {}

    # ------------------------------ queries ------------------------------

    def is_valid(self) -> bool:
        return self.valid

    def frame_controls(self, frame: int) -> ControlList:
        """Controls scripted for ``frame``; a new empty list when there are none."""

        ctrls = self._frame_controls.get(int(frame))
        if ctrls is None:
            return ControlList().freeze()
        return ctrls

    def frames(self) -> list[int]:
        return sorted(self._frame_controls)

    def __len__(self) -> int:
        return len(self._frame_controls)

    def __repr__(self) -> str:
        state = "valid" if self.valid else "invalid"
        return f"CaptureScript({self.file_name!r}, {state}, frames={self.frames()})"

    # ------------------------------ parsing ------------------------------

    def _parse_script(self, cursor: EventCursor) -> None:
        cursor.next(EventKind.STREAM_START)
        cursor.next(EventKind.DOCUMENT_START)
        cursor.next(EventKind.MAPPING_START)

        while True:
            event = cursor.next()
            if event.kind == EventKind.MAPPING_END:
                return

            check_event(event, EventKind.SCALAR)
            section = scalar_text(event)
            if section == FRAMES_SECTION:
                self._parse_frames(cursor)
            else:
                raise UnsupportedSectionError(section, line=event.line, column=event.column)

    def _parse_frames(self, cursor: EventCursor) -> None:
        cursor.next(EventKind.SEQUENCE_START)

        while True:
            event = cursor.next()
            if event.kind == EventKind.SEQUENCE_END:
                return

            check_event(event, EventKind.MAPPING_START)
            self._parse_frame(cursor)

    def _parse_frame(self, cursor: EventCursor) -> None:
        key = self._parse_scalar(cursor, "frame number")
        frame = parse_frame_number(scalar_text(key))

        cursor.next(EventKind.MAPPING_START)

        controls = ControlList()
        while True:
            event = cursor.next()
            if event.kind == EventKind.MAPPING_END:
                break

            check_event(event, EventKind.SCALAR)
            self._parse_control(cursor, scalar_text(event), event, controls)

        if frame in self._frame_controls:
            log.warning("Frame %d is scripted more than once; keeping the last entry", frame)
        self._frame_controls[frame] = controls

        cursor.next(EventKind.MAPPING_END)

    def _parse_control(self, cursor: EventCursor, name: str, key: Event, controls: ControlList) -> None:
        if not name:
            raise ScriptGrammarError("Empty control name", line=key.line, column=key.column)

        control = self._controls.get(name)
        if control is None:
            raise UnsupportedControlError(name, line=key.line, column=key.column)

        value = self._parse_scalar(cursor, f"value of {name}")
        controls.set(control, unpack_control(control, scalar_text(value), self.issues))

    def _parse_scalar(self, cursor: EventCursor, what: str) -> Event:
        event = cursor.next(EventKind.SCALAR)
        if not scalar_text(event):
            raise ScriptGrammarError(f"Empty {what}", line=event.line, column=event.column)
        return event
