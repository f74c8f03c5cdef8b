"""Control model shared by the script parser and its consumers.

A camera exposes a set of controls, each identified by a :class:`ControlId`
(numeric id + name + :class:`ControlType`). A capture script assigns
:class:`ControlValue` objects to those ids, grouped per frame in a
:class:`ControlList`.

Notes
-----
- ``ControlValue`` is a tagged union: the payload always matches ``type``.
  The empty value has type ``none``.
- Integer payloads are checked against the native range of their type
  (uint8 / int32 / int64). Ranges advertised by a device are not enforced.
- Rectangle and Size controls exist in the type list but have no payload
  representation here; their values are always empty.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

import numpy as np


class ControlType(str, Enum):
    """Declared type of a control; the values double as display names."""

    NONE = "none"
    BOOL = "bool"
    BYTE = "byte"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    STRING = "string"
    RECTANGLE = "Rectangle"
    SIZE = "Size"


# Fixed-width dtypes of the numeric control types.
INTEGER_DTYPES: dict[ControlType, type] = {
    ControlType.BYTE: np.uint8,
    ControlType.INT32: np.int32,
    ControlType.INT64: np.int64,
}


@dataclass(frozen=True)
class ControlId:
    """Identity of a controllable parameter."""

    id: int
    name: str
    type: ControlType

    def __str__(self) -> str:
        return f"{self.name} ({self.type.value})"


@dataclass(frozen=True)
class ControlInfo:
    """Limits a device advertises for a control (informational only)."""

    minimum: Any = None
    maximum: Any = None
    default: Any = None


@dataclass(frozen=True, eq=False)
class ControlValue:
    """Decoded value of one control.

    Float payloads compare by their float32 bit pattern, so a NaN equals the
    same NaN.
    """

    type: ControlType = ControlType.NONE
    value: Any = None

    def __post_init__(self) -> None:
        t = ControlType(self.type)
        object.__setattr__(self, "type", t)
        v = self.value

        if t in (ControlType.RECTANGLE, ControlType.SIZE):
            raise ValueError(f"{t.value} control values are not supported")

        if t == ControlType.NONE:
            if v is not None:
                raise ValueError(f"empty control value cannot carry a payload: {v!r}")
        elif t == ControlType.BOOL:
            if not isinstance(v, (bool, np.bool_)):
                raise TypeError(f"bool control value expected, got {v!r}")
            object.__setattr__(self, "value", bool(v))
        elif t in INTEGER_DTYPES:
            if isinstance(v, (bool, np.bool_)) or not isinstance(v, (int, np.integer)):
                raise TypeError(f"{t.value} control value expected, got {v!r}")
            info = np.iinfo(INTEGER_DTYPES[t])
            if not info.min <= int(v) <= info.max:
                raise ValueError(f"{v} out of range for {t.value} [{info.min}, {info.max}]")
            object.__setattr__(self, "value", int(v))
        elif t == ControlType.FLOAT:
            if isinstance(v, (bool, np.bool_)) or not isinstance(v, (int, float, np.number)):
                raise TypeError(f"float control value expected, got {v!r}")
            object.__setattr__(self, "value", float(np.float32(v)))
        elif t == ControlType.STRING:
            if not isinstance(v, str):
                raise TypeError(f"string control value expected, got {v!r}")

    def _key(self) -> tuple[ControlType, Any]:
        if self.type == ControlType.FLOAT:
            return self.type, np.float32(self.value).tobytes()
        return self.type, self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ControlValue):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def is_none(self) -> bool:
        return self.type == ControlType.NONE

    def __str__(self) -> str:
        if self.is_none:
            return "<none>"
        if self.type == ControlType.BOOL:
            return "true" if self.value else "false"
        return str(self.value)


class ControlList(Mapping):
    """Controls to apply together, keyed by numeric control id.

    Setting an id twice keeps the last value. Once frozen the list is
    read-only.
    """

    def __init__(self) -> None:
        self._values: dict[int, ControlValue] = {}
        self._ids: dict[int, ControlId] = {}
        self._frozen = False

    def set(self, control: ControlId, value: ControlValue) -> None:
        if self._frozen:
            raise RuntimeError("ControlList is frozen")
        self._values[control.id] = value
        self._ids[control.id] = control

    def freeze(self) -> "ControlList":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def control(self, key: int) -> ControlId:
        """Return the ControlId stored under a numeric id."""
        return self._ids[key]

    def by_name(self) -> dict[str, ControlValue]:
        return {self._ids[k].name: v for k, v in self._values.items()}

    def __getitem__(self, key: int | ControlId) -> ControlValue:
        if isinstance(key, ControlId):
            key = key.id
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        if isinstance(key, ControlId):
            key = key.id
        return key in self._values

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        items = ", ".join(f"{self._ids[k].name}={v}" for k, v in self._values.items())
        return f"ControlList({items})"


@dataclass(frozen=True)
class StaticCamera:
    """Minimal camera: a fixed ControlId -> ControlInfo catalog.

    Anything with a ``controls()`` method returning such a mapping can stand
    in for it (a live device wrapper, a test double).
    """

    name: str = "camera"
    catalog: Mapping[ControlId, ControlInfo] = field(default_factory=dict)

    def controls(self) -> Mapping[ControlId, ControlInfo]:
        return self.catalog
