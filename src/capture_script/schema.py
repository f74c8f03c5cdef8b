"""Pydantic schema for control catalog files.

A catalog describes the controls a camera exposes when no live device is at
hand (offline checks, tests)::

    camera: imx219
    controls:
      - {id: 1, name: AeEnable, type: bool}
      - {id: 2, name: Brightness, type: float, min: -1.0, max: 1.0, default: 0.0}

Notes
-----
- Unknown keys are rejected; a typo in a catalog silently drops a limit
  otherwise.
- `catalog_validate()` returns a small report object (ok/errors/catalog) instead of
  raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .controls import ControlType


# ---------------------------- report objects ----------------------------


@dataclass(frozen=True)
class SchemaIssue:
    code: str
    message: str
    hint: str = ""


@dataclass(frozen=True)
class SchemaReport:
    ok: bool
    errors: List[SchemaIssue]
    catalog: Optional["CatalogSchema"] = None

    def summary(self) -> str:
        return "; ".join(f"{e.message} ({e.hint})" if e.hint else e.message for e in self.errors)


# ------------------------------ pydantic ------------------------------


class ControlEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int = Field(ge=0)
    name: str = Field(min_length=1)
    type: ControlType
    min: Optional[Any] = None
    max: Optional[Any] = None
    default: Optional[Any] = None


class CatalogSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    camera: str = "camera"
    controls: List[ControlEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids_and_names(self) -> "CatalogSchema":
        seen_ids: Dict[int, str] = {}
        seen_names: set[str] = set()
        for c in self.controls:
            if c.id in seen_ids:
                raise ValueError(f"duplicate control id {c.id} ({seen_ids[c.id]}, {c.name})")
            if c.name in seen_names:
                raise ValueError(f"duplicate control name {c.name!r}")
            seen_ids[c.id] = c.name
            seen_names.add(c.name)
        return self


def catalog_validate(data: Dict[str, Any]) -> SchemaReport:
    """Validate a catalog dict against the pydantic schema."""

    try:
        catalog = CatalogSchema.model_validate(data)
    except ValidationError as e:
        # Keep it human-readable; detailed trace is not useful for users.
        msg = str(e)
        if len(msg) > 2000:
            msg = msg[:2000] + "…"
        return SchemaReport(
            ok=False,
            errors=[SchemaIssue(code="SCHEMA", message=msg, hint="Check control ids, names and types")],
        )
    return SchemaReport(ok=True, errors=[], catalog=catalog)
