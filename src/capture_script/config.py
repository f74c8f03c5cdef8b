from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .controls import ControlId, ControlInfo, StaticCamera
from .schema import catalog_validate


log = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """Raised when a control catalog file cannot be used."""


def camera_from_catalog(data: dict[str, Any]) -> StaticCamera:
    """Build a :class:`StaticCamera` from an already parsed catalog mapping."""

    report = catalog_validate(data)
    if not report.ok:
        raise CatalogError(f"Invalid control catalog: {report.summary()}")
    schema = report.catalog

    catalog = {
        ControlId(id=c.id, name=c.name, type=c.type): ControlInfo(
            minimum=c.min, maximum=c.max, default=c.default
        )
        for c in schema.controls
    }
    return StaticCamera(name=schema.camera, catalog=catalog)


def load_control_catalog(path: str | Path) -> StaticCamera:
    """Load a YAML control catalog file.

    An empty file is an empty catalog (every script control is then
    unsupported).
    """

    path = Path(path).expanduser().resolve()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise CatalogError(f"Failed to read control catalog {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CatalogError(f"Control catalog {path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"Control catalog {path} must be a mapping, got {type(data).__name__}")

    camera = camera_from_catalog(data)
    log.debug("Loaded %d control(s) for %s from %s", len(camera.catalog), camera.name, path)
    return camera
