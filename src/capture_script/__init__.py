"""capture-script package.

Compiles frame-synchronous capture scripts into per-frame control lists.
"""

from .controls import ControlId, ControlInfo, ControlList, ControlType, ControlValue, StaticCamera
from .script import CaptureScript
from .version import __version__

__all__ = [
    "__version__",
    "CaptureScript",
    "ControlId",
    "ControlInfo",
    "ControlList",
    "ControlType",
    "ControlValue",
    "StaticCamera",
]
