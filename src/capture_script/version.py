"""Version helpers.

``__version__`` is the Python package version (PEP 440); it is what pip and
the ``capture-script version`` command report.
"""

from __future__ import annotations

from dataclasses import dataclass
import platform
import sys

import yaml


__version__ = "0.4.1"


@dataclass(frozen=True)
class VersionInfo:
    package_version: str
    python: str
    platform: str
    yaml_backend: str


def _yaml_backend() -> str:
    """Return which PyYAML build is installed ("libyaml" or "pure")."""
    return "libyaml" if yaml.__with_libyaml__ else "pure"


def get_version_info() -> VersionInfo:
    return VersionInfo(
        package_version=__version__,
        python=sys.version.split()[0],
        platform=f"{platform.system()} {platform.release()} ({platform.machine()})",
        yaml_backend=_yaml_backend(),
    )
