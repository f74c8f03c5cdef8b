"""Console logging for the ``capture-script`` command.

Library modules only create ``logging.getLogger(__name__)`` loggers. The CLI
calls :func:`setup_logging` once, which attaches a rich handler writing to
stderr, so the tables printed by ``check``/``show`` on stdout stay clean.
"""

from __future__ import annotations

import logging
import os
import time

from rich.console import Console
from rich.logging import RichHandler


PACKAGE_LOGGER = "capture_script"
LOG_LEVEL_ENV = "CAPTURE_SCRIPT_LOG_LEVEL"
LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def resolve_level(level: str | None = None) -> str:
    """Argument, then ``CAPTURE_SCRIPT_LOG_LEVEL``, then ``WARNING``.

    Unknown names fall back to ``WARNING``.
    """

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    level = str(level).upper().strip()
    return level if level in LEVELS else "WARNING"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Route the package loggers to a stderr RichHandler. Safe to call repeatedly."""

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        if isinstance(h, RichHandler):
            logger.removeHandler(h)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        omit_repeated_times=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%H:%M:%S]"))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    return logger


class compile_timer:
    """Times one script compilation and logs its outcome.

    Example:
        with compile_timer("script.yaml") as t:
            t.script = CaptureScript(camera, "script.yaml")

    A valid script is reported with its frame and decode-issue counts. An
    invalid one is reported as rejected (the parser already logged why).
    """

    def __init__(self, name: str, logger: logging.Logger | None = None):
        self.name = name
        self.logger = logger or logging.getLogger(PACKAGE_LOGGER)
        self.script = None
        self.elapsed = 0.0
        self._t0 = 0.0

    def __enter__(self) -> "compile_timer":
        self._t0 = time.perf_counter()
        self.logger.debug("compiling %s", self.name)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed = time.perf_counter() - self._t0
        if exc is not None:
            self.logger.error("✗ %s raised after %.3f s: %s", self.name, self.elapsed, exc)
        elif self.script is None:
            self.logger.debug("%s: nothing compiled (%.3f s)", self.name, self.elapsed)
        elif self.script.valid:
            self.logger.info(
                "✓ %s: %d frame(s), %d decode issue(s) (%.3f s)",
                self.name,
                len(self.script),
                len(self.script.issues),
                self.elapsed,
            )
        else:
            self.logger.warning("✗ %s rejected (%.3f s)", self.name, self.elapsed)
        return False
