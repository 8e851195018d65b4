"""Read-only state handed to the user's build routine.

The context is built once, after the bootstrap decided the running binary
is current, and passed explicitly to whatever needs the reference time or
the parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from bb_env import FORCE_ALL_VAR, REFERENCE_TIME_VAR, is_truthy
from bb_files import mtime_ns
from bb_log import crit


def reference_time_from_env(environ, fallback):
    """Inherited reference time if one is set, else *fallback*.

    A value that is not an integer is fatal.
    """
    raw = environ.get(REFERENCE_TIME_VAR)
    if raw is None or raw == "":
        return fallback
    try:
        return int(raw)
    except ValueError:
        crit(f"Invalid {REFERENCE_TIME_VAR}: {raw!r} is not an integer timestamp")


def force_all_from_env(environ):
    """True when the environment asks to treat every file as modified."""
    return is_truthy(environ.get(FORCE_ALL_VAR))


@dataclass(frozen=True)
class BuildContext:
    binary: str
    source: str
    argv: tuple[str, ...]
    reference_time: int
    force_all: bool = False
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    extra_args: tuple[str, ...] = ()

    def is_modified(self, path) -> bool:
        """True if *path* changed at or after the reference time.

        Ties count as modified, matching the rebuild rule.
        """
        if self.force_all:
            return True
        return mtime_ns(path) >= self.reference_time

    def param(self, name):
        return self.params[name]
