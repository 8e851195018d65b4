"""File helpers for build scripts.

Anything that cannot stat, read, write or copy a file is fatal: a build
that keeps going after losing track of its inputs produces misleading
results.  touch() is the exception and raises so callers can decide.
"""

import os
import shutil

from bb_log import crit


def to_windows_path(path):
    """Convert a POSIX-style path for Windows APIs.

    A leading "/" is anchored to the C: drive and every "/" becomes "\\".
    """
    if not path:
        return ""
    if path.startswith("/"):
        path = "C:" + path
    return path.replace("/", "\\")


def _native(path):
    path = os.fspath(path)
    if os.name == "nt":
        return to_windows_path(path)
    return path


def mtime_ns(path):
    """Return the last modification time of *path* in nanoseconds."""
    try:
        return os.stat(_native(path)).st_mtime_ns
    except OSError as e:
        crit(f"Could not get modification time for {path}: {e.strerror or e}")


def touch(path):
    """Set the modification time of *path* to now.  Raises OSError."""
    os.utime(_native(path), None)


def copy(src_path, dst_path):
    try:
        shutil.copyfile(src_path, dst_path)
    except OSError as e:
        crit(f"Could not copy file {src_path} to {dst_path}: {e.strerror or e}")


def read(path):
    """Read *path* fully and return its bytes."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        crit(f"Could not read file {path}: {e.strerror or e}")


def write(path, data):
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        crit(f"Could not write file {path}: {e.strerror or e}")
