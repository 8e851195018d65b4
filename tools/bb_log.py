"""Severity-tagged diagnostics for build scripts.

Every line is ``[TAG] message``.  INFO goes to stdout, everything else to
stderr.  Tags are colored with click unless colors are disabled, either by
``BB_DISABLE_COLORS`` in the environment at import time or by calling
set_colors(False).  click drops the ANSI codes on its own when the stream
is not a terminal.
"""

import os
import sys

import click

from bb_env import DISABLE_COLORS_VAR

EXIT_FAILURE = 1

_STYLES = {
    "INFO": {"fg": "cyan", "bold": True},
    "WARN": {"fg": "yellow", "bold": True},
    "ERRO": {"fg": "red", "bold": True},
    "CRIT": {"fg": "bright_white", "bg": "red", "bold": True},
}

_colors = not os.environ.get(DISABLE_COLORS_VAR)


def set_colors(enabled):
    """Turn tag coloring on or off for the rest of the process."""
    global _colors
    _colors = bool(enabled)


def colors_enabled():
    return _colors


def _emit(tag, msg, err):
    label = f"[{tag}]"
    if _colors:
        label = click.style(label, **_STYLES[tag])
    click.echo(f"{label} {msg}", err=err)


def info(msg):
    _emit("INFO", msg, err=False)


def warn(msg):
    _emit("WARN", msg, err=True)


def error(msg):
    _emit("ERRO", msg, err=True)


def crit(msg):
    """Report an unrecoverable condition and exit with EXIT_FAILURE."""
    _emit("CRIT", msg, err=True)
    sys.exit(EXIT_FAILURE)
