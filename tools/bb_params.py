"""Build-script parameters from the command line or the environment.

Each Param is looked up as ``--long-name=value``, ``--long-name value``,
``-xvalue`` or, failing those, the environment variable
``<PREFIX>_<LONG_NAME>``.  A bool parameter given as a bare ``--flag`` is
true.  Parsing is done by click, so a missing required parameter or a
malformed value is a usage error reported with the generated help text.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import click

from bb_log import error

DEFAULT_PREFIX = "BB"


class _Required:
    def __repr__(self):
        return "REQUIRED"


REQUIRED: Any = _Required()

_CLICK_TYPES = {
    str: click.STRING,
    int: click.INT,
    float: click.FLOAT,
    bool: click.BOOL,
}


def _normalize(name: str) -> str:
    return re.sub(r"[^0-9A-Za-z]", "_", name)


def envvar_name(name: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Environment fallback for *name*: "build-dir" -> "BB_BUILD_DIR"."""
    return f"{prefix}_{_normalize(name).upper()}"


@dataclass(frozen=True)
class Param:
    """A named build parameter.  No default means it is required."""
    name: str
    short: str | None = None
    type: type = str
    default: Any = REQUIRED
    help: str = ""

    @property
    def dest(self) -> str:
        return _normalize(self.name).lower()

    def to_option(self, prefix: str = DEFAULT_PREFIX) -> click.Option:
        if self.type not in _CLICK_TYPES:
            raise TypeError(f"unsupported parameter type for {self.name}: {self.type!r}")
        decls = [f"--{self.name}"]
        if self.short:
            decls.append(f"-{self.short}")
        decls.append(self.dest)
        required = self.default is REQUIRED
        kwargs: dict[str, Any] = {
            "type": _CLICK_TYPES[self.type],
            "envvar": envvar_name(self.name, prefix),
            "show_envvar": True,
            "required": required,
            "help": self.help or None,
        }
        if not required:
            kwargs["default"] = self.default
        if self.type is bool:
            # Optional value: bare --flag means True, --flag=false is allowed.
            kwargs["is_flag"] = False
            kwargs["flag_value"] = True
        return click.Option(decls, **kwargs)


def _build_command(params: Sequence[Param], prefix: str, prog: str) -> click.Command:
    return click.Command(
        prog,
        params=[p.to_option(prefix) for p in params],
        context_settings={
            "ignore_unknown_options": True,
            "allow_extra_args": True,
        },
    )


def help_text(params: Sequence[Param], prefix: str = DEFAULT_PREFIX, prog: str = "bb") -> str:
    command = _build_command(params, prefix, prog)
    with click.Context(command, info_name=prog) as ctx:
        return command.get_help(ctx)


def parse_params(
    params: Sequence[Param],
    args: Sequence[str],
    prefix: str = DEFAULT_PREFIX,
    prog: str = "bb",
) -> tuple[Mapping[str, Any], tuple[str, ...]]:
    """Resolve *params* from *args* and the environment.

    Returns a read-only mapping keyed by each Param's long name and the
    arguments no Param claimed.  Exits with click's usage exit code on a
    missing or malformed parameter and with 0 after ``--help``.
    """
    command = _build_command(params, prefix, prog)
    try:
        ctx = command.make_context(prog, list(args))
    except click.exceptions.Exit as e:
        sys.exit(e.exit_code)
    except click.ClickException as e:
        error(e.format_message())
        click.echo(help_text(params, prefix, prog), err=True)
        sys.exit(e.exit_code)
    values = {p.name: ctx.params[p.dest] for p in params}
    return MappingProxyType(values), tuple(ctx.args)


def next_arg(args: list[str]) -> str | None:
    """Pop and return the first element of *args*, or None when empty."""
    if not args:
        return None
    return args.pop(0)
