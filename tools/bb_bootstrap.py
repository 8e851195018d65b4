"""Self-rebuilding entry point for build scripts.

A build script hands its build routine to main():

    def build(ctx):
        cc = Command("cc", "-c", "%s", "-o", "%s")
        for src in ("a.c", "b.c"):
            if ctx.is_modified(src) and cc.run(src, src[:-2] + ".o") != 0:
                return 1
        return 0

    if __name__ == "__main__":
        main(build, BootstrapConfig(source="build.c", binary="build"))

Before build() runs, the binary is compared against its own source.  If
the source is not older, the binary is recompiled with
``<compiler> <rebuild_flags...> <source>``, the original command line is
replayed in a child process and the current process exits with the
child's status.  The rebuild happens at most once per invocation chain:
the replayed child is marked with BB_REBUILT and refuses to rebuild again.

The binary's modification time becomes the reference time used by
BuildContext.is_modified().  It is passed down to the replayed child in
BB_REFERENCE_TIME, unless that variable was already set by the caller.
"""

from __future__ import annotations

import dataclasses
import enum
import os
import shutil
import sys
from dataclasses import dataclass
from typing import Callable, Sequence

from bb_command import Command
from bb_context import BuildContext, force_all_from_env, reference_time_from_env
from bb_env import DISABLE_COLORS_VAR, REBUILT_VAR, REFERENCE_TIME_VAR, is_truthy
from bb_files import mtime_ns, touch
from bb_log import colors_enabled, crit, info, warn
from bb_params import DEFAULT_PREFIX, Param, parse_params
from bb_template import escape

DEFAULT_SOURCE = "bb.c"

_MSVC_NAMES = frozenset({"cl", "cl.exe"})


class State(enum.Enum):
    CHECK = "check"
    UP_TO_DATE = "up-to-date"
    STALE = "stale"
    REBUILDING = "rebuilding"
    RELAUNCHING = "relaunching"
    RUNNING_USER_LOGIC = "running-user-logic"
    TOUCHING_SELF = "touching-self"
    DONE = "done"


def default_compiler():
    """The platform C compiler: cl.exe on Windows, else cc, gcc or clang."""
    if os.name == "nt":
        return "cl.exe"
    for cc in ("cc", "gcc", "clang"):
        if shutil.which(cc):
            return cc
    return "cc"


def default_rebuild_flags(compiler, binary):
    if os.path.basename(compiler).lower() in _MSVC_NAMES:
        return (f"-out:{binary}", "-Wall", "-WX")
    return ("-o", binary, "-ggdb", "-Wall", "-Werror")


@dataclass(frozen=True)
class BootstrapConfig:
    """How the build script rebuilds and relaunches itself.

    Unset fields are filled by resolved(): binary from sys.argv[0],
    compiler from default_compiler(), rebuild flags from
    default_rebuild_flags(), the replayed command line from sys.orig_argv
    and the parameter arguments from sys.argv[1:].
    """
    source: str = DEFAULT_SOURCE
    binary: str | None = None
    compiler: str | None = None
    rebuild_flags: Sequence[str] | None = None
    argv: Sequence[str] | None = None
    args: Sequence[str] | None = None
    env_prefix: str = DEFAULT_PREFIX

    def resolved(self) -> "BootstrapConfig":
        binary = os.fspath(self.binary) if self.binary else sys.argv[0]
        compiler = self.compiler or default_compiler()
        if self.rebuild_flags is None:
            rebuild_flags = default_rebuild_flags(compiler, binary)
        else:
            rebuild_flags = tuple(self.rebuild_flags)
        if self.argv is None:
            argv = tuple(getattr(sys, "orig_argv", sys.argv))
        else:
            argv = tuple(self.argv)
        args = tuple(sys.argv[1:] if self.args is None else self.args)
        return dataclasses.replace(
            self,
            source=os.fspath(self.source),
            binary=binary,
            compiler=compiler,
            rebuild_flags=rebuild_flags,
            argv=argv,
            args=args,
        )


def check(config):
    """Return (UP_TO_DATE or STALE, binary mtime in ns).

    Stale when the source is not strictly older than the binary.
    """
    binary_mtime = mtime_ns(config.binary)
    source_mtime = mtime_ns(config.source)
    if source_mtime < binary_mtime:
        return State.UP_TO_DATE, binary_mtime
    return State.STALE, binary_mtime


def rebuild(config):
    info(f"Rebuilding {config.source}...")
    cmd = Command(escape(config.compiler))
    cmd.append_args(*(escape(flag) for flag in config.rebuild_flags))
    cmd.append_args(escape(config.source))
    if cmd.run() != 0:
        crit(f"Could not rebuild {config.source}")


def relaunch(argv, reference_time, environ=None):
    """Replay *argv* unchanged and return the child's exit status.

    The child starts from *environ* (the current environment by default),
    plus the reference time unless *environ* already carries one.
    """
    if environ is None:
        environ = os.environ
    cmd = Command(*(escape(arg) for arg in argv))
    values = ()
    if not environ.get(REFERENCE_TIME_VAR):
        cmd.append_envs(f"{REFERENCE_TIME_VAR}=%d")
        values = (reference_time,)
    if not colors_enabled() and not environ.get(DISABLE_COLORS_VAR):
        cmd.append_envs(f"{DISABLE_COLORS_VAR}=1")
    cmd.append_envs(f"{REBUILT_VAR}=1")
    return cmd.run(*values, base_env=environ)


def self_touch(binary):
    """Bump the binary's mtime to now.  Failure is only a warning."""
    try:
        touch(binary)
    except OSError as e:
        warn(f"Could not update modification time of {binary}: {e.strerror or e}")


class Bootstrap:
    """One pass of the rebuild-or-run state machine.

    ``state`` ends as RELAUNCHING after a rebuild or DONE after the build
    routine ran.
    """

    def __init__(self, config: BootstrapConfig | None = None, environ=None):
        self.config = (config or BootstrapConfig()).resolved()
        self.environ = os.environ if environ is None else environ
        self.state = State.CHECK
        self.reference_time: int | None = None

    def run(self, build: Callable[[BuildContext], int | None],
            params: Sequence[Param] = ()) -> int:
        config = self.config
        self.state, binary_mtime = check(config)
        self.reference_time = reference_time_from_env(self.environ, binary_mtime)
        # The guard only applies to this process, not to commands it runs.
        rebuilt = is_truthy(self.environ.pop(REBUILT_VAR, None))

        if self.state is State.STALE:
            if rebuilt:
                crit(f"{config.binary} is still not newer than {config.source} "
                     f"after rebuilding; refusing to rebuild again")
            self.state = State.REBUILDING
            rebuild(config)
            self.state = State.RELAUNCHING
            return relaunch(config.argv, self.reference_time, self.environ)

        values, extra_args = parse_params(
            params, config.args, prefix=config.env_prefix,
            prog=os.path.basename(config.binary),
        )
        ctx = BuildContext(
            binary=config.binary,
            source=config.source,
            argv=config.argv,
            reference_time=self.reference_time,
            force_all=force_all_from_env(self.environ),
            params=values,
            extra_args=extra_args,
        )
        self.state = State.RUNNING_USER_LOGIC
        code = build(ctx)
        self.state = State.TOUCHING_SELF
        self_touch(config.binary)
        self.state = State.DONE
        return 0 if code is None else int(code)


def run(build, config=None, params=(), environ=None):
    """Run the bootstrap and, if the binary is current, *build*.

    Returns the exit status for the process: the replayed child's status
    after a rebuild, otherwise build()'s return value (None means 0).
    """
    return Bootstrap(config, environ).run(build, params)


def main(build, config=None, params=()):
    sys.exit(run(build, config, params))
