"""Spawn and join child processes.

launch() is strict: a build script that cannot start its compiler has
nothing sensible left to do, so any failure to spawn is fatal.  wait() is
lenient: if the exit status cannot be observed the child is assumed to
have failed and the caller decides what to do about it.
"""

import os
import subprocess

from bb_env import apply_assignments
from bb_log import EXIT_FAILURE, crit, info, warn
from bb_template import tokenize


class ProcessHandle:
    """A spawned, possibly still running process.  Wait on it once."""

    def __init__(self, popen):
        self._popen = popen
        self.waited = False

    @property
    def pid(self):
        return self._popen.pid

    def __repr__(self):
        state = "waited" if self.waited else "running"
        return f"<ProcessHandle pid={self.pid} {state}>"


def launch(line, env_line="", base_env=None):
    """Start *line* with *env_line* KEY=VALUE tokens layered on *base_env*.

    *base_env* defaults to the current process environment, which is
    copied and never modified.  On POSIX the line is split into argv; on
    Windows the whole line is handed to process creation as-is.
    """
    info(f"Executing: {line}")
    if env_line:
        info(f"- with environment: {env_line}")

    argv = tokenize(line)
    if not argv:
        crit(f"Could not run command: {line}: empty command line")
    env = apply_assignments(os.environ if base_env is None else base_env,
                            tokenize(env_line))

    try:
        if os.name == "nt":
            popen = subprocess.Popen(line, env=env)
        else:
            popen = subprocess.Popen(argv, env=env)
    except (OSError, ValueError) as e:
        reason = getattr(e, "strerror", None) or str(e)
        crit(f"Could not run command: {line}: {reason}")

    proc = ProcessHandle(popen)
    info(f"- as process: {proc.pid}")
    return proc


def _assume_failed(proc, reason):
    warn(f"Could not wait for child process {proc.pid}: {reason}")
    info("Assuming child process failed")
    return EXIT_FAILURE


def wait(proc):
    """Block until *proc* exits and return its exit status.

    Never exits the program.  A failed wait, a second wait on the same
    handle or a child killed by a signal all yield EXIT_FAILURE with a
    warning.
    """
    if proc.waited:
        return _assume_failed(proc, "process was already waited on")
    proc.waited = True
    try:
        code = proc._popen.wait()
    except OSError as e:
        return _assume_failed(proc, e.strerror or str(e))
    if code < 0:
        return _assume_failed(proc, f"terminated by signal {-code}")
    return code
