"""Commands: argument and environment templates run as child processes.

    cc = Command("cc", "-O2", "-c", "%s", "-o", "%s")
    for src in sources:
        if cc.run(src, src[:-2] + ".o") != 0:
            crit(f"failed to compile {src}")

Values passed to run() fill the argument placeholders first and then the
environment placeholders, in order.
"""

from __future__ import annotations

from bb_env import clean_env
from bb_process import ProcessHandle, launch, wait
from bb_template import Template, TemplateError


class Command:
    """One not-yet-executed instruction.

    Running a command does not consume it; the same Command can be run
    again with different values.
    """

    def __init__(self, *args: str, hermetic: bool = False):
        self.argc = 0
        self.envc = 0
        self.args = Template()
        self.envs = Template()
        self.hermetic = hermetic
        self.append_args(*args)

    def append_args(self, *tokens: str) -> "Command":
        self.argc += self.args.append(*tokens)
        return self

    def append_envs(self, *tokens: str) -> "Command":
        """Append KEY=VALUE tokens for the child's environment."""
        self.envc += self.envs.append(*tokens)
        return self

    @property
    def placeholders(self) -> int:
        return self.args.placeholders + self.envs.placeholders

    def expand(self, *values) -> tuple[str, str]:
        """Return the concrete (command line, environment line)."""
        if len(values) != self.placeholders:
            raise TemplateError(
                f"{str(self)!r} needs {self.placeholders} values, "
                f"got {len(values)}"
            )
        line, rest = self.args.expand_prefix(values)
        return line, self.envs.expand(*rest)

    def run_async(self, *values, base_env=None) -> ProcessHandle:
        """Start the command.  *base_env* replaces the inherited environment."""
        line, env_line = self.expand(*values)
        if base_env is None and self.hermetic:
            base_env = clean_env()
        return launch(line, env_line, base_env=base_env)

    def run(self, *values, base_env=None) -> int:
        return wait(self.run_async(*values, base_env=base_env))

    def __str__(self) -> str:
        if self.envs:
            return f"{self.envs} {self.args}"
        return str(self.args)

    def __repr__(self) -> str:
        return f"Command({str(self)!r}, argc={self.argc}, envc={self.envc})"
