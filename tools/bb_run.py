#!/usr/bin/env python3
"""Run one command template from the shell.

    bb-run --env CFLAGS=-O2 "cc %s -o %s" main.c main

The template is split on spaces like any other command, each VALUE fills
the next placeholder as a string, and the exit status of the child is
the exit status of bb-run.
"""

import argparse
import sys

from bb_command import Command
from bb_log import set_colors
from bb_template import TemplateError


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a command template")
    parser.add_argument("template", help="Command line with %%s placeholders")
    parser.add_argument("values", nargs="*", help="Placeholder values, in order")
    parser.add_argument("--env", action="append", dest="envs", default=[],
                        help="Environment variable KEY=VALUE for the child (repeatable)")
    parser.add_argument("--hermetic", action="store_true",
                        help="Start the child from a clean environment")
    parser.add_argument("--async", action="store_true", dest="run_async",
                        help="Print the child's pid and exit without waiting")
    parser.add_argument("--no-color", action="store_true",
                        help="Disable colored diagnostics")
    args = parser.parse_args(argv)

    if args.no_color:
        set_colors(False)

    cmd = Command(args.template, hermetic=args.hermetic)
    cmd.append_envs(*args.envs)
    try:
        if args.run_async:
            proc = cmd.run_async(*args.values)
            print(proc.pid)
            return 0
        return cmd.run(*args.values)
    except TemplateError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
