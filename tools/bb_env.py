"""Environment handling shared by the bootstrap and the process launcher.

Commands normally inherit the parent's full environment with their own
KEY=VALUE tokens layered on top.  Hermetic commands start instead from a
whitelist: only functional vars pass through from the host and the locale
is pinned so tool output does not depend on who runs the build.
"""

import os

REFERENCE_TIME_VAR = "BB_REFERENCE_TIME"
FORCE_ALL_VAR = "BB_FORCE_ALL"
REBUILT_VAR = "BB_REBUILT"
DISABLE_COLORS_VAR = "BB_DISABLE_COLORS"

# Vars passed through from the host environment when present.
_PASSTHROUGH = frozenset({
    "PATH", "HOME", "USER", "LOGNAME",
    "TMPDIR", "TEMP", "TMP",
    "TERM",
    # Windows cannot start most programs without these.
    "SYSTEMROOT", "COMSPEC", "PATHEXT",
    REFERENCE_TIME_VAR, FORCE_ALL_VAR, DISABLE_COLORS_VAR,
})

# Vars pinned to fixed values so compiler diagnostics are stable.
_LOCALE_PINS = {
    "LC_ALL": "C",
    "LANG": "C",
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def clean_env():
    """Return a clean env dict for hermetic commands.

    Copies only whitelisted vars from the host, then applies the locale
    pins.  Callers layer command-specific vars on top.
    """
    env = {}
    for key in _PASSTHROUGH:
        val = os.environ.get(key)
        if val is not None:
            env[key] = val
    env.update(_LOCALE_PINS)
    return env


def is_truthy(value):
    """True for the usual boolean spellings (1, true, yes, on)."""
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


def apply_assignments(base, tokens):
    """Return a copy of *base* with KEY=VALUE *tokens* applied in order.

    A token without "=" removes that variable, the way putenv(3) treats a
    bare name.  Empty tokens are ignored.
    """
    env = dict(base)
    for token in tokens:
        if not token:
            continue
        key, sep, value = token.partition("=")
        if sep:
            env[key] = value
        else:
            env.pop(key, None)
    return env
