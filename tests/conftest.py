from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_REPO = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO / "tools"))

import bb_log  # noqa: E402
from bb_env import FORCE_ALL_VAR, REBUILT_VAR, REFERENCE_TIME_VAR  # noqa: E402

# A stand-in compiler: "<python> fake_cc.py -o OUT SRC" copies SRC to OUT.
# FAKE_CC_EXIT makes it fail without writing anything.
_FAKE_CC = """\
import os
import sys

code = int(os.environ.get("FAKE_CC_EXIT", "0"))
if code:
    sys.exit(code)
args = sys.argv[1:]
out = args[args.index("-o") + 1]
src = args[-1]
with open(src, "rb") as f:
    data = f.read()
with open(out, "wb") as f:
    f.write(data)
"""


def set_mtime(path, ns: int) -> None:
    """Pin both atime and mtime of *path* to *ns* nanoseconds."""
    os.utime(path, ns=(ns, ns))


@pytest.fixture(autouse=True)
def _plain_output(monkeypatch):
    """No ANSI styling and no inherited bootstrap variables in tests."""
    monkeypatch.setattr(bb_log, "_colors", False)
    for var in (REFERENCE_TIME_VAR, FORCE_ALL_VAR, REBUILT_VAR):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def python() -> str:
    """Interpreter path usable as a single space-delimited token."""
    if " " in sys.executable:
        pytest.skip("interpreter path contains a space")
    return sys.executable


@pytest.fixture
def fake_cc(tmp_path: Path) -> Path:
    path = tmp_path / "fake_cc.py"
    path.write_text(_FAKE_CC)
    return path


@pytest.fixture
def script(tmp_path: Path):
    """Write a throwaway Python script and return its path."""
    counter = iter(range(1000))

    def _write(body: str) -> Path:
        path = tmp_path / f"script_{next(counter)}.py"
        path.write_text(body)
        return path

    return _write
