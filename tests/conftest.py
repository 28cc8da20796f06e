from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A reference script tree shared by unit, integration and E2E tests.
"""

import os
import sys
from pathlib import Path

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Script Tree Builders
# -----------------------------------------------------------------------------

FOO_SCRIPT = """\
#!/bin/sh
# USAGE: $0 <arg1> <arg2>
# Prints its arguments.
# Completes its own flags through TOME_COMPLETION.

if [ "$1" = "--completion" ]; then
  printf '%s\\t%s\\n' "--help" "Help message for foo"
  printf '%s\\t%s\\n' "--query" "Query message for foo"
  printf '%s\\t%s\\n' "an-argument" "Argument"
  exit 0
fi
echo "foo $*"
"""

BAR_SCRIPT = """\
#!/bin/sh
# USAGE: $0 <arg1> <arg2>
touch "{marker}"
echo "bar $*"
"""

ENV_SCRIPT = """\
#!/bin/sh
# TOME_COMPLETION
env
"""


def write_script(path: Path, content: str, mode: int = 0o755) -> Path:
    """Write a script file and set its permission bits."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.chmod(path, mode)
    return path


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def make_script():
    """Expose write_script to tests that build their own trees."""
    return write_script


@pytest.fixture
def bar_marker(tmp_path: Path) -> Path:
    """File created by 'folder/bar' whenever it actually runs."""
    return tmp_path / "bar-was-executed"


@pytest.fixture
def example_root(tmp_path: Path, bar_marker: Path) -> Path:
    """
    Build the reference script tree.

    Structure:
    /root
      foo                        (usage '<arg1> <arg2>', opted into completion)
      /folder
        bar                      (usage '<arg1> <arg2>', no completion, side effect)
        test-env-injection       (prints its environment, opted into completion)
    """
    root = tmp_path / "root"
    root.mkdir()

    write_script(root / "foo", FOO_SCRIPT)
    write_script(root / "folder" / "bar", BAR_SCRIPT.format(marker=bar_marker))
    write_script(root / "folder" / "test-env-injection", ENV_SCRIPT)

    return root
