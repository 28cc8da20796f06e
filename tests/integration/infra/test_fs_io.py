from __future__ import annotations

"""
Integration tests for FileSystem Infrastructure.

Verifies path normalization and executable detection against a real
filesystem.
"""

import os
from pathlib import Path

import pytest

from tomecli.infra.fs import (
    is_executable_by_owner,
    is_executable_file,
    normalize_path,
    to_posix_rel,
)


def test_normalize_path_expands_user_and_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("SCRIPTS_DIR", "tools")

    assert normalize_path("~/$SCRIPTS_DIR", ".") == str(tmp_path / "tools")


def test_normalize_path_fallback(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    assert normalize_path("   ", ".") == os.getcwd()
    assert normalize_path(None, ".") == os.getcwd()


def test_to_posix_rel(tmp_path: Path) -> None:
    assert to_posix_rel(str(tmp_path), str(tmp_path)) == ""
    assert to_posix_rel(str(tmp_path / "a" / "b"), str(tmp_path)) == "a/b"


def test_owner_execute_bit() -> None:
    assert is_executable_by_owner(0o744)
    assert not is_executable_by_owner(0o655)


def test_is_executable_file(tmp_path: Path) -> None:
    script = tmp_path / "run"
    script.write_text("#!/bin/sh\n", encoding="utf-8")
    os.chmod(script, 0o755)

    data = tmp_path / "data"
    data.write_text("x", encoding="utf-8")
    os.chmod(data, 0o644)

    executable_dir = tmp_path / "dir"
    executable_dir.mkdir(mode=0o755)

    assert is_executable_file(str(script))
    assert not is_executable_file(str(data))
    assert not is_executable_file(str(executable_dir))
    assert not is_executable_file(str(tmp_path / "missing"))


def test_is_executable_file_follows_symlinks(tmp_path: Path) -> None:
    script = tmp_path / "run"
    script.write_text("#!/bin/sh\n", encoding="utf-8")
    os.chmod(script, 0o755)
    os.symlink(script, tmp_path / "link")
    os.symlink(tmp_path / "missing", tmp_path / "broken")

    assert is_executable_file(str(tmp_path / "link"))
    assert not is_executable_file(str(tmp_path / "broken"))
