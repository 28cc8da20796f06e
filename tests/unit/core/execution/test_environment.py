from __future__ import annotations

"""
Unit tests for the Execution Environment Builder.
"""

import json

import pytest

from tomecli.core.execution.environment import build_env, env_prefix_for, merge_env
from tomecli.domain.completion_models import CompletionContext


@pytest.mark.parametrize("name,expected", [
    ("tome-cli", "TOME_CLI"),
    ("kit", "KIT"),
    ("myTool", "MY_TOOL"),
    ("ops.tools-v2", "OPS_TOOLS_V2"),
    ("--", ""),
])
def test_env_prefix_for(name: str, expected: str) -> None:
    assert env_prefix_for(name) == expected


def test_build_env_for_execution(tmp_path) -> None:
    env = build_env(
        str(tmp_path),
        "kit",
        script_path=str(tmp_path / "deploy"),
        script_args=["prod", "--force"],
    )

    assert env == {
        "TOME_ROOT": str(tmp_path),
        "TOME_EXECUTABLE": "kit",
        "KIT_ROOT": str(tmp_path),
        "KIT_EXECUTABLE": "kit",
        "TOME_SCRIPT_PATH": str(tmp_path / "deploy"),
        "TOME_SCRIPT_NAME": "deploy",
        "TOME_SCRIPT_ARGS": "prod --force",
    }


def test_build_env_makes_root_absolute(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    env = build_env("scripts", "tome-cli")
    assert env["TOME_ROOT"].endswith("/scripts")
    assert env["TOME_ROOT"].startswith("/")


def test_completion_context_only_when_requested(tmp_path) -> None:
    assert "TOME_COMPLETION" not in build_env(str(tmp_path), "tome-cli")

    ctx = CompletionContext.from_args(["foo"], "")
    env = build_env(str(tmp_path), "tome-cli", ctx)
    assert json.loads(env["TOME_COMPLETION"]) == {"args": ["foo"], "last_arg": "foo", "current_word": ""}


def test_merge_env_drops_inherited_completion_context() -> None:
    base = {"PATH": "/bin", "TOME_COMPLETION": "{}", "HOME": "/home/u"}
    merged = merge_env({"TOME_ROOT": "/r"}, base)

    assert "TOME_COMPLETION" not in merged
    assert merged["PATH"] == "/bin"
    assert merged["TOME_ROOT"] == "/r"


def test_merge_env_overlay_wins() -> None:
    merged = merge_env({"TOME_ROOT": "/new", "TOME_COMPLETION": "x"}, {"TOME_ROOT": "/old"})
    assert merged == {"TOME_ROOT": "/new", "TOME_COMPLETION": "x"}
