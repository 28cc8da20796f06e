from __future__ import annotations

"""
Unit tests for the Configuration Domain.

Verifies the precedence of the configuration layers (defaults, environment
and CLI overrides), executable name resolution, and validation warnings.
"""

import os
from pathlib import Path

import pytest

from tomecli.domain.config import (
    TomeConfig,
    get_default_config,
    load_config,
    load_env_config,
    merge_config,
    resolve_executable_name,
    validate_config,
)


def test_defaults_have_expected_keys() -> None:
    defaults = get_default_config()
    assert defaults["root"] == "."
    assert defaults["executable"] == "tome-cli"
    assert defaults["exclude_patterns"] == [r"^\."]
    assert defaults["ignore_file"] == ".tomeignore"


# -----------------------------------------------------------------------------
# Executable Name
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("override,environ,argv0,expected", [
    ("wrapped", {"TOME_EXECUTABLE": "from-env"}, "/usr/bin/tome-cli", "wrapped"),
    (None, {"TOME_EXECUTABLE": "from-env"}, "/usr/bin/tome-cli", "from-env"),
    (None, {}, "/usr/local/bin/kit", "kit"),
    (None, {}, None, "tome-cli"),
    ("  ", {"TOME_EXECUTABLE": ""}, "", "tome-cli"),
])
def test_resolve_executable_name(override, environ, argv0, expected) -> None:
    assert resolve_executable_name(override, environ, argv0) == expected


# -----------------------------------------------------------------------------
# Environment Layer
# -----------------------------------------------------------------------------

def test_env_root_prefers_executable_prefix() -> None:
    environ = {"MY_TOOL_ROOT": "/scripts/mine", "TOME_ROOT": "/scripts/generic"}
    assert load_env_config(environ, "my-tool")["root"] == "/scripts/mine"
    assert load_env_config(environ, "other")["root"] == "/scripts/generic"


def test_env_debug_and_log_file() -> None:
    values = load_env_config({"TOME_DEBUG": "yes", "TOME_LOG_FILE": "/tmp/t.log"}, "tome-cli")
    assert values["debug"] is True
    assert values["log_file"] == "/tmp/t.log"

    assert load_env_config({"TOME_DEBUG": "0"}, "tome-cli")["debug"] is False


def test_merge_ignores_none_and_unknown_keys() -> None:
    base = get_default_config()
    merged = merge_config(base, {"root": None, "debug": True, "bogus": 1})
    assert merged["root"] == "."
    assert merged["debug"] is True
    assert "bogus" not in merged


# -----------------------------------------------------------------------------
# Full Hierarchy
# -----------------------------------------------------------------------------

def test_cli_overrides_environment(tmp_path: Path) -> None:
    env_root = tmp_path / "env"
    cli_root = tmp_path / "cli"
    config, warnings = load_config(
        {"root": str(cli_root)},
        environ={"TOME_ROOT": str(env_root)},
        argv0="tome-cli",
    )
    assert warnings == []
    assert config.root == str(cli_root)


def test_environment_overrides_defaults(tmp_path: Path) -> None:
    config, _ = load_config({}, environ={"TOME_ROOT": str(tmp_path)}, argv0="tome-cli")
    assert config.root == str(tmp_path)
    assert config.executable == "tome-cli"
    assert config.debug is False


def test_root_is_made_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    config, _ = load_config({"root": "scripts"}, environ={})
    assert os.path.isabs(config.root)
    assert os.path.realpath(config.root) == os.path.realpath(tmp_path / "scripts")


def test_renamed_executable_selects_prefixed_root(tmp_path: Path) -> None:
    config, _ = load_config(
        {"executable": "kit"},
        environ={"KIT_ROOT": str(tmp_path), "TOME_ROOT": "/elsewhere"},
    )
    assert config.executable == "kit"
    assert config.root == str(tmp_path)


def test_validate_replaces_invalid_values() -> None:
    raw = get_default_config()
    raw.update({"executable": "", "debug": "maybe", "exclude_patterns": "not-a-list"})

    config, warnings = validate_config(raw)

    assert isinstance(config, TomeConfig)
    assert config.executable == "tome-cli"
    assert config.debug is False
    assert config.exclude_patterns == [r"^\."]
    assert len(warnings) == 3
