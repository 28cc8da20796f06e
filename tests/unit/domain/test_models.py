from __future__ import annotations

"""
Unit tests for the Domain Models.

Verifies:
1. Command tree node behavior (ordering, lookup, lazy header parsing).
2. Directive naming in the completion protocol.
3. Serialization of the completion context.
"""

import json
from pathlib import Path

from tomecli.domain.completion_models import (
    CompletionContext,
    CompletionResult,
    ShellCompDirective,
)
from tomecli.domain.errors import CommandNotFoundError, LaunchError, ScanError, TomeError
from tomecli.domain.tree_models import (
    DirectoryNode,
    ResolutionKind,
    ResolvedPath,
    ScriptNode,
)


# -----------------------------------------------------------------------------
# Tree Nodes
# -----------------------------------------------------------------------------

def test_directory_children_sorted_by_name() -> None:
    root = DirectoryNode(name="", path="/r")
    root.add(ScriptNode(name="zeta", path="/r/zeta", segments=("zeta",)))
    root.add(DirectoryNode(name="alpha", path="/r/alpha", segments=("alpha",)))
    root.add(ScriptNode(name="Beta", path="/r/Beta", segments=("Beta",)))

    assert [n.name for n in root.sorted_children()] == ["Beta", "alpha", "zeta"]
    assert root.get("alpha") is not None
    assert root.get("ALPHA") is None


def test_script_command_path_joins_segments() -> None:
    script = ScriptNode(name="bar", path="/r/folder/bar", segments=("folder", "bar"))
    assert script.command_path == "folder bar"


def test_script_header_is_parsed_once(tmp_path: Path, make_script) -> None:
    """Usage is read from disk on first access and cached afterwards."""
    path = make_script(tmp_path / "tool", "#!/bin/sh\n# USAGE: $0 <x>\necho\n")
    script = ScriptNode(name="tool", path=str(path), segments=("tool",))

    assert script.usage == "<x>"
    path.write_text("#!/bin/sh\n# USAGE: $0 <changed>\n", encoding="utf-8")
    assert script.usage == "<x>"


def test_resolved_path_full_match() -> None:
    node = DirectoryNode(name="", path="/r")
    assert ResolvedPath(kind=ResolutionKind.DIRECTORY, node=node).is_full_match
    assert not ResolvedPath(kind=ResolutionKind.PARTIAL, node=node, remaining=("x",)).is_full_match
    assert not ResolvedPath(kind=ResolutionKind.NOT_FOUND, node=None).is_full_match


# -----------------------------------------------------------------------------
# Directives
# -----------------------------------------------------------------------------

def test_directive_codes_are_stable() -> None:
    assert int(ShellCompDirective.NO_FILE_COMP) == 4
    assert int(ShellCompDirective.NO_SPACE | ShellCompDirective.NO_FILE_COMP) == 6


def test_directive_describe_single_and_combined() -> None:
    assert ShellCompDirective.NO_FILE_COMP.describe() == "ShellCompDirectiveNoFileComp"
    assert ShellCompDirective.DEFAULT.describe() == "ShellCompDirectiveDefault"

    combined = ShellCompDirective.NO_SPACE | ShellCompDirective.NO_FILE_COMP
    assert combined.describe() == "ShellCompDirectiveNoSpace, ShellCompDirectiveNoFileComp"


def test_completion_result_defaults_to_no_file_comp() -> None:
    result = CompletionResult()
    assert result.candidates == []
    assert result.directive == ShellCompDirective.NO_FILE_COMP


# -----------------------------------------------------------------------------
# Completion Context
# -----------------------------------------------------------------------------

def test_context_last_arg_is_preceding_segment() -> None:
    ctx = CompletionContext.from_args(["folder", "bar"], "--q")
    assert ctx.args == ("folder", "bar")
    assert ctx.last_arg == "bar"
    assert ctx.current_word == "--q"


def test_context_without_args_has_empty_last_arg() -> None:
    ctx = CompletionContext.from_args([], "")
    assert ctx.last_arg == ""


def test_context_json_shape() -> None:
    payload = CompletionContext.from_args(["foo"], "an").to_json()
    assert payload == '{"args":["foo"],"last_arg":"foo","current_word":"an"}'
    assert json.loads(payload)["args"] == ["foo"]


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------

def test_error_exit_codes() -> None:
    assert ScanError("x").exit_code == 1
    assert CommandNotFoundError("x").exit_code == 1
    assert LaunchError("x").exit_code == 126
    assert LaunchError("x", 127).exit_code == 127

    err = TomeError("boom")
    assert err.message == "boom"
    assert str(err) == "boom"
