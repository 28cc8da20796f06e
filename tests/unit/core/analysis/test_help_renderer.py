from __future__ import annotations

"""
Unit tests for the Help Renderer.
"""

from pathlib import Path

from tomecli.core.analysis.help_renderer import iter_scripts, render_help, render_script_help
from tomecli.core.services.scanner import scan


def test_help_listing_for_reference_tree(example_root: Path) -> None:
    assert render_help(scan(str(example_root))) == [
        "folder bar: <arg1> <arg2>",
        "folder test-env-injection: ",
        "foo: <arg1> <arg2>",
    ]


def test_help_listing_never_runs_scripts(example_root: Path, bar_marker: Path) -> None:
    render_help(scan(str(example_root)))
    assert not bar_marker.exists()


def test_help_for_subtree(example_root: Path) -> None:
    folder = scan(str(example_root)).get("folder")
    assert render_help(folder) == [
        "folder bar: <arg1> <arg2>",
        "folder test-env-injection: ",
    ]


def test_iter_scripts_depth_first(example_root: Path) -> None:
    names = [s.command_path for s in iter_scripts(scan(str(example_root)))]
    assert names == ["folder bar", "folder test-env-injection", "foo"]


def test_empty_tree_has_no_lines(tmp_path: Path) -> None:
    assert render_help(scan(str(tmp_path))) == []


def test_script_help_page(example_root: Path) -> None:
    foo = scan(str(example_root)).get("foo")
    assert render_script_help(foo) == [
        "foo",
        "---",
        "USAGE: $0 <arg1> <arg2>",
        "Prints its arguments.",
        "Completes its own flags through TOME_COMPLETION.",
    ]


def test_script_help_page_without_help_block(tmp_path: Path, make_script) -> None:
    make_script(tmp_path / "tools" / "bare", "#!/bin/sh\necho hi\n")
    bare = scan(str(tmp_path)).get("tools").get("bare")

    assert render_script_help(bare) == ["tools bare", "---"]
