from __future__ import annotations

"""
Help Renderer.

Flattens the command tree into one "<path>: <usage>" line per script and
renders the detailed help page of a single script.
"""

from typing import Iterator, List

from tomecli.domain.tree_models import DirectoryNode, ScriptNode

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def iter_scripts(tree: DirectoryNode) -> Iterator[ScriptNode]:
    """Depth-first, alphabetical traversal yielding every script."""
    for node in tree.sorted_children():
        if isinstance(node, DirectoryNode):
            yield from iter_scripts(node)
        else:
            yield node


def render_help(tree: DirectoryNode) -> List[str]:
    """
    Render the aggregate listing of every script below tree.

    Directories produce no line of their own. Lines are sorted by the
    joined command path.

    Args:
        tree: Root (or subtree) of the command tree.

    Returns:
        List[str]: Lines in the form '<segments>: <usage>'.
    """
    entries = [(script.command_path, script.usage) for script in iter_scripts(tree)]
    entries.sort(key=lambda entry: entry[0])
    return [f"{path}: {usage}" for path, usage in entries]


def render_script_help(script: ScriptNode) -> List[str]:
    """
    Render the detailed help of a single script.

    The output is the space-joined command path, a '---' separator and the
    script's help block (the comment lines after the shebang), read from
    the file without running it. A script without a help block yields
    only the first two lines.

    Args:
        script: Script addressed by 'help <path>'.

    Returns:
        List[str]: Lines to print on stdout.
    """
    lines = [script.command_path, "---"]
    if script.help:
        lines.extend(script.help.splitlines())
    return lines
