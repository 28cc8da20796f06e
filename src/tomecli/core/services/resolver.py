from __future__ import annotations

"""
Command Resolution Service.

Walks a sequence of command-line tokens against the command tree and
classifies how far the tokens reach. Completion consumes every outcome;
direct execution only accepts a resolved script.
"""

import logging
from typing import List, Sequence, Tuple

from tomecli.domain.errors import CommandNotFoundError
from tomecli.domain.tree_models import (
    DirectoryNode,
    Node,
    ResolutionKind,
    ResolvedPath,
    ScriptNode,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve(tree: DirectoryNode, tokens: Sequence[str]) -> ResolvedPath:
    """
    Walk tokens against the tree, one case-sensitive segment per step.

    Descent stops at the first script (the remaining tokens are its
    arguments) or at the first token with no matching child.

    Args:
        tree: Root of the command tree.
        tokens: Command-line tokens.

    Returns:
        ResolvedPath: Classified outcome of the walk.
    """
    node: Node = tree
    matched: List[str] = []

    for token in tokens:
        if isinstance(node, ScriptNode):
            break
        child = node.get(token)
        if child is None:
            break
        node = child
        matched.append(token)

    remaining = tuple(tokens[len(matched):])

    if tokens and not matched:
        return ResolvedPath(kind=ResolutionKind.NOT_FOUND, node=None, remaining=remaining)

    if isinstance(node, ScriptNode):
        kind = ResolutionKind.SCRIPT
    elif remaining:
        kind = ResolutionKind.PARTIAL
    else:
        kind = ResolutionKind.DIRECTORY

    return ResolvedPath(kind=kind, node=node, matched=tuple(matched), remaining=remaining)


def resolve_command(tree: DirectoryNode, tokens: Sequence[str]) -> Tuple[ScriptNode, List[str]]:
    """
    Resolve tokens for direct execution.

    Args:
        tree: Root of the command tree.
        tokens: Command path followed by the arguments for the script.

    Returns:
        Tuple[ScriptNode, List[str]]: The script and its forwarded arguments.

    Raises:
        CommandNotFoundError: If the tokens do not lead to a script.
    """
    resolved = resolve(tree, tokens)
    command = " ".join(tokens)

    if resolved.kind == ResolutionKind.SCRIPT and isinstance(resolved.node, ScriptNode):
        logger.debug(f"Resolved '{command}' to {resolved.node.path}")
        return resolved.node, list(resolved.remaining)

    if resolved.kind == ResolutionKind.DIRECTORY:
        where = " ".join(resolved.matched) or "root"
        raise CommandNotFoundError(f"'{where}' is a directory, not a command")

    raise CommandNotFoundError(f"Command not found: {command}")
