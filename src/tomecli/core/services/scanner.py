from __future__ import annotations

"""
Command Tree Discovery Service.

Walks the configured script root and builds the in-memory command tree.
Directories become DirectoryNodes, owner-executable regular files become
ScriptNodes, and everything matched by the ignore predicate is pruned.
The tree is rebuilt from the filesystem on every invocation.
"""

import logging
import os
from typing import Dict, FrozenSet, Optional

from tomecli.core.components.filters import IgnorePredicate
from tomecli.domain.constants import COMPLETION_MARKER
from tomecli.domain.errors import ScanError
from tomecli.domain.tree_models import DirectoryNode, ScriptNode
from tomecli.infra.fs import is_executable_file, to_posix_rel

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024


# ==============================================================================
# PUBLIC API
# ==============================================================================

def scan(root_path: str, is_ignored: Optional[IgnorePredicate] = None) -> DirectoryNode:
    """
    Build the command tree rooted at root_path.

    Symlinked files and directories are followed and broken links are
    skipped. A directory whose real path already encloses it is a symlink
    cycle and is not descended into. Two links to the same target outside
    that chain are both scanned in full.

    Args:
        root_path: Directory containing the scripts.
        is_ignored: Optional predicate (name, rel_path) -> bool.

    Returns:
        DirectoryNode: Root of the command tree.

    Raises:
        ScanError: If the root does not exist or is not a directory.
    """
    root_abs = os.path.abspath(root_path)
    if not os.path.exists(root_abs):
        raise ScanError(f"Root directory does not exist: {root_abs}")
    if not os.path.isdir(root_abs):
        raise ScanError(f"Root path is not a directory: {root_abs}")

    root = DirectoryNode(name="", path=root_abs)
    directories: Dict[str, DirectoryNode] = {"": root}
    # Real paths of the directories enclosing each scanned directory
    ancestors: Dict[str, FrozenSet[str]] = {"": frozenset()}

    # In-place modification of dirs for recursive pruning during walk
    for current, dirs, files in os.walk(root_abs, followlinks=True, onerror=_log_walk_error):
        rel_root = to_posix_rel(current, root_abs)
        node = directories.get(rel_root)
        if node is None:
            dirs[:] = []
            continue

        real = os.path.realpath(current)
        if real in ancestors[rel_root]:
            logger.debug(f"Skipping symlink cycle at: {current}")
            dirs[:] = []
            continue
        chain = ancestors[rel_root] | {real}

        kept = []
        for d in sorted(dirs):
            rel = _join_rel(rel_root, d)
            if is_ignored and is_ignored(d, rel):
                continue
            child = DirectoryNode(name=d, path=os.path.join(current, d), segments=node.segments + (d,))
            node.add(child)
            directories[rel] = child
            ancestors[rel] = chain
            kept.append(d)
        dirs[:] = kept

        for file_name in sorted(files):
            rel = _join_rel(rel_root, file_name)
            if is_ignored and is_ignored(file_name, rel):
                continue
            full_path = os.path.join(current, file_name)
            if not is_executable_file(full_path):
                continue
            node.add(ScriptNode(
                name=file_name,
                path=full_path,
                segments=node.segments + (file_name,),
                executable=True,
                has_completion=detect_completion_support(full_path),
            ))

    logger.debug(f"Scanned command tree at {root_abs} ({len(directories)} directories)")
    return root


def detect_completion_support(path: str) -> bool:
    """
    Detect whether a script opted into completion delegation.

    A script opts in by mentioning the TOME_COMPLETION marker anywhere in
    its source. The file is only read, never executed.

    Args:
        path: Script path.

    Returns:
        bool: True when the marker is present.
    """
    overlap = len(COMPLETION_MARKER) - 1
    tail = b""
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(_READ_CHUNK_SIZE)
                if not chunk:
                    return False
                window = tail + chunk
                if COMPLETION_MARKER in window:
                    return True
                tail = window[-overlap:]
    except OSError as e:
        logger.debug(f"Completion marker check failed for '{path}': {e}")
        return False

# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _join_rel(rel_root: str, name: str) -> str:
    return f"{rel_root}/{name}" if rel_root else name


def _log_walk_error(error: OSError) -> None:
    logger.warning(f"Unable to read directory '{error.filename}': {error.strerror}")
