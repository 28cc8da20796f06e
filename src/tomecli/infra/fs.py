from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path normalization and permission checks shared by the scanner,
the hook discovery and the configuration layer.
"""

import os
import stat
from typing import Optional

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def to_posix_rel(path: str, root: str) -> str:
    """Root-relative path using forward slashes ('' for the root itself)."""
    rel = os.path.relpath(path, root)
    if rel == ".":
        return ""
    return rel.replace(os.sep, "/")

# -----------------------------------------------------------------------------
# PERMISSION CHECKS
# -----------------------------------------------------------------------------

def is_executable_by_owner(mode: int) -> bool:
    return bool(mode & stat.S_IXUSR)


def is_executable_file(path: str) -> bool:
    """
    Check that a path is a regular file with the owner-executable bit.

    Symlinks are followed; broken links and unreadable entries are
    reported as non-executable.

    Args:
        path: Filesystem path to inspect.

    Returns:
        bool: True for an executable regular file.
    """
    try:
        st = os.stat(path)
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode) and is_executable_by_owner(st.st_mode)
