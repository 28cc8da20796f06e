from __future__ import annotations

"""
Entry Exclusion Engine.

Implements the regex-based exclusion logic applied while scanning the
script root. Combines system defaults, user-supplied patterns and the
glob rules of the root's .tomeignore file into a single predicate.
"""

import fnmatch
import logging
import os
import re
from typing import Callable, List, Optional, Tuple

from tomecli.domain.constants import (
    DEFAULT_EXCLUDE_PATTERNS,
    HOOKS_DIR_NAME,
    IGNORE_FILE_NAME,
)

logger = logging.getLogger(__name__)

IgnorePredicate = Callable[[str, str], bool]

# Root metadata entries, excluded even when user patterns replace the defaults
_RESERVED_NAMES = {HOOKS_DIR_NAME, IGNORE_FILE_NAME}

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------

def default_exclude_patterns() -> List[str]:
    """
    Get the system-level exclusion patterns.

    Hidden entries hold dispatcher metadata (.hooks.d, .tomeignore) and
    VCS state, never commands.

    Returns:
        List[str]: List of regex patterns for common exclusions.
    """
    return list(DEFAULT_EXCLUDE_PATTERNS)

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: List[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed regex strings are discarded with a warning.

    Args:
        patterns: List of raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            logger.warning(f"Discarding malformed exclusion pattern '{p}': {e}")
    return compiled


def matches_any(name: str, compiled_patterns: List[re.Pattern]) -> bool:
    return any(rx.search(name) for rx in compiled_patterns)


def build_ignore_predicate(
        root_path: str,
        exclude_patterns: Optional[List[str]] = None,
        ignore_file: str = IGNORE_FILE_NAME,
) -> IgnorePredicate:
    """
    Build the exclusion predicate used by the tree scanner.

    The returned callable receives an entry name and its root-relative
    POSIX path and reports whether the entry must be skipped.

    Args:
        root_path: Root directory of the script tree.
        exclude_patterns: Raw regexes; defaults to default_exclude_patterns().
        ignore_file: Name of the glob ignore file inside the root.

    Returns:
        IgnorePredicate: Callable (name, rel_path) -> bool.
    """
    raw = list(exclude_patterns) if exclude_patterns is not None else default_exclude_patterns()

    name_globs, path_globs = load_ignore_patterns(root_path, ignore_file)
    if name_globs or path_globs:
        logger.debug(f"Loaded {len(name_globs) + len(path_globs)} patterns from {ignore_file}")
    raw.extend(name_globs)

    compiled = compile_patterns(raw)
    anchored = compile_patterns(path_globs)

    def is_ignored(name: str, rel_path: str) -> bool:
        if name in _RESERVED_NAMES:
            return True
        if matches_any(name, compiled):
            return True
        if not rel_path:
            return False
        return matches_any(rel_path, compiled) or matches_any(rel_path, anchored)

    return is_ignored

# -----------------------------------------------------------------------------
# IGNORE FILE INTEGRATION
# -----------------------------------------------------------------------------

def load_ignore_patterns(
        root_path: str,
        ignore_file: str = IGNORE_FILE_NAME,
) -> Tuple[List[str], List[str]]:
    """
    Parse a gitignore-style file and translate its glob rules into regexes.

    As in gitignore, a rule with a slash at its start or in its middle is
    relative to the root and only matches the root-relative path. Any other
    rule matches an entry name at every depth.

    Args:
        root_path: Directory containing the ignore file.
        ignore_file: Ignore file name.

    Returns:
        Tuple[List[str], List[str]]: Regexes for entry names and regexes
                                     for root-relative paths.
    """
    ignore_path = os.path.join(root_path, ignore_file)
    if not os.path.isfile(ignore_path):
        return [], []

    name_patterns: List[str] = []
    path_patterns: List[str] = []
    try:
        with open(ignore_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                regex = _glob_to_regex(line)
                if not regex:
                    continue
                if "/" in line.rstrip("/"):
                    path_patterns.append(regex)
                else:
                    name_patterns.append(regex)
    except OSError as e:
        logger.warning(f"Failed to read ignore file '{ignore_path}': {e}")

    return name_patterns, path_patterns


def _glob_to_regex(glob_pattern: str) -> str:
    """
    Translate a gitignore/shell glob to a Python regex.

    The leading and trailing slashes are dropped; the caller decides whether
    the result is matched against names or root-relative paths.
    """
    glob_pattern = glob_pattern.rstrip("/").lstrip("/")
    if not glob_pattern:
        return ""
    return "^" + fnmatch.translate(glob_pattern)
