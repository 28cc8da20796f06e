from __future__ import annotations

"""
Script Header Parser.

Extracts the one-line usage and the multi-line help text from the leading
comment block of a script. Scripts are read, never executed, so listing
help and completing command names cannot trigger script side effects.

Expected layout:

    #!/bin/bash
    # USAGE: $0 [options] <arg1> <arg2>
    # Help text for the script.
    # It can span multiple lines.

    echo 1
"""

import logging
import os
import re
import textwrap
from typing import List, Tuple

from tomecli.domain.tree_models import ScriptNode

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# REGEX CONSTANTS
# -----------------------------------------------------------------------------

_COMMENT_RX = re.compile(r"^[/*\-#]+")
_COMMENT_CHARS = "#/-*"
_MARKER_RX = re.compile(r"(USAGE|SUMMARY):")
_OPTION_RX = re.compile(r"TOME_[A-Z_]+")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def usage_of(script: ScriptNode) -> str:
    """Short usage line shown in help listings and completion descriptions."""
    return script.usage


def parse_script_header(path: str) -> Tuple[str, str]:
    """
    Parse the usage line and help block of a script.

    Stops reading at the first non-comment line to stay cheap on large
    script trees. Unreadable files yield empty strings.

    Args:
        path: Absolute path to the script (symlinks are followed).

    Returns:
        Tuple[str, str]: (usage, help).
    """
    logger.debug(f"Parsing script header: {path}")
    try:
        header = _read_header_lines(path)
    except OSError as e:
        logger.debug(f"Unable to read script header '{path}': {e}")
        return "", ""

    if not header or not _COMMENT_RX.match(header[0]):
        return "", ""

    usage = _clean_usage(header[0], os.path.basename(path))

    help_lines: List[str] = []
    for line in header:
        if not _COMMENT_RX.match(line):
            break
        help_lines.append(line.lstrip(_COMMENT_CHARS).rstrip())

    help_text = textwrap.dedent("\n".join(help_lines)).strip("\n")
    return usage, help_text

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _read_header_lines(path: str) -> List[str]:
    """Return the lines following an optional shebang, up to the first non-comment."""
    lines: List[str] = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for idx, raw in enumerate(f):
            line = raw.rstrip("\r\n")
            if idx == 0 and line.startswith("#!"):
                continue
            lines.append(line)
            if not _COMMENT_RX.match(line):
                break
    return lines


def _clean_usage(line: str, script_name: str) -> str:
    """Strip comment characters, markers, the script name and TOME_ option tokens."""
    text = line.lstrip(_COMMENT_CHARS)
    text = _MARKER_RX.sub("", text)
    text = re.sub(f"({re.escape('$0')}|{re.escape(script_name)})", "", text)
    text = _OPTION_RX.sub("", text)
    return text.strip()
