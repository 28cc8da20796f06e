from __future__ import annotations

"""
Domain Constants.

Centralizes the names that form the contract between the dispatcher and the
scripts it runs: environment variables, reserved flags, marker strings and
well-known filenames inside the script root.
"""

from typing import List

DEFAULT_EXECUTABLE_NAME = "tome-cli"

# -----------------------------------------------------------------------------
# SCRIPT ENVIRONMENT CONTRACT
# -----------------------------------------------------------------------------

ENV_PREFIX = "TOME"
ENV_ROOT = "TOME_ROOT"
ENV_EXECUTABLE = "TOME_EXECUTABLE"
ENV_COMPLETION = "TOME_COMPLETION"
ENV_SCRIPT_PATH = "TOME_SCRIPT_PATH"
ENV_SCRIPT_NAME = "TOME_SCRIPT_NAME"
ENV_SCRIPT_ARGS = "TOME_SCRIPT_ARGS"

# Dispatcher-level settings (read, never injected)
ENV_DEBUG = "TOME_DEBUG"
ENV_LOG_FILE = "TOME_LOG_FILE"

# -----------------------------------------------------------------------------
# COMPLETION PROTOCOL
# -----------------------------------------------------------------------------

# Literal a script must contain to opt into completion delegation
COMPLETION_MARKER = b"TOME_COMPLETION"
COMPLETION_FLAG = "--completion"

COMPLETE_COMMAND = "__complete"
COMPLETE_NO_DESC_COMMAND = "__completeNoDesc"
DIRECTORY_DESCRIPTION = "directory"
DIRECTIVE_TRAILER_PREFIX = "Completion ended with directive: "

# -----------------------------------------------------------------------------
# ROOT LAYOUT
# -----------------------------------------------------------------------------

IGNORE_FILE_NAME = ".tomeignore"
HOOKS_DIR_NAME = ".hooks.d"
SOURCED_HOOK_SUFFIX = ".source"

BUILTIN_COMMANDS: List[str] = ["exec", "help", "completion", "alias"]
SUPPORTED_SHELLS: List[str] = ["bash", "zsh", "fish"]

# Hidden entries hold dispatcher metadata and VCS state, never commands
DEFAULT_EXCLUDE_PATTERNS: List[str] = [r"^\."]
