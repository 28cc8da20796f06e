from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the dispatcher. Global options are parsed
first; everything after the first positional token is kept verbatim so that
arguments meant for a script are never interpreted by the dispatcher.
Built-in commands parse their own tail with a dedicated sub-parser.
"""

import argparse
from typing import Any, Dict, List, Optional

from tomecli.domain.constants import (
    COMPLETE_COMMAND,
    DEFAULT_EXECUTABLE_NAME,
    SUPPORTED_SHELLS,
)

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser(prog: str = DEFAULT_EXECUTABLE_NAME) -> argparse.ArgumentParser:
    """
    Construct the top-level argument parser.

    Args:
        prog: Program name shown in usage messages.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=prog,
        description="Turn a directory of scripts into a command-line tool with nested subcommands.",
        epilog=(
            "commands:\n"
            "  <path...> [args]          run the script at <path>\n"
            "  exec <path...> [args]     run a script (--skip-hooks, --dry-run)\n"
            "  help [<path...>]          list scripts or show one script's help\n"
            "  completion <shell>        print a completion script (bash, zsh, fish)\n"
            "  alias [--write PATH]      print or write a renaming wrapper\n"
            f"  {COMPLETE_COMMAND} ...            shell completion query"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # --- Tree Location and Identity ---
    p.add_argument(
        "-r", "--root",
        dest="root",
        default=None,
        help="Root directory of the script tree (env: <NAME>_ROOT, TOME_ROOT).",
    )
    p.add_argument(
        "-e", "--executable",
        dest="executable",
        default=None,
        help="Name reported to scripts and used by completion (env: TOME_EXECUTABLE).",
    )
    p.add_argument(
        "--exclude",
        dest="exclude_patterns",
        default=None,
        help="Comma-separated regexes of entries to hide (default: hidden files).",
    )

    # --- Diagnostics ---
    p.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to a rotating file.",
    )

    p.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command path followed by the arguments for the script.",
    )

    return p


def build_exec_parser(prog: str = DEFAULT_EXECUTABLE_NAME) -> argparse.ArgumentParser:
    """Parser for the tail of 'exec'."""
    p = argparse.ArgumentParser(prog=f"{prog} exec", description="Run a script from the tree.")
    p.add_argument(
        "--skip-hooks",
        action="store_true",
        help="Do not run the pre-execution hooks in .hooks.d.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would run without running it.",
    )
    p.add_argument("command", nargs=argparse.REMAINDER, help="Command path and script arguments.")
    return p


def build_completion_parser(prog: str = DEFAULT_EXECUTABLE_NAME) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=f"{prog} completion", description="Print a shell completion script.")
    p.add_argument("shell", choices=SUPPORTED_SHELLS)
    return p


def build_alias_parser(prog: str = DEFAULT_EXECUTABLE_NAME) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=f"{prog} alias",
        description="Print a wrapper script that runs the dispatcher with the current root and name.",
    )
    p.add_argument(
        "-w", "--write",
        dest="write_path",
        default=None,
        help="Write the wrapper to this path (mode 0744) instead of printing it.",
    )
    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Unset options map to None so that environment values survive the merge.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "root": args.root,
        "executable": args.executable,
        "log_file": args.log_file,
    }

    if args.debug:
        overrides["debug"] = True
    if args.exclude_patterns is not None:
        overrides["exclude_patterns"] = _split_csv(args.exclude_patterns)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
