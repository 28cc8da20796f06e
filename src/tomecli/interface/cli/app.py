from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates one dispatcher invocation: logging bootstrap, configuration
resolution (defaults, environment and CLI overrides), scanning of the script
tree, and dispatch to either a built-in command or the script selected by
the command path. Completion queries write protocol lines to stdout; all
diagnostics go to stderr.
"""

import os
import shlex
import sys
from typing import List, Optional

from tomecli.core.analysis.help_renderer import render_help, render_script_help
from tomecli.core.components.filters import build_ignore_predicate
from tomecli.core.execution.environment import build_env
from tomecli.core.execution.executor import build_argv, execute
from tomecli.core.execution.hooks import discover_hooks
from tomecli.core.services.completion import complete, render_completion
from tomecli.core.services.resolver import resolve, resolve_command
from tomecli.core.services.scanner import scan
from tomecli.domain.config import TomeConfig, load_config
from tomecli.domain.constants import (
    COMPLETE_COMMAND,
    COMPLETE_NO_DESC_COMMAND,
    DEFAULT_EXECUTABLE_NAME,
)
from tomecli.domain.errors import CommandNotFoundError, TomeError
from tomecli.domain.tree_models import DirectoryNode, ScriptNode
from tomecli.infra.logging import LoggingConfig, configure_logging, get_logger, shutdown_logging
from tomecli.interface.cli import args as cli_args
from tomecli.interface.shell.scripts import SCRIPT_RENDERERS, render_alias_script

logger = get_logger(__name__)

ALIAS_FILE_MODE = 0o744

# Leading words of a completion query that name the builtin being completed
_COMPLETION_SUBJECTS = ("exec", "help")

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute one dispatcher invocation.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (the script's own code for direct execution).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Configuration hierarchy (defaults < environment < flags)
    config, warnings = load_config(
        cli_args.args_to_overrides(args),
        argv0=_program_name() if argv is None else None,
    )

    # 3. Logging bootstrap (stderr only, quiet unless debugging)
    configure_logging(
        LoggingConfig(
            level="DEBUG" if config.debug else "WARNING",
            console=True,
            log_file=config.log_file,
        )
    )

    # 4. Dispatch phase
    try:
        for w in warnings:
            logger.warning(f"Configuration Constraint: {w}")

        command = list(args.command or [])
        if not command:
            parser.print_help(sys.stderr)
            return 1

        logger.debug(f"Dispatching {command!r} with root={config.root} executable={config.executable}")
        return _dispatch(config, command)
    except TomeError as e:
        logger.debug(f"{type(e).__name__}: {e.message}")
        print(f"ERROR: {e.message}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    finally:
        shutdown_logging()

# -----------------------------------------------------------------------------
# COMMAND DISPATCH
# -----------------------------------------------------------------------------

def _dispatch(config: TomeConfig, command: List[str]) -> int:
    head, tail = command[0], command[1:]

    if head in (COMPLETE_COMMAND, COMPLETE_NO_DESC_COMMAND):
        return _run_complete(config, tail, with_descriptions=head == COMPLETE_COMMAND)
    if head == "help":
        return _run_help(config, tail)
    if head == "completion":
        return _run_completion_script(config, tail)
    if head == "alias":
        return _run_alias(config, tail)
    if head == "exec":
        exec_args = cli_args.build_exec_parser(config.executable).parse_args(tail)
        return _run_exec(
            config,
            list(exec_args.command or []),
            skip_hooks=exec_args.skip_hooks,
            dry_run=exec_args.dry_run,
        )

    # Bare form: the whole command line is a command path
    return _run_exec(config, command)


def _load_tree(config: TomeConfig) -> DirectoryNode:
    is_ignored = build_ignore_predicate(config.root, config.exclude_patterns, config.ignore_file)
    return scan(config.root, is_ignored)

# -----------------------------------------------------------------------------
# BUILT-IN COMMANDS
# -----------------------------------------------------------------------------

def _run_exec(
        config: TomeConfig,
        tokens: List[str],
        *,
        skip_hooks: bool = False,
        dry_run: bool = False,
) -> int:
    """
    Resolve a command path and run the script it names.

    Args:
        config: Resolved configuration.
        tokens: Command path followed by the arguments for the script.
        skip_hooks: Bypass the pre-execution hooks.
        dry_run: Print the command instead of running it.

    Returns:
        int: The script's exit code (0 for a dry run).
    """
    if not tokens:
        raise CommandNotFoundError("No command given")

    tree = _load_tree(config)
    script, forwarded = resolve_command(tree, tokens)

    hooks = [] if skip_hooks else discover_hooks(config.root)
    env = build_env(config.root, config.executable, script_path=script.path, script_args=forwarded)

    if dry_run:
        argv = build_argv(script, forwarded, env, hooks)
        if hooks:
            print(argv[-1], end="" if argv[-1].endswith("\n") else "\n")
        else:
            print(shlex.join(argv))
        return 0

    sys.stdout.flush()
    return execute(script, forwarded, env, hooks=hooks)


def _run_help(config: TomeConfig, tokens: List[str]) -> int:
    tree = _load_tree(config)

    resolved = resolve(tree, tokens)
    if not resolved.is_full_match:
        raise CommandNotFoundError(f"Command not found: {' '.join(tokens)}")

    if isinstance(resolved.node, ScriptNode):
        lines = render_script_help(resolved.node)
    else:
        lines = render_help(resolved.node)

    for line in lines:
        print(line)
    return 0


def _run_complete(config: TomeConfig, tokens: List[str], *, with_descriptions: bool) -> int:
    """
    Answer a shell completion query.

    The last token is the word being completed (possibly empty); the tokens
    before it are the words already typed. A leading 'exec' or 'help' names
    the builtin being completed and is not part of the command path.

    Args:
        config: Resolved configuration.
        tokens: Words after the completion command.
        with_descriptions: Emit 'name<TAB>description' instead of bare names.

    Returns:
        int: Always 0 once the tree was scanned.
    """
    delegate = True
    if tokens and tokens[0] in _COMPLETION_SUBJECTS and len(tokens) > 1:
        delegate = tokens[0] != "help"
        tokens = tokens[1:]

    typed, current_word = (tokens[:-1], tokens[-1]) if tokens else ([], "")

    tree = _load_tree(config)
    result = complete(
        tree,
        typed,
        current_word,
        root=config.root,
        executable_name=config.executable,
        delegate=delegate,
    )

    for line in render_completion(result, with_descriptions=with_descriptions):
        print(line)
    return 0


def _run_completion_script(config: TomeConfig, tokens: List[str]) -> int:
    completion_args = cli_args.build_completion_parser(config.executable).parse_args(tokens)
    sys.stdout.write(SCRIPT_RENDERERS[completion_args.shell](config.executable))
    return 0


def _run_alias(config: TomeConfig, tokens: List[str]) -> int:
    """
    Print or write the wrapper that runs this tree under its own name.

    Args:
        config: Resolved configuration.
        tokens: Arguments of the alias command.

    Returns:
        int: 0 on success, 1 if the wrapper could not be written.
    """
    alias_args = cli_args.build_alias_parser(config.executable).parse_args(tokens)
    script = render_alias_script(config.executable, config.root)

    if not alias_args.write_path:
        sys.stdout.write(script)
        return 0

    target = alias_args.write_path
    try:
        with open(target, "w", encoding="utf-8") as f:
            f.write(script)
        os.chmod(target, ALIAS_FILE_MODE)
    except OSError as e:
        logger.error(f"Unable to write alias to '{target}': {e}")
        print(f"ERROR: Unable to write alias to '{target}': {e}", file=sys.stderr)
        return 1

    logger.debug(f"Alias written to {target}")
    return 0

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _program_name() -> str:
    """Basename of the invoked binary, ignoring Python entry files."""
    name = os.path.basename(sys.argv[0] or "")
    if not name or name.endswith(".py"):
        return DEFAULT_EXECUTABLE_NAME
    return name

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
