from __future__ import annotations

"""
Script Executor.

Spawns a resolved script as a child process with the built environment and
the forwarded arguments, keeps the standard streams connected, and returns
the child's exit code unchanged. Termination signals received while the
child runs are forwarded to it so that no orphan is left behind.
"""

import logging
import signal
import subprocess
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from tomecli.core.execution.environment import merge_env
from tomecli.core.execution.hooks import Hook, generate_wrapper_script
from tomecli.domain.errors import LaunchError
from tomecli.domain.tree_models import ScriptNode

logger = logging.getLogger(__name__)

# Signals relayed to the child; SIGINT reaches it through the terminal's process group
_FORWARDED_SIGNALS = [s for s in ("SIGTERM", "SIGHUP") if hasattr(signal, s)]

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


# ==============================================================================
# PUBLIC API
# ==============================================================================

def build_argv(
        script: ScriptNode,
        forwarded_args: Sequence[str],
        env: Mapping[str, str],
        hooks: Sequence[Hook] = (),
) -> List[str]:
    """
    Compute the argv of the child process.

    Without hooks the script is spawned directly; with hooks a bash wrapper
    runs them first and then execs the script.

    Args:
        script: Resolved script.
        forwarded_args: Arguments for the script.
        env: Environment overlay (exported by the hook wrapper).
        hooks: Pre-execution hooks.

    Returns:
        List[str]: Child process argv.
    """
    if hooks:
        wrapper = generate_wrapper_script(hooks, dict(env), script.path, forwarded_args)
        return ["bash", "-c", wrapper]
    return [script.path, *forwarded_args]


def execute(
        script: ScriptNode,
        forwarded_args: Sequence[str],
        env: Mapping[str, str],
        *,
        hooks: Sequence[Hook] = (),
) -> int:
    """
    Run a script and wait for it.

    Args:
        script: Resolved script.
        forwarded_args: Arguments appended to the script invocation.
        env: Environment overlay merged onto the inherited environment.
        hooks: Pre-execution hooks to run first.

    Returns:
        int: The child's exit code (128 + N when killed by signal N).

    Raises:
        LaunchError: If the child process cannot be spawned.
    """
    argv = build_argv(script, forwarded_args, env, hooks)
    logger.debug(f"Spawning: {argv[0]} (args={list(forwarded_args)}, hooks={len(hooks)})")

    try:
        proc = subprocess.Popen(argv, env=merge_env(env))
    except FileNotFoundError as e:
        raise LaunchError(f"Unable to launch '{script.path}': {e.strerror or e}", EXIT_NOT_FOUND) from e
    except OSError as e:
        raise LaunchError(f"Unable to launch '{script.path}': {e.strerror or e}", EXIT_NOT_EXECUTABLE) from e

    with forward_termination(proc):
        returncode = proc.wait()

    if returncode < 0:
        returncode = 128 + (-returncode)
    logger.debug(f"Script exited with code {returncode}: {script.path}")
    return returncode


@contextmanager
def forward_termination(proc: subprocess.Popen) -> Iterator[None]:
    """
    Keep a child process tied to the dispatcher while it runs.

    Inside the block SIGINT is ignored by the dispatcher, since the terminal
    already delivers it to the child's process group, and SIGTERM/SIGHUP
    are relayed to the child. The previous handlers are restored on exit.

    Args:
        proc: Running child process.
    """
    previous = _install_forwarding(proc)
    try:
        yield
    finally:
        _restore_handlers(previous)

# ==============================================================================
# PRIVATE HELPERS (SIGNAL FORWARDING)
# ==============================================================================

def _install_forwarding(proc: subprocess.Popen) -> Dict[int, Any]:
    """Relay termination signals to the child while it runs."""
    previous: Dict[int, Any] = {}

    def _relay(signum: int, _frame: Optional[Any]) -> None:
        if proc.poll() is None:
            proc.send_signal(signum)

    try:
        previous[signal.SIGINT] = signal.signal(signal.SIGINT, signal.SIG_IGN)
        for name in _FORWARDED_SIGNALS:
            signum = getattr(signal, name)
            previous[signum] = signal.signal(signum, _relay)
    except ValueError:
        # Not on the main thread: handlers cannot be installed
        _restore_handlers(previous)
        return {}
    return previous


def _restore_handlers(previous: Dict[int, Any]) -> None:
    for signum, handler in previous.items():
        # None means the handler was not installed from Python
        signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
