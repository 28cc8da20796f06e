from __future__ import annotations

"""
Shell Completion Engine.

Implements the line-oriented completion protocol consumed by the shell
integration scripts. Depending on how far the typed arguments resolve into
the command tree, the engine either enumerates the children of a directory
or delegates to a script's own completion mode. A script is only spawned
when it explicitly opted in; every failure inside delegation degrades to an
empty candidate list so that completion never breaks the shell.

Output layout:

    name<TAB>description     (zero or more candidate lines)
    :<directive code>
    Completion ended with directive: <directive names>
"""

import logging
import re
import subprocess
from typing import List, Sequence

from tomecli.core.analysis.usage_parser import usage_of
from tomecli.core.execution.environment import build_env, merge_env
from tomecli.core.execution.executor import forward_termination
from tomecli.core.services.resolver import resolve
from tomecli.domain.completion_models import (
    CompletionContext,
    CompletionResult,
    ShellCompDirective,
)
from tomecli.domain.constants import (
    COMPLETION_FLAG,
    DIRECTIVE_TRAILER_PREFIX,
    DIRECTORY_DESCRIPTION,
)
from tomecli.domain.errors import CompletionDelegationFailure
from tomecli.domain.tree_models import DirectoryNode, ResolutionKind, ScriptNode

logger = logging.getLogger(__name__)

_DIRECTIVE_LINE_RX = re.compile(r"^:(\d+)$")

# Every completion is tool-controlled: the shell must never fall back to file paths
ENGINE_DIRECTIVE = ShellCompDirective.NO_FILE_COMP


# ==============================================================================
# PUBLIC API
# ==============================================================================

def complete(
        tree: DirectoryNode,
        args: Sequence[str],
        current_word: str,
        *,
        root: str,
        executable_name: str,
        delegate: bool = True,
) -> CompletionResult:
    """
    Compute completion candidates for a partially typed command.

    States:
        - args resolve to a directory: list its children starting with
          current_word, sorted by name.
        - args resolve to a script without the capability flag (or
          delegate is False): no candidates, nothing is spawned.
        - args resolve to an opted-in script: run it in completion mode
          and forward its lines.
        - args do not resolve: no candidates.

    Args:
        tree: Root of the command tree.
        args: Fully typed tokens before the word being completed.
        current_word: Partial token being completed (may be empty).
        root: Root directory, exported to delegated scripts.
        executable_name: Reported executable name, exported to delegated scripts.
        delegate: Allow running opted-in scripts.

    Returns:
        CompletionResult: Candidate lines and directive.
    """
    resolved = resolve(tree, args)
    logger.debug(f"Completion query args={list(args)} current_word={current_word!r} -> {resolved.kind.value}")

    if resolved.kind == ResolutionKind.DIRECTORY and isinstance(resolved.node, DirectoryNode):
        return CompletionResult(candidates=enumerate_children(resolved.node, current_word), directive=ENGINE_DIRECTIVE)

    if resolved.kind == ResolutionKind.SCRIPT and isinstance(resolved.node, ScriptNode):
        script = resolved.node
        if not delegate or not script.has_completion:
            logger.debug(f"Script did not opt into completion, not executing: {script.path}")
            return CompletionResult(directive=ENGINE_DIRECTIVE)

        context = CompletionContext.from_args(args, current_word)
        try:
            return delegate_completion(
                script,
                context,
                root=root,
                executable_name=executable_name,
                forwarded_args=list(resolved.remaining),
            )
        except CompletionDelegationFailure as e:
            logger.debug(f"Completion delegation failed: {e}")
            return CompletionResult(directive=ENGINE_DIRECTIVE)

    return CompletionResult(directive=ENGINE_DIRECTIVE)


def enumerate_children(directory: DirectoryNode, prefix: str) -> List[str]:
    """
    List the children of a directory whose name starts with prefix.

    Args:
        directory: Directory whose children are candidates.
        prefix: Case-sensitive name prefix.

    Returns:
        List[str]: 'name<TAB>description' lines sorted by name.
    """
    candidates: List[str] = []
    for node in directory.sorted_children():
        if not node.name.startswith(prefix):
            continue
        if isinstance(node, DirectoryNode):
            candidates.append(f"{node.name}\t{DIRECTORY_DESCRIPTION}")
        else:
            candidates.append(f"{node.name}\t{usage_of(node)}")
    return candidates


def delegate_completion(
        script: ScriptNode,
        context: CompletionContext,
        *,
        root: str,
        executable_name: str,
        forwarded_args: Sequence[str] = (),
) -> CompletionResult:
    """
    Run an opted-in script in completion mode and collect its candidates.

    Args:
        script: Script that declared completion support.
        context: Completion context exported as TOME_COMPLETION.
        root: Root directory of the tree.
        executable_name: Reported executable name.
        forwarded_args: Tokens typed after the script path.

    Returns:
        CompletionResult: Lines printed by the script; a trailing ':<code>'
                          line overrides the directive.

    Raises:
        CompletionDelegationFailure: On spawn failure, non-zero exit or
                                     undecodable output.
    """
    overlay = build_env(
        root,
        executable_name,
        context,
        script_path=script.path,
        script_args=forwarded_args,
    )

    try:
        proc = subprocess.Popen(
            [script.path, COMPLETION_FLAG],
            env=merge_env(overlay),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
    except (OSError, ValueError) as e:
        raise CompletionDelegationFailure(f"Unable to run '{script.path}' in completion mode: {e}") from e

    try:
        with forward_termination(proc):
            stdout, stderr = proc.communicate()
    except ValueError as e:
        proc.kill()
        proc.wait()
        raise CompletionDelegationFailure(f"Unreadable completion output from '{script.path}': {e}") from e

    if proc.returncode != 0:
        raise CompletionDelegationFailure(
            f"'{script.path}' exited with code {proc.returncode} in completion mode: {(stderr or '').strip()}"
        )

    return parse_script_output(stdout or "")


def parse_script_output(output: str) -> CompletionResult:
    """Split a script's completion output into candidates and directive."""
    lines = [line for line in output.splitlines() if line.strip()]
    directive = ENGINE_DIRECTIVE

    if lines:
        match = _DIRECTIVE_LINE_RX.match(lines[-1].strip())
        if match:
            directive = ShellCompDirective(int(match.group(1)))
            lines.pop()

    return CompletionResult(candidates=lines, directive=directive)


def render_completion(result: CompletionResult, *, with_descriptions: bool = True) -> List[str]:
    """
    Render a result in the wire format, directive trailer included.

    Args:
        result: Engine output.
        with_descriptions: When False, drop everything after the first TAB.

    Returns:
        List[str]: Candidate lines followed by the two control lines.
    """
    if with_descriptions:
        lines = list(result.candidates)
    else:
        lines = [candidate.split("\t", 1)[0] for candidate in result.candidates]

    lines.append(f":{int(result.directive)}")
    lines.append(f"{DIRECTIVE_TRAILER_PREFIX}{result.directive.describe()}")
    return lines
