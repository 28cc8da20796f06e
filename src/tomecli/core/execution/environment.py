from __future__ import annotations

"""
Execution Environment Builder.

Constructs the environment overlay every script may rely on: the absolute
root path, the reported executable name (under both the TOME_ prefix and a
prefix derived from the executable name), script identity, and, for
completion queries only, the serialized completion context.
"""

import os
import re
from typing import Dict, Mapping, Optional, Sequence

from tomecli.domain.completion_models import CompletionContext
from tomecli.domain.constants import (
    ENV_COMPLETION,
    ENV_EXECUTABLE,
    ENV_ROOT,
    ENV_SCRIPT_ARGS,
    ENV_SCRIPT_NAME,
    ENV_SCRIPT_PATH,
)

_CAMEL_BOUNDARY_RX = re.compile(r"([a-z0-9])([A-Z])")
_NON_WORD_RX = re.compile(r"[^A-Za-z0-9]+")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def env_prefix_for(executable_name: str) -> str:
    """
    Derive the upper snake-case variable prefix for an executable name.

    Examples: 'tome-cli' -> 'TOME_CLI', 'myTool' -> 'MY_TOOL'.
    """
    text = _CAMEL_BOUNDARY_RX.sub(r"\1_\2", executable_name)
    text = _NON_WORD_RX.sub("_", text).strip("_")
    return text.upper()


def build_env(
        root: str,
        executable_name: str,
        completion: Optional[CompletionContext] = None,
        *,
        script_path: Optional[str] = None,
        script_args: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    """
    Build the environment overlay for a script invocation.

    Args:
        root: Configured root directory (made absolute here).
        executable_name: Name under which the tool reports itself.
        completion: Completion context, only for completion delegation.
        script_path: Absolute path of the script being run.
        script_args: Arguments forwarded to the script.

    Returns:
        Dict[str, str]: Variables to overlay on the inherited environment.
    """
    abs_root = os.path.abspath(root)
    env: Dict[str, str] = {
        ENV_ROOT: abs_root,
        ENV_EXECUTABLE: executable_name,
    }

    prefix = env_prefix_for(executable_name)
    if prefix:
        env[f"{prefix}_ROOT"] = abs_root
        env[f"{prefix}_EXECUTABLE"] = executable_name

    if script_path is not None:
        env[ENV_SCRIPT_PATH] = script_path
        env[ENV_SCRIPT_NAME] = os.path.basename(script_path)
        env[ENV_SCRIPT_ARGS] = " ".join(script_args or [])

    if completion is not None:
        env[ENV_COMPLETION] = completion.to_json()

    return env


def merge_env(overlay: Mapping[str, str], base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Overlay variables on the inherited process environment.

    A completion context inherited from a parent invocation is dropped
    unless the overlay sets its own.

    Args:
        overlay: Variables produced by build_env.
        base: Environment to inherit; defaults to os.environ.

    Returns:
        Dict[str, str]: Complete child environment.
    """
    merged = dict(os.environ if base is None else base)
    if ENV_COMPLETION not in overlay:
        merged.pop(ENV_COMPLETION, None)
    merged.update(overlay)
    return merged
