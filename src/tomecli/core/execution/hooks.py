from __future__ import annotations

"""
Pre-execution Hook Service.

Discovers the hooks stored in the root's .hooks.d directory and renders
the bash wrapper program that runs them before exec'ing the target script.
Executable hooks run as child processes; hooks ending in '.source' are
sourced so they can modify the environment the script inherits.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from typing import Dict, List, Sequence

from tomecli.domain.constants import HOOKS_DIR_NAME, SOURCED_HOOK_SUFFIX
from tomecli.infra.fs import is_executable_by_owner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hook:
    """
    Attributes:
        path: Absolute path to the hook file.
        name: Hook filename, which also defines the execution order.
        sourced: True when the filename ends with '.source'.
    """
    path: str
    name: str
    sourced: bool = False


# ==============================================================================
# PUBLIC API
# ==============================================================================

def discover_hooks(root: str) -> List[Hook]:
    """
    Find all hooks in <root>/.hooks.d.

    Subdirectories are ignored. Non-sourced hooks without the owner
    executable bit are skipped with a warning.

    Args:
        root: Root directory of the script tree.

    Returns:
        List[Hook]: Hooks sorted lexicographically by name.
    """
    hooks_dir = os.path.join(root, HOOKS_DIR_NAME)
    if not os.path.isdir(hooks_dir):
        logger.debug(f"{HOOKS_DIR_NAME} directory not found at: {hooks_dir}")
        return []

    hooks: List[Hook] = []
    with os.scandir(hooks_dir) as entries:
        for entry in entries:
            if entry.is_dir():
                continue

            sourced = entry.name.endswith(SOURCED_HOOK_SUFFIX)
            if not sourced:
                try:
                    mode = entry.stat().st_mode
                except OSError as e:
                    logger.warning(f"Failed to stat hook '{entry.path}': {e}")
                    continue
                if not is_executable_by_owner(mode):
                    logger.warning(f"Skipping non-executable hook without {SOURCED_HOOK_SUFFIX} suffix: {entry.path}")
                    continue

            hooks.append(Hook(path=entry.path, name=entry.name, sourced=sourced))
            logger.debug(f"Discovered hook: {entry.path} (sourced={sourced})")

    hooks.sort(key=lambda h: h.name)
    return hooks


def generate_wrapper_script(
        hooks: Sequence[Hook],
        env: Dict[str, str],
        script_path: str,
        script_args: Sequence[str],
) -> str:
    """
    Render the bash program that runs hooks and then execs the script.

    Args:
        hooks: Ordered hooks to run.
        env: Environment overlay exported before the first hook.
        script_path: Target script.
        script_args: Arguments forwarded to the target script.

    Returns:
        str: Wrapper program, or '' when there are no hooks.
    """
    if not hooks:
        return ""

    lines: List[str] = ["set -e"]
    for key in sorted(env):
        lines.append(f"export {key}={shlex.quote(env[key])}")
    lines.append("")

    for hook in hooks:
        quoted_path = shlex.quote(hook.path)
        failure_label = shlex.quote(f"pre-hook failed: {hook.name}" + (" (sourcing failed)" if hook.sourced else ""))
        lines.append(f"# Hook: {hook.name}")
        if hook.sourced:
            lines.append(f"if ! source {quoted_path}; then")
        else:
            lines.append(f"if ! {quoted_path}; then")
        lines.append(f"  echo 'Error: '{failure_label} >&2")
        lines.append("  exit 1")
        lines.append("fi")
        lines.append("")

    lines.append("# Execute target script")
    command = " ".join(shlex.quote(part) for part in [script_path, *script_args])
    lines.append(f"exec {command}")
    return "\n".join(lines) + "\n"
