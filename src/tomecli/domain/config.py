from __future__ import annotations

"""
Configuration Domain Management.

Resolves the dispatcher settings from three layers, lowest precedence
first: built-in defaults, environment variables, and command-line
overrides. The merged dictionary is validated into an immutable TomeConfig.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from tomecli.core.execution.environment import env_prefix_for
from tomecli.domain.constants import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_EXECUTABLE_NAME,
    ENV_DEBUG,
    ENV_EXECUTABLE,
    ENV_LOG_FILE,
    ENV_ROOT,
    IGNORE_FILE_NAME,
)
from tomecli.infra.fs import normalize_path

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}

# -----------------------------------------------------------------------------
# Configuration Model
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TomeConfig:
    """
    Validated dispatcher settings.

    Attributes:
        root: Absolute path of the script tree.
        executable: Name the tool reports to scripts.
        debug: Elevate logging to DEBUG.
        log_file: Optional rotating log file path.
        exclude_patterns: Regexes of entries skipped by the scanner.
        ignore_file: Name of the glob ignore file inside the root.
    """
    root: str
    executable: str
    debug: bool = False
    log_file: Optional[str] = None
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    ignore_file: str = IGNORE_FILE_NAME


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default configuration values.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        "root": ".",
        "executable": DEFAULT_EXECUTABLE_NAME,
        "debug": False,
        "log_file": None,
        "exclude_patterns": list(DEFAULT_EXCLUDE_PATTERNS),
        "ignore_file": IGNORE_FILE_NAME,
    }

# -----------------------------------------------------------------------------
# Layer Resolution
# -----------------------------------------------------------------------------

def resolve_executable_name(
        override: Optional[str],
        environ: Mapping[str, str],
        argv0: Optional[str] = None,
) -> str:
    """
    Determine the name the tool reports to scripts.

    A renaming wrapper passes --executable or exports TOME_EXECUTABLE;
    otherwise the basename of the invoked binary is used.

    Args:
        override: Value of the --executable flag.
        environ: Process environment.
        argv0: Invoked program path.

    Returns:
        str: Reported executable name.
    """
    for candidate in (override, environ.get(ENV_EXECUTABLE), os.path.basename(argv0 or "")):
        if candidate and candidate.strip():
            return candidate.strip()
    return DEFAULT_EXECUTABLE_NAME


def load_env_config(environ: Mapping[str, str], executable: str) -> Dict[str, Any]:
    """
    Read configuration values from environment variables.

    The root may be set through a variable prefixed with the executable
    name (MY_TOOL_ROOT) so several renamed instances can coexist; it takes
    precedence over TOME_ROOT.

    Args:
        environ: Process environment.
        executable: Resolved executable name.

    Returns:
        Dict[str, Any]: Subset of configuration keys found in the environment.
    """
    values: Dict[str, Any] = {}

    prefix = env_prefix_for(executable)
    for key in (f"{prefix}_ROOT" if prefix else "", ENV_ROOT):
        if key and environ.get(key):
            values["root"] = environ[key]
            break

    if environ.get(ENV_DEBUG):
        values["debug"] = environ[ENV_DEBUG].strip().lower() in _TRUTHY
    if environ.get(ENV_LOG_FILE):
        values["log_file"] = environ[ENV_LOG_FILE]

    return values


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of override values into a base configuration.

    Only known keys are merged and None values never override.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k in get_default_config():
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

def validate_config(raw: Mapping[str, Any]) -> Tuple[TomeConfig, List[str]]:
    """
    Normalize a merged configuration dictionary into a TomeConfig.

    Invalid values are replaced by defaults and reported as warnings.

    Args:
        raw: Merged configuration dictionary.

    Returns:
        Tuple[TomeConfig, List[str]]: Validated configuration and warnings.
    """
    defaults = get_default_config()
    warnings: List[str] = []

    def _string(key: str) -> str:
        value = raw.get(key, defaults[key])
        if not isinstance(value, str) or not value.strip():
            warnings.append(f"Invalid '{key}' value {value!r}; using {defaults[key]!r}.")
            return defaults[key]
        return value.strip()

    root = normalize_path(_string("root"), defaults["root"])
    executable = _string("executable")

    debug = raw.get("debug", False)
    if not isinstance(debug, bool):
        warnings.append(f"Invalid 'debug' value {debug!r}; using False.")
        debug = False

    log_file = raw.get("log_file")
    if log_file is not None and (not isinstance(log_file, str) or not log_file.strip()):
        warnings.append(f"Invalid 'log_file' value {log_file!r}; file logging disabled.")
        log_file = None

    exclude = raw.get("exclude_patterns", defaults["exclude_patterns"])
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        warnings.append("Invalid 'exclude_patterns'; using defaults.")
        exclude = list(defaults["exclude_patterns"])

    config = TomeConfig(
        root=root,
        executable=executable,
        debug=debug,
        log_file=normalize_path(log_file, log_file) if log_file else None,
        exclude_patterns=list(exclude),
        ignore_file=_string("ignore_file"),
    )
    return config, warnings


def load_config(
        overrides: Dict[str, Any],
        environ: Optional[Mapping[str, str]] = None,
        argv0: Optional[str] = None,
) -> Tuple[TomeConfig, List[str]]:
    """
    Resolve the full configuration hierarchy.

    Args:
        overrides: Values from the command line (None means unset).
        environ: Process environment; defaults to os.environ.
        argv0: Invoked program path.

    Returns:
        Tuple[TomeConfig, List[str]]: Validated configuration and warnings.
    """
    env = os.environ if environ is None else environ
    executable = resolve_executable_name(overrides.get("executable"), env, argv0)

    raw = merge_config(get_default_config(), {"executable": executable})
    raw = merge_config(raw, load_env_config(env, executable))
    raw = merge_config(raw, overrides)

    logger.debug(f"Resolved configuration: root={raw['root']} executable={raw['executable']}")
    return validate_config(raw)
