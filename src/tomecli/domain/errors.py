from __future__ import annotations

"""
Dispatcher Error Taxonomy.

Every failure the dispatcher reports to a user derives from TomeError and
carries the process exit code the CLI should terminate with.
"""

from typing import Optional


class TomeError(Exception):
    """Base class for all dispatcher failures."""

    exit_code: int = 1

    def __init__(self, message: str, exit_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class ScanError(TomeError):
    """The configured root is missing or is not a directory."""


class CommandNotFoundError(TomeError):
    """No script in the tree matches the requested command path."""


class LaunchError(TomeError):
    """The resolved script could not be spawned."""

    exit_code = 126


class CompletionDelegationFailure(TomeError):
    """
    An opted-in script failed while producing its own completions.

    Only raised inside the completion engine, which recovers from it by
    emitting no candidates.
    """
