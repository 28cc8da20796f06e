from __future__ import annotations

"""
Completion Protocol Data Models.

Defines the closed set of shell-completion directives, the per-query
completion context handed to opted-in scripts, and the engine result.
"""

import enum
import json
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

# -----------------------------------------------------------------------------
# DIRECTIVES
# -----------------------------------------------------------------------------

class ShellCompDirective(enum.IntFlag):
    """Bit flags consumed by the shell integration layer."""
    DEFAULT = 0
    ERROR = 1
    NO_SPACE = 2
    NO_FILE_COMP = 4
    FILTER_FILE_EXT = 8
    FILTER_DIRS = 16
    KEEP_ORDER = 32

    def describe(self) -> str:
        """
        Render the directive with its protocol names.

        Returns:
            str: Comma-separated names, e.g. 'ShellCompDirectiveNoFileComp'.
        """
        value = int(self)
        if value == 0:
            return _PROTOCOL_NAMES[0]
        names = [name for bit, name in _PROTOCOL_NAMES.items() if bit and value & bit]
        return ", ".join(names)


_PROTOCOL_NAMES: Dict[int, str] = {
    0: "ShellCompDirectiveDefault",
    1: "ShellCompDirectiveError",
    2: "ShellCompDirectiveNoSpace",
    4: "ShellCompDirectiveNoFileComp",
    8: "ShellCompDirectiveFilterFileExt",
    16: "ShellCompDirectiveFilterDirs",
    32: "ShellCompDirectiveKeepOrder",
}

# -----------------------------------------------------------------------------
# CONTEXT AND RESULT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CompletionContext:
    """
    Describes a single completion request.

    Attributes:
        args: Fully-typed path segments before the token being completed.
        last_arg: The immediately preceding segment ('' when there is none).
        current_word: The partial token, verbatim.
    """
    args: Tuple[str, ...]
    last_arg: str
    current_word: str

    @classmethod
    def from_args(cls, args: Sequence[str], current_word: str) -> CompletionContext:
        args_t = tuple(args)
        return cls(args=args_t, last_arg=args_t[-1] if args_t else "", current_word=current_word)

    def to_json(self) -> str:
        payload = {
            "args": list(self.args),
            "last_arg": self.last_arg,
            "current_word": self.current_word,
        }
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class CompletionResult:
    candidates: List[str] = field(default_factory=list)
    directive: ShellCompDirective = ShellCompDirective.NO_FILE_COMP
