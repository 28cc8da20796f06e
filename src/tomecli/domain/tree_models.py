from __future__ import annotations

"""
Command Tree Data Models.

Provides the node types produced by the scanner and the value object
returned by the command resolver. Directory nodes mirror filesystem
directories; script nodes mirror executable files.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass
class ScriptNode:
    """
    Represents a leaf entry (executable script) in the command tree.

    Usage and help text are parsed from the script header on first access
    and cached on the node.

    Attributes:
        name: Single path segment naming the command.
        path: Absolute filesystem path to the script.
        segments: Path segments from the tree root down to this script.
        executable: Owner-executable permission flag.
        has_completion: Whether the script opted into completion delegation.
    """
    name: str
    path: str
    segments: Tuple[str, ...]
    executable: bool = True
    has_completion: bool = False
    _header: Optional[Tuple[str, str]] = field(default=None, repr=False, compare=False)

    @property
    def usage(self) -> str:
        return self._parsed_header()[0]

    @property
    def help(self) -> str:
        return self._parsed_header()[1]

    @property
    def command_path(self) -> str:
        """Space-joined segments, as typed on the command line."""
        return " ".join(self.segments)

    def _parsed_header(self) -> Tuple[str, str]:
        if self._header is None:
            from tomecli.core.analysis.usage_parser import parse_script_header
            self._header = parse_script_header(self.path)
        return self._header


@dataclass
class DirectoryNode:
    """
    Represents a directory in the command tree.

    Attributes:
        name: Single path segment (empty for the tree root).
        path: Absolute filesystem path to the directory.
        segments: Path segments from the tree root down to this directory.
        children: Child nodes keyed by name.
    """
    name: str
    path: str
    segments: Tuple[str, ...] = ()
    children: Dict[str, Node] = field(default_factory=dict)

    def add(self, child: Node) -> None:
        self.children[child.name] = child

    def sorted_children(self) -> List[Node]:
        """Children in lexicographic order by name."""
        return [self.children[name] for name in sorted(self.children)]

    def get(self, name: str) -> Optional[Node]:
        return self.children.get(name)


Node = Union[DirectoryNode, ScriptNode]

# -----------------------------------------------------------------------------
# RESOLUTION RESULT
# -----------------------------------------------------------------------------

class ResolutionKind(enum.Enum):
    DIRECTORY = "directory"
    SCRIPT = "script"
    PARTIAL = "partial"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ResolvedPath:
    """
    Outcome of walking the command tree with a sequence of tokens.

    Attributes:
        kind: Classification of the walk.
        node: Deepest matched node, or None when nothing matched.
        matched: Tokens consumed as path segments.
        remaining: Unconsumed tokens. For a script these are the
                   arguments to forward to it.
    """
    kind: ResolutionKind
    node: Optional[Node]
    matched: Tuple[str, ...] = ()
    remaining: Tuple[str, ...] = ()

    @property
    def is_full_match(self) -> bool:
        return self.kind in (ResolutionKind.DIRECTORY, ResolutionKind.SCRIPT)
