"""Data structures for the resolved dependency tree and cycle detection."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Tuple

from ..errors import CircularDependencyError
from ..models.config_content import Triggers
from ..models.coord import LockedCoord


@dataclass(frozen=True)
class CircularDependencyDetector:
    """Ancestor chain of a single resolution path.

    The chain is an immutable tuple: ``push`` returns a new detector and
    leaves the receiver untouched, so sibling branches never observe each
    other's ancestry.
    """
    chain: Tuple[str, ...] = ()

    def push(self, item: str) -> "CircularDependencyDetector":
        """Return a detector with ``item`` appended.

        Raises:
            CircularDependencyError: If ``item`` is already an ancestor
        """
        if item in self.chain:
            raise CircularDependencyError(self.chain, item)
        return CircularDependencyDetector(self.chain + (item,))

    def clone(self) -> "CircularDependencyDetector":
        return CircularDependencyDetector(self.chain)

    def __contains__(self, item: str) -> bool:
        return item in self.chain

    def __len__(self) -> int:
        return len(self.chain)


@dataclass(frozen=True)
class ResolvedDependency:
    """A node of the resolved dependency tree.

    ``dir`` is where the dependency is extracted (the project directory for
    the root). An empty ``bin_dir`` means ``<dir>/bin``. ``sub`` keeps the
    declaration order of the dependencies.
    """
    coord: LockedCoord
    dir: str
    bin_dir: str = ""
    exports: Dict[str, str] = field(default_factory=dict)
    alias: Dict[str, str] = field(default_factory=dict)
    triggers: Triggers = field(default_factory=Triggers)
    sub: Tuple["ResolvedDependency", ...] = ()

    def bin_dir_or_default(self) -> str:
        if not self.bin_dir:
            return os.path.join(self.dir, "bin")
        return self.bin_dir

    def iter_tree(self, depth: int = 0) -> Iterator[Tuple["ResolvedDependency", int]]:
        """Yield ``(node, depth)`` pairs in pre-order, root first."""
        yield self, depth
        for child in self.sub:
            yield from child.iter_tree(depth + 1)

    def get_display_name(self) -> str:
        return str(self.coord)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the resolved tree."""
        nodes = list(self.iter_tree())
        unique = {node.coord.canonical_name_no_version() for node, depth in nodes if depth > 0}
        return {
            "root": self.dir,
            "direct_dependencies": len(self.sub),
            "total_dependencies": len(nodes) - 1,
            "unique_dependencies": len(unique),
            "max_depth": max(depth for _, depth in nodes),
        }
