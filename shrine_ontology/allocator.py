"""
Shrine Ontology - Surrogate ID Allocator.

============================================================
PURPOSE
============================================================
Hands out dense, monotonically increasing integer IDs to
sensitive nodes.

- One independent counter per node kind, both start at 0
- The n-th distinct path of a kind receives ID n-1
- A path seen again returns its existing ID

============================================================
"""

from typing import Dict, Tuple

from .models import NodeKind


class SurrogateIdAllocator:
    """Per-kind monotonic ID counters."""

    def __init__(self):
        self._next_id: Dict[NodeKind, int] = {kind: 0 for kind in NodeKind}
        self._assigned: Dict[NodeKind, Dict[str, int]] = {kind: {} for kind in NodeKind}

    def allocate(self, kind: NodeKind, path: str) -> Tuple[int, bool]:
        """
        Get the surrogate ID for a path.

        Returns:
            (surrogate_id, is_new) where is_new is False when the
            path already held an ID
        """
        assigned = self._assigned[kind]
        if path in assigned:
            return assigned[path], False

        surrogate_id = self._next_id[kind]
        self._next_id[kind] = surrogate_id + 1
        assigned[path] = surrogate_id
        return surrogate_id, True

    def peek(self, kind: NodeKind) -> int:
        """Next ID that would be issued, without consuming it."""
        return self._next_id[kind]

    def issued(self, kind: NodeKind) -> int:
        return len(self._assigned[kind])


def create_allocator() -> SurrogateIdAllocator:
    """Factory function to create an allocator."""
    return SurrogateIdAllocator()
