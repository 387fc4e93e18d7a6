"""Read-only traversal of the note forest.

The walk goes up one parent lookup at a time, so any storage that can answer
"who is the parent of X" can back it. A visited set bounds every walk: a store
corrupted into a cycle raises CycleDetected instead of looping forever.
"""

from collections.abc import Iterator
from typing import Optional

from ..errors import CycleDetected
from ..storage.base import HierarchyStorage


class AncestryResolver:
    def __init__(self, storage: HierarchyStorage):
        self._storage = storage

    def _walk_up(self, note_id: int) -> Iterator[int]:
        """Yield ancestors from the immediate parent to the root."""
        visited = {note_id}
        current = self._storage.get_parent(note_id)
        while current is not None:
            if current in visited:
                raise CycleDetected(
                    f"Hierarchy cycle found above note {note_id} at note {current}"
                )
            visited.add(current)
            yield current
            current = self._storage.get_parent(current)

    def get_parent(self, note_id: int) -> Optional[int]:
        return self._storage.get_parent(note_id)

    def get_ancestor_chain(self, note_id: int) -> list[int]:
        """Ancestors ordered root first, immediate parent last."""
        chain = list(self._walk_up(note_id))
        chain.reverse()
        return chain

    def get_ultimate_root(self, note_id: int) -> Optional[int]:
        """The top-most ancestor (the one without a parent), or None for a root."""
        root = None
        for ancestor in self._walk_up(note_id):
            root = ancestor
        return root

    def would_create_cycle(self, note_id: int, candidate_parent_id: int) -> bool:
        if candidate_parent_id == note_id:
            return True
        return any(a == note_id for a in self._walk_up(candidate_parent_id))
