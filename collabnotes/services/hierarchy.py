"""Hierarchy store: attach, move and detach notes in the forest."""

import logging

from ..errors import CycleDetected, InvalidRelation
from ..storage.base import StorageBackend
from .ancestry import AncestryResolver

log = logging.getLogger(__name__)


class HierarchyStore:
    def __init__(self, backend: StorageBackend, ancestry: AncestryResolver | None = None):
        self._backend = backend
        self._edges = backend.hierarchy
        self._notes = backend.notes
        self._ancestry = ancestry or AncestryResolver(backend.hierarchy)

    def _link(self, note_id: int, parent_id: int) -> None:
        if note_id == parent_id:
            raise InvalidRelation(f"Note {note_id} cannot be its own parent")

        # Check and write under one lock so concurrent moves cannot race into a cycle
        with self._backend.hierarchy_lock():
            if not self._notes.exists(note_id):
                raise InvalidRelation(f"Note {note_id} does not exist")
            if not self._notes.exists(parent_id):
                raise InvalidRelation(f"Parent note {parent_id} does not exist")

            if self._ancestry.would_create_cycle(note_id, parent_id):
                log.warning(
                    f"Cycle rejected: note_id={note_id} parent_id={parent_id}"
                )
                raise CycleDetected(
                    f"Note {parent_id} is a descendant of note {note_id}"
                )

            self._edges.set_parent(note_id, parent_id)

    def attach(self, note_id: int, parent_id: int) -> bool:
        self._link(note_id, parent_id)
        log.info(f"Note attached: note_id={note_id} parent_id={parent_id}")
        return True

    def reparent(self, note_id: int, new_parent_id: int) -> bool:
        """Move a note under a new parent, replacing the old edge if there is one."""
        self._link(note_id, new_parent_id)
        log.info(f"Note moved: note_id={note_id} parent_id={new_parent_id}")
        return True

    def detach(self, note_id: int) -> bool:
        """Make the note a root. Detaching a root is a successful no-op."""
        with self._backend.hierarchy_lock():
            removed = self._edges.delete_parent(note_id)
        if removed:
            log.info(f"Note detached: note_id={note_id}")
        return True

    def remove_all_edges_touching(self, note_id: int) -> bool:
        """Drop the note's own parent edge and orphan its children.

        Children become roots; they are never deleted along with their parent.
        """
        with self._backend.hierarchy_lock():
            removed = self._edges.delete_touching(note_id)
        if removed:
            log.info(f"Note relations removed: note_id={note_id} edges={removed}")
        return True

    def has_any_relation(self, note_id: int) -> bool:
        return self._edges.has_relation(note_id)

    def list_children(self, note_id: int) -> list[int]:
        return self._edges.list_children(note_id)
