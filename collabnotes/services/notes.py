"""Note directory: the few note facts the core needs (ids, creator, visibility)."""

import logging
from typing import Optional

from ..entities import NoteRecord, NoteView
from ..errors import NoteNotFound
from ..security.crypto import create_public_id
from ..storage.base import StorageBackend
from .hierarchy import HierarchyStore
from .note_settings import NoteSettingsService
from .team import TeamRegistry

log = logging.getLogger(__name__)


class NoteDirectory:
    def __init__(
        self,
        backend: StorageBackend,
        settings: NoteSettingsService,
        hierarchy: HierarchyStore,
        team: TeamRegistry,
    ):
        self._backend = backend
        self._notes = backend.notes
        self._settings = settings
        self._hierarchy = hierarchy
        self._team = team

    def create_note(
        self,
        creator_id: int,
        parent_id: Optional[int] = None,
        is_public: Optional[bool] = None,
    ) -> NoteRecord:
        """Create a note with its settings row, optionally attached to a parent."""
        with self._backend.transaction():
            note = self._notes.create(create_public_id(), creator_id)
            self._settings.create(note.id, is_public)
            if parent_id is not None:
                self._hierarchy.attach(note.id, parent_id)

        log.info(f"Note created: note_id={note.id} by user_id={creator_id}")
        return note

    def get_note_by_id(self, note_id: int) -> Optional[NoteRecord]:
        return self._notes.get_by_id(note_id)

    def note_exists(self, note_id: int) -> bool:
        return self._notes.exists(note_id)

    def get_note_visibility(self, note_id: int) -> bool:
        return self._settings.is_public(note_id)

    def get_view(self, note: NoteRecord) -> NoteView:
        return NoteView(
            id=note.id,
            public_id=note.public_id,
            creator_id=note.creator_id,
            is_public=self.get_note_visibility(note.id),
        )

    def resolve(self, public_id: str) -> NoteView:
        note = self._notes.get_by_public_id(public_id)
        if note is None:
            raise NoteNotFound(f"Note {public_id} not found")
        return self.get_view(note)

    def get_note_by_hostname(self, hostname: str) -> Optional[NoteRecord]:
        settings = self._backend.settings.get_by_hostname(hostname)
        if settings is None:
            return None
        return self._notes.get_by_id(settings.note_id)

    def delete_note(self, note_id: int) -> bool:
        """Delete a note, orphaning its children and dropping its team."""
        with self._backend.transaction():
            self._hierarchy.remove_all_edges_touching(note_id)
            self._team.remove_all(note_id)
            self._backend.settings.delete(note_id)
            deleted = self._notes.delete(note_id)

        if deleted:
            log.info(f"Note deleted: note_id={note_id}")
        return deleted
