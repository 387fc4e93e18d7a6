"""Per-note settings: visibility, custom hostname and the invitation hash."""

import logging

from ..config import Config
from ..entities import NoteSettings
from ..errors import NoteNotFound
from ..schemas import NoteSettingsPatch
from ..security.crypto import create_invitation_hash
from ..storage.base import NoteSettingsStorage

log = logging.getLogger(__name__)


class NoteSettingsService:
    def __init__(self, storage: NoteSettingsStorage):
        self._storage = storage

    def create(self, note_id: int, is_public: bool | None = None) -> NoteSettings:
        """Settings row for a freshly created note, with its first invitation hash."""
        if is_public is None:
            is_public = Config.NOTES_PUBLIC_BY_DEFAULT
        return self._storage.create(note_id, is_public, create_invitation_hash())

    def get_by_note_id(self, note_id: int) -> NoteSettings:
        settings = self._storage.get_by_note_id(note_id)
        if settings is None:
            raise NoteNotFound(f"Settings for note {note_id} not found")
        return settings

    def is_public(self, note_id: int) -> bool:
        return self.get_by_note_id(note_id).is_public

    def patch(self, note_id: int, data: NoteSettingsPatch) -> NoteSettings:
        changes = data.model_dump(exclude_unset=True)
        updated = self._storage.update(note_id, changes)
        if updated is None:
            raise NoteNotFound(f"Settings for note {note_id} not found")

        log.info(f"Note settings updated: note_id={note_id} fields={sorted(changes)}")
        return updated
