"""In-process storage backend.

Every table shares one re-entrant lock, so a ``transaction()`` block is serialized
against all other calls and rolls every table back if the block raises.
"""

import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Optional

from ..entities import MemberRole, NoteRecord, NoteSettings, TeamMember
from ..errors import HostnameTaken
from .base import (
    HierarchyStorage,
    NoteSettingsStorage,
    NoteStorage,
    StorageBackend,
    TeamStorage,
)


class MemoryNoteStorage(NoteStorage):
    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._ids = itertools.count(1)
        self._rows: dict[int, NoteRecord] = {}

    def create(self, public_id: str, creator_id: int) -> NoteRecord:
        with self._lock:
            if any(n.public_id == public_id for n in self._rows.values()):
                raise ValueError(f"public_id already taken: {public_id}")
            note = NoteRecord(id=next(self._ids), public_id=public_id, creator_id=creator_id)
            self._rows[note.id] = note
            return note

    def get_by_id(self, note_id: int) -> Optional[NoteRecord]:
        with self._lock:
            return self._rows.get(note_id)

    def get_by_public_id(self, public_id: str) -> Optional[NoteRecord]:
        with self._lock:
            return next(
                (n for n in self._rows.values() if n.public_id == public_id), None
            )

    def delete(self, note_id: int) -> bool:
        with self._lock:
            return self._rows.pop(note_id, None) is not None


class MemoryHierarchyStorage(HierarchyStorage):
    def __init__(self, lock: threading.RLock):
        self._lock = lock
        # child id -> parent id
        self._parents: dict[int, int] = {}

    def get_parent(self, note_id: int) -> Optional[int]:
        with self._lock:
            return self._parents.get(note_id)

    def set_parent(self, note_id: int, parent_id: int) -> None:
        with self._lock:
            self._parents[note_id] = parent_id

    def delete_parent(self, note_id: int) -> bool:
        with self._lock:
            return self._parents.pop(note_id, None) is not None

    def delete_touching(self, note_id: int) -> int:
        with self._lock:
            doomed = [
                child
                for child, parent in self._parents.items()
                if child == note_id or parent == note_id
            ]
            for child in doomed:
                del self._parents[child]
            return len(doomed)

    def list_children(self, note_id: int) -> list[int]:
        with self._lock:
            return sorted(c for c, p in self._parents.items() if p == note_id)

    def has_relation(self, note_id: int) -> bool:
        with self._lock:
            return note_id in self._parents or note_id in self._parents.values()


class MemoryTeamStorage(TeamStorage):
    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._ids = itertools.count(1)
        self._rows: dict[int, TeamMember] = {}

    def _find(self, note_id: int, user_id: int) -> Optional[TeamMember]:
        return next(
            (
                m
                for m in self._rows.values()
                if m.note_id == note_id and m.user_id == user_id
            ),
            None,
        )

    def insert(
        self, note_id: int, user_id: int, role: MemberRole
    ) -> Optional[TeamMember]:
        with self._lock:
            if self._find(note_id, user_id) is not None:
                return None
            member = TeamMember(
                id=next(self._ids), note_id=note_id, user_id=user_id, role=role
            )
            self._rows[member.id] = member
            return member

    def get(self, note_id: int, user_id: int) -> Optional[TeamMember]:
        with self._lock:
            return self._find(note_id, user_id)

    def list_by_note(self, note_id: int) -> list[TeamMember]:
        with self._lock:
            return [m for m in self._rows.values() if m.note_id == note_id]

    def update_role(
        self, note_id: int, user_id: int, role: MemberRole
    ) -> Optional[TeamMember]:
        with self._lock:
            member = self._find(note_id, user_id)
            if member is None:
                return None
            updated = replace(member, role=role)
            self._rows[member.id] = updated
            return updated

    def delete_by_id(self, member_id: int) -> bool:
        with self._lock:
            return self._rows.pop(member_id, None) is not None

    def delete_by_note(self, note_id: int) -> int:
        with self._lock:
            doomed = [m.id for m in self._rows.values() if m.note_id == note_id]
            for member_id in doomed:
                del self._rows[member_id]
            return len(doomed)


class MemoryNoteSettingsStorage(NoteSettingsStorage):
    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._ids = itertools.count(1)
        # note id -> settings
        self._rows: dict[int, NoteSettings] = {}

    def _check_unique(self, note_id: int, field: str, value) -> None:
        if value is None:
            return
        for other in self._rows.values():
            if other.note_id != note_id and getattr(other, field) == value:
                if field == "custom_hostname":
                    raise HostnameTaken(f"Hostname {value} is already in use")
                raise ValueError(f"{field} already taken")

    def create(
        self, note_id: int, is_public: bool, invitation_hash: str
    ) -> NoteSettings:
        with self._lock:
            if note_id in self._rows:
                raise ValueError(f"settings already exist for note {note_id}")
            self._check_unique(note_id, "invitation_hash", invitation_hash)
            settings = NoteSettings(
                id=next(self._ids),
                note_id=note_id,
                is_public=is_public,
                invitation_hash=invitation_hash,
            )
            self._rows[note_id] = settings
            return settings

    def get_by_note_id(self, note_id: int) -> Optional[NoteSettings]:
        with self._lock:
            return self._rows.get(note_id)

    def get_by_invitation_hash(self, invitation_hash: str) -> Optional[NoteSettings]:
        with self._lock:
            return next(
                (s for s in self._rows.values() if s.invitation_hash == invitation_hash),
                None,
            )

    def get_by_hostname(self, hostname: str) -> Optional[NoteSettings]:
        with self._lock:
            return next(
                (s for s in self._rows.values() if s.custom_hostname == hostname),
                None,
            )

    def update(self, note_id: int, changes: dict) -> Optional[NoteSettings]:
        with self._lock:
            settings = self._rows.get(note_id)
            if settings is None:
                return None
            for field in ("custom_hostname", "invitation_hash"):
                if field in changes:
                    self._check_unique(note_id, field, changes[field])
            updated = replace(settings, **changes)
            self._rows[note_id] = updated
            return updated

    def delete(self, note_id: int) -> bool:
        with self._lock:
            return self._rows.pop(note_id, None) is not None


class MemoryBackend(StorageBackend):
    def __init__(self):
        self._lock = threading.RLock()
        self.notes = MemoryNoteStorage(self._lock)
        self.hierarchy = MemoryHierarchyStorage(self._lock)
        self.team = MemoryTeamStorage(self._lock)
        self.settings = MemoryNoteSettingsStorage(self._lock)

    def _tables(self) -> list[dict]:
        return [
            self.notes._rows,
            self.hierarchy._parents,
            self.team._rows,
            self.settings._rows,
        ]

    @contextmanager
    def transaction(self):
        """Serialize on the shared lock; restore every table if the block raises."""
        with self._lock:
            snapshot = [dict(table) for table in self._tables()]
            try:
                yield
            except BaseException:
                for table, saved in zip(self._tables(), snapshot):
                    table.clear()
                    table.update(saved)
                raise

    def hierarchy_lock(self):
        return self.transaction()
