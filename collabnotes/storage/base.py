"""Storage contracts.

Services only talk to these interfaces, so the hierarchy walk and the membership
rules work the same way over Postgres and over the in-process store.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional

from ..entities import MemberRole, NoteRecord, NoteSettings, TeamMember


class NoteStorage(ABC):
    @abstractmethod
    def create(self, public_id: str, creator_id: int) -> NoteRecord: ...

    @abstractmethod
    def get_by_id(self, note_id: int) -> Optional[NoteRecord]: ...

    @abstractmethod
    def get_by_public_id(self, public_id: str) -> Optional[NoteRecord]: ...

    @abstractmethod
    def delete(self, note_id: int) -> bool: ...

    def exists(self, note_id: int) -> bool:
        return self.get_by_id(note_id) is not None


class HierarchyStorage(ABC):
    """Edges keyed by child id: at most one parent per note."""

    @abstractmethod
    def get_parent(self, note_id: int) -> Optional[int]: ...

    @abstractmethod
    def set_parent(self, note_id: int, parent_id: int) -> None:
        """Insert the edge, or replace the parent if the note already has one."""

    @abstractmethod
    def delete_parent(self, note_id: int) -> bool: ...

    @abstractmethod
    def delete_touching(self, note_id: int) -> int:
        """Delete edges where the note is either child or parent. Returns the count."""

    @abstractmethod
    def list_children(self, note_id: int) -> list[int]: ...

    @abstractmethod
    def has_relation(self, note_id: int) -> bool: ...


class TeamStorage(ABC):
    @abstractmethod
    def insert(
        self, note_id: int, user_id: int, role: MemberRole
    ) -> Optional[TeamMember]:
        """Insert a member; None if the (note, user) pair already exists."""

    @abstractmethod
    def get(self, note_id: int, user_id: int) -> Optional[TeamMember]: ...

    @abstractmethod
    def list_by_note(self, note_id: int) -> list[TeamMember]: ...

    @abstractmethod
    def update_role(
        self, note_id: int, user_id: int, role: MemberRole
    ) -> Optional[TeamMember]: ...

    @abstractmethod
    def delete_by_id(self, member_id: int) -> bool: ...

    @abstractmethod
    def delete_by_note(self, note_id: int) -> int: ...


class NoteSettingsStorage(ABC):
    @abstractmethod
    def create(
        self, note_id: int, is_public: bool, invitation_hash: str
    ) -> NoteSettings: ...

    @abstractmethod
    def get_by_note_id(self, note_id: int) -> Optional[NoteSettings]: ...

    @abstractmethod
    def get_by_invitation_hash(self, invitation_hash: str) -> Optional[NoteSettings]: ...

    @abstractmethod
    def get_by_hostname(self, hostname: str) -> Optional[NoteSettings]: ...

    @abstractmethod
    def update(self, note_id: int, changes: dict) -> Optional[NoteSettings]:
        """Apply a subset of {custom_hostname, is_public, invitation_hash}."""

    @abstractmethod
    def delete(self, note_id: int) -> bool: ...


class StorageBackend(ABC):
    notes: NoteStorage
    hierarchy: HierarchyStorage
    team: TeamStorage
    settings: NoteSettingsStorage

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """All-or-nothing block over several storage calls."""

    @abstractmethod
    def hierarchy_lock(self) -> AbstractContextManager:
        """Transaction that also serializes every other hierarchy write.

        Cycle checks and the edge write must happen inside the same lock, otherwise
        two concurrent reparents can both pass the check and jointly form a cycle.
        """
