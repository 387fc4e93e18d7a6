"""Team registry: one (note, user, role) row per collaborator."""

import logging
from typing import Optional

from ..entities import MemberRole, TeamMember
from ..errors import AlreadyMember
from ..storage.base import TeamStorage

log = logging.getLogger(__name__)


class TeamRegistry:
    def __init__(self, storage: TeamStorage):
        self._storage = storage

    def create(self, note_id: int, user_id: int, role: MemberRole) -> TeamMember:
        """Add a member. The storage insert is the uniqueness check, so two
        concurrent calls for the same pair yield one row and one AlreadyMember."""
        member = self._storage.insert(note_id, user_id, MemberRole(role))
        if member is None:
            log.warning(
                f"Duplicate team member rejected: note_id={note_id} user_id={user_id}"
            )
            raise AlreadyMember(f"User {user_id} is already a member of note {note_id}")

        log.info(
            f"Team member added: note_id={note_id} user_id={user_id} role={member.role.value}"
        )
        return member

    def get_role(self, user_id: int, note_id: int) -> Optional[MemberRole]:
        member = self._storage.get(note_id, user_id)
        return member.role if member else None

    def list_by_note(self, note_id: int) -> list[TeamMember]:
        return self._storage.list_by_note(note_id)

    def patch_role(
        self, user_id: int, note_id: int, new_role: MemberRole
    ) -> Optional[MemberRole]:
        member = self._storage.update_role(note_id, user_id, MemberRole(new_role))
        if member is None:
            return None

        log.info(
            f"Team member role changed: note_id={note_id} user_id={user_id} role={member.role.value}"
        )
        return member.role

    def remove_by_id(self, member_id: int) -> bool:
        removed = self._storage.delete_by_id(member_id)
        if removed:
            log.info(f"Team member removed: member_id={member_id}")
        return removed

    def remove_all(self, note_id: int) -> int:
        """Drop the whole team, used when the note itself is deleted."""
        return self._storage.delete_by_note(note_id)
