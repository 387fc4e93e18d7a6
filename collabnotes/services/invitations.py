"""Invitation flow: a per-note hash that admits its holder to the note's team.

The hash is not single-use and never expires; regenerating it is the only way to
revoke it. Redeeming as an existing member raises AlreadyMember.
"""

import logging

from ..entities import MemberRole, NoteSettings, TeamMember
from ..errors import InvitationNotFound, NoteNotFound
from ..security.crypto import create_invitation_hash
from ..storage.base import StorageBackend
from .team import TeamRegistry

log = logging.getLogger(__name__)

DEFAULT_ROLE = MemberRole.READ


class InvitationFlow:
    def __init__(self, backend: StorageBackend, team: TeamRegistry):
        self._backend = backend
        self._settings = backend.settings
        self._team = team

    def generate_hash(self) -> str:
        return create_invitation_hash()

    def regenerate(self, note_id: int) -> NoteSettings:
        """Replace the note's hash; the previous one stops working immediately."""
        updated = self._settings.update(
            note_id, {"invitation_hash": self.generate_hash()}
        )
        if updated is None:
            raise NoteNotFound(f"Settings for note {note_id} not found")

        log.info(f"Invitation hash regenerated: note_id={note_id}")
        return updated

    def redeem(self, invitation_hash: str, user_id: int) -> TeamMember:
        with self._backend.transaction():
            settings = self._settings.get_by_invitation_hash(invitation_hash)
            if settings is None:
                log.warning(f"Unknown invitation hash redeemed by user_id={user_id}")
                raise InvitationNotFound("Invitation hash is invalid or was regenerated")

            member = self._team.create(settings.note_id, user_id, DEFAULT_ROLE)

        log.info(f"Invitation redeemed: note_id={settings.note_id} user_id={user_id}")
        return member
