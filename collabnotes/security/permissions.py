"""Read/write decisions for a user on a note.

Nothing is cached: every call looks the role up in the team registry so that a
role change or removal is visible to the very next request.
"""

from typing import TYPE_CHECKING, Optional

from ..entities import AccessDecision, MemberRole, NoteView

if TYPE_CHECKING:
    from ..services.team import TeamRegistry


class AccessDecisionEngine:
    def __init__(self, team: "TeamRegistry"):
        self._team = team

    def resolve_role(self, user_id: Optional[int], note_id: int) -> Optional[MemberRole]:
        """Explicit team role, or None. Anonymous callers never have one."""
        if user_id is None:
            return None
        return self._team.get_role(user_id, note_id)

    def can_read(self, user_id: Optional[int], note: NoteView) -> bool:
        if note.is_public:
            return True
        if user_id is None:
            return False
        if user_id == note.creator_id:
            return True
        return self.resolve_role(user_id, note.id) is not None

    def can_edit(self, user_id: Optional[int], note: NoteView) -> bool:
        # Public visibility never grants write access
        if user_id is None:
            return False
        if user_id == note.creator_id:
            return True
        return self.resolve_role(user_id, note.id) == MemberRole.WRITE

    def decide(self, user_id: Optional[int], note: NoteView) -> AccessDecision:
        """Both permissions with a single role lookup."""
        if user_id is not None and user_id == note.creator_id:
            return AccessDecision(can_read=True, can_edit=True)

        role = self.resolve_role(user_id, note.id)
        return AccessDecision(
            can_read=note.is_public or role is not None,
            can_edit=role == MemberRole.WRITE,
        )
