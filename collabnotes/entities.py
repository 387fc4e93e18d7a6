"""Plain data records passed between storage, services and the HTTP layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MemberRole(str, Enum):
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class NoteRecord:
    id: int
    public_id: str
    creator_id: int


@dataclass(frozen=True)
class NoteView:
    """A note together with its visibility flag, as access decisions need it."""

    id: int
    public_id: str
    creator_id: int
    is_public: bool


@dataclass(frozen=True)
class HierarchyEdge:
    note_id: int
    parent_id: int


@dataclass(frozen=True)
class TeamMember:
    id: int
    note_id: int
    user_id: int
    role: MemberRole

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "note_id": self.note_id,
            "user_id": self.user_id,
            "role": self.role.value,
        }


@dataclass(frozen=True)
class NoteSettings:
    id: int
    note_id: int
    is_public: bool
    invitation_hash: str
    custom_hostname: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "note_id": self.note_id,
            "custom_hostname": self.custom_hostname,
            "is_public": self.is_public,
            "invitation_hash": self.invitation_hash,
        }


@dataclass(frozen=True)
class AccessDecision:
    can_read: bool
    can_edit: bool
