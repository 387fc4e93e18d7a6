from .ancestry import AncestryResolver
from .hierarchy import HierarchyStore
from .invitations import InvitationFlow
from .note_settings import NoteSettingsService
from .notes import NoteDirectory
from .team import TeamRegistry

__all__ = [
    "AncestryResolver",
    "HierarchyStore",
    "TeamRegistry",
    "InvitationFlow",
    "NoteSettingsService",
    "NoteDirectory",
]
