"""Domain error kinds raised by the hierarchy, team and invitation services.

All of them are recoverable, caller-facing conditions. Store connectivity failures
are never wrapped here; they propagate as the driver raised them.
"""


class NoteServiceError(Exception):
    code = "note_service_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidRelation(NoteServiceError):
    """Self-parenting, or the parent (or child) note does not exist."""

    code = "invalid_relation"


class CycleDetected(NoteServiceError):
    """The edge would create a cycle, or a walk ran into an existing one."""

    code = "cycle_detected"


class AlreadyMember(NoteServiceError):
    code = "already_member"


class NotAMember(NoteServiceError):
    code = "not_a_member"


class InvitationNotFound(NoteServiceError):
    code = "invitation_not_found"


class NoteNotFound(NoteServiceError):
    code = "note_not_found"


class PermissionDenied(NoteServiceError):
    code = "permission_denied"


class HostnameTaken(NoteServiceError):
    """Another note already serves this custom hostname."""

    code = "hostname_taken"


# Status codes used by the HTTP boundary
HTTP_STATUS = {
    InvalidRelation.code: 400,
    CycleDetected.code: 409,
    AlreadyMember.code: 409,
    NotAMember.code: 404,
    InvitationNotFound.code: 404,
    NoteNotFound.code: 404,
    PermissionDenied.code: 403,
    HostnameTaken.code: 409,
}
