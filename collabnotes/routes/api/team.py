"""Team and settings API - collaborators, visibility, invitation hash."""

import logging

from flask import Blueprint, jsonify

from ...db import get_invitations, get_note_settings, get_team
from ...entities import MemberRole
from ...errors import NotAMember
from ...schemas import NoteSettingsPatch, TeamMemberCreate, TeamMemberPatch, validate
from ...security import RequestContext, authenticated
from .notes import load_note

bp = Blueprint("api_team", __name__, url_prefix="/notes/<public_id>")
log = logging.getLogger(__name__)


@bp.get("/settings")
@authenticated
def get_settings(ctx: RequestContext, public_id: str):
    note, _ = load_note(ctx, public_id, edit=True)
    return jsonify(get_note_settings().get_by_note_id(note.id).to_dict())


@bp.patch("/settings")
@authenticated
def patch_settings(ctx: RequestContext, public_id: str):
    data = validate(NoteSettingsPatch)
    note, _ = load_note(ctx, public_id, edit=True)
    return jsonify(get_note_settings().patch(note.id, data).to_dict())


@bp.post("/invitation-hash")
@authenticated
def regenerate_invitation_hash(ctx: RequestContext, public_id: str):
    """Issue a new invitation hash. The old one stops working."""
    note, _ = load_note(ctx, public_id, edit=True)
    settings = get_invitations().regenerate(note.id)
    return jsonify({"invitation_hash": settings.invitation_hash})


@bp.get("/team")
@authenticated
def list_team(ctx: RequestContext, public_id: str):
    note, _ = load_note(ctx, public_id, edit=True)
    members = get_team().list_by_note(note.id)
    return jsonify({"team": [m.to_dict() for m in members]})


@bp.post("/team")
@authenticated
def add_member(ctx: RequestContext, public_id: str):
    data = validate(TeamMemberCreate)
    note, _ = load_note(ctx, public_id, edit=True)
    member = get_team().create(note.id, data.user_id, MemberRole(data.role))
    return jsonify(member.to_dict()), 201


@bp.patch("/team")
@authenticated
def patch_member(ctx: RequestContext, public_id: str):
    data = validate(TeamMemberPatch)
    note, _ = load_note(ctx, public_id, edit=True)
    team = get_team()

    if data.role is None:
        role = team.get_role(data.user_id, note.id)
    else:
        role = team.patch_role(data.user_id, note.id, MemberRole(data.role))
    if role is None:
        raise NotAMember(f"User {data.user_id} is not a member of this note")

    return jsonify({"user_id": data.user_id, "role": role.value})


@bp.delete("/team/<int:member_id>")
@authenticated
def remove_member(ctx: RequestContext, public_id: str, member_id: int):
    note, _ = load_note(ctx, public_id, edit=True)
    team = get_team()

    # Only rows belonging to this note may be removed through it
    if not any(m.id == member_id for m in team.list_by_note(note.id)):
        raise NotAMember(f"Team member {member_id} not found")
    team.remove_by_id(member_id)
    return jsonify({"ok": True})
