"""Notes API - hierarchy reads and moves, guarded by access decisions."""

import logging

from flask import Blueprint, jsonify, request

from ...db import get_access, get_ancestry, get_hierarchy, get_notes
from ...entities import AccessDecision, NoteView
from ...errors import NoteNotFound, PermissionDenied
from ...schemas import NoteCreateRequest, ParentRequest, validate
from ...security import RequestContext, authenticated

bp = Blueprint("api_notes", __name__, url_prefix="/notes")
log = logging.getLogger(__name__)


def load_note(
    ctx: RequestContext, public_id: str, *, edit: bool = False
) -> tuple[NoteView, AccessDecision]:
    """Resolve a public id and enforce access.

    Unreadable notes look exactly like missing ones to prevent id enumeration.
    """
    note = get_notes().resolve(public_id)
    decision = get_access().decide(ctx.user_id, note)
    if not decision.can_read:
        raise NoteNotFound(f"Note {public_id} not found")
    if edit and not decision.can_edit:
        raise PermissionDenied("You don't have permission to edit this note")
    return note, decision


def public_ids(note_ids: list[int]) -> list[str]:
    notes = get_notes()
    result = []
    for note_id in note_ids:
        note = notes.get_note_by_id(note_id)
        if note is not None:
            result.append(note.public_id)
    return result


def note_payload(note: NoteView, decision: AccessDecision) -> dict:
    parent_id = get_ancestry().get_parent(note.id)
    parent = public_ids([parent_id]) if parent_id is not None else []
    return {
        "note": {
            "id": note.public_id,
            "creator_id": note.creator_id,
            "is_public": note.is_public,
        },
        "parent_note": parent[0] if parent else None,
        "access_rights": {
            "can_read": decision.can_read,
            "can_edit": decision.can_edit,
        },
    }


@bp.post("")
@authenticated
def create_note(ctx: RequestContext):
    """Create a note, optionally nested under a parent the caller can edit."""
    data = NoteCreateRequest.model_validate(request.get_json(silent=True) or {})

    parent_id = None
    if data.parent_id is not None:
        parent, _ = load_note(ctx, data.parent_id, edit=True)
        parent_id = parent.id

    note = get_notes().create_note(ctx.user_id, parent_id, data.is_public)
    return jsonify({"id": note.public_id}), 201


@bp.get("/<public_id>")
@authenticated(optional=True)
def get_note(ctx: RequestContext, public_id: str):
    note, decision = load_note(ctx, public_id)
    return jsonify(note_payload(note, decision))


@bp.get("/resolve-hostname/<hostname>")
@authenticated(optional=True)
def resolve_hostname(ctx: RequestContext, hostname: str):
    record = get_notes().get_note_by_hostname(hostname)
    if record is None:
        raise NoteNotFound(f"No note for hostname {hostname}")
    note, decision = load_note(ctx, record.public_id)
    return jsonify(note_payload(note, decision))


@bp.delete("/<public_id>")
@authenticated
def delete_note(ctx: RequestContext, public_id: str):
    """Delete a note (creator only). Its children become roots."""
    note, _ = load_note(ctx, public_id)
    if note.creator_id != ctx.user_id:
        raise PermissionDenied("Only the creator can delete a note")

    is_deleted = get_notes().delete_note(note.id)
    return jsonify({"is_deleted": is_deleted})


@bp.get("/<public_id>/parents")
@authenticated(optional=True)
def list_parents(ctx: RequestContext, public_id: str):
    """Ancestors from the root down to the immediate parent."""
    note, _ = load_note(ctx, public_id)
    chain = get_ancestry().get_ancestor_chain(note.id)
    return jsonify({"parents": public_ids(chain)})


@bp.get("/<public_id>/root")
@authenticated(optional=True)
def get_root(ctx: RequestContext, public_id: str):
    note, _ = load_note(ctx, public_id)
    root_id = get_ancestry().get_ultimate_root(note.id)
    root = public_ids([root_id]) if root_id is not None else []
    return jsonify({"root": root[0] if root else None})


@bp.put("/<public_id>/parent")
@authenticated
def set_parent(ctx: RequestContext, public_id: str):
    """Attach or move a note under a new parent. Both notes must be editable."""
    data = validate(ParentRequest)
    note, _ = load_note(ctx, public_id, edit=True)
    parent, _ = load_note(ctx, data.parent_id, edit=True)

    get_hierarchy().reparent(note.id, parent.id)
    return jsonify({"ok": True, "parent_note": parent.public_id})


@bp.delete("/<public_id>/parent")
@authenticated
def unlink_parent(ctx: RequestContext, public_id: str):
    note, _ = load_note(ctx, public_id, edit=True)
    get_hierarchy().detach(note.id)
    return jsonify({"ok": True})
