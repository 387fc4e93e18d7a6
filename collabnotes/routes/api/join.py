"""Join API - redeem an invitation hash to become a read member of a note."""

import logging

from flask import Blueprint, jsonify

from ...db import get_invitations
from ...security import RequestContext, authenticated

bp = Blueprint("api_join", __name__, url_prefix="/join")
log = logging.getLogger(__name__)


@bp.post("/<invitation_hash>")
@authenticated
def join(ctx: RequestContext, invitation_hash: str):
    member = get_invitations().redeem(invitation_hash, ctx.user_id)
    return jsonify({"result": member.to_dict()}), 201
