import logging

from flask import Blueprint, current_app, jsonify

from ...db import EXTENSION_KEY, get_db

bp = Blueprint("api_health", __name__)
log = logging.getLogger(__name__)


@bp.get("/health")
def health():
    if current_app.extensions.get(EXTENSION_KEY) is not None:
        return jsonify({"status": "healthy", "storage": "memory"})

    try:
        with get_db().cursor() as cur:
            cur.execute("SELECT count(*) FROM notes")
            note_count = cur.fetchone()[0]
        return jsonify(
            {
                "status": "healthy",
                "storage": "postgres",
                "database": "connected",
                "notes": note_count,
            }
        )
    except Exception:
        log.exception("Health check failed")
        return jsonify({"status": "unhealthy", "database": "disconnected"}), 503
