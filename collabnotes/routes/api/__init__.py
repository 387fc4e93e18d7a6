"""API routes - all prefixed with /api."""

from flask import Blueprint

from . import health, join, notes, team

api_bp = Blueprint("api", __name__, url_prefix="/api")
api_bp.register_blueprint(health.bp)
api_bp.register_blueprint(notes.bp)
api_bp.register_blueprint(team.bp)
api_bp.register_blueprint(join.bp)

__all__ = ["api_bp"]
