import logging
import uuid

from flask import Flask, g, jsonify, request
from pydantic import ValidationError

from . import db
from .config import Config
from .errors import HTTP_STATUS, NoteServiceError
from .routes import api_bp
from .storage.base import StorageBackend

logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


def create_app(backend: StorageBackend | None = None):
    app = Flask(__name__)
    app.secret_key = Config.SECRET_KEY
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"

    # Storage lifecycle
    db.init_app(app, backend)

    @app.before_request
    def set_request_context():
        g.request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        # Create tables on first request (idempotent)
        try:
            db.prepare_schema()
        except Exception as e:
            log.warning(f"Could not prepare schema: {e}")

    @app.after_request
    def add_request_id_header(response):
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response

    app.register_blueprint(api_bp)  # /api/*

    @app.errorhandler(NoteServiceError)
    def note_service_error(e: NoteServiceError):
        status = HTTP_STATUS.get(e.code, 400)
        return jsonify({"error": {"code": e.code, "message": e.message}}), status

    @app.errorhandler(ValidationError)
    def validation_error(e: ValidationError):
        return jsonify(
            {
                "error": {
                    "code": "validation_failed",
                    "message": "validation failed",
                    "details": e.errors(include_context=False, include_url=False),
                }
            }
        ), 400

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": {"code": "bad_request", "message": "bad request"}}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": {"code": "not_found", "message": "not found"}}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify(
            {"error": {"code": "method_not_allowed", "message": "method not allowed"}}
        ), 405

    @app.errorhandler(500)
    def internal_error(e):
        log.exception("Internal server error")
        return jsonify(
            {"error": {"code": "internal_error", "message": "internal server error"}}
        ), 500

    return app
