import logging

from flask import current_app, g
from psycopg_pool import ConnectionPool

from .config import Config
from .migrations import ensure_schema
from .security.permissions import AccessDecisionEngine
from .services import (
    AncestryResolver,
    HierarchyStore,
    InvitationFlow,
    NoteDirectory,
    NoteSettingsService,
    TeamRegistry,
)
from .storage.base import StorageBackend
from .storage.memory import MemoryBackend
from .storage.postgres import PostgresBackend

log = logging.getLogger(__name__)

# Connection pool - shared across requests
_pool: ConnectionPool | None = None
_schema_ready = False

EXTENSION_KEY = "collabnotes.backend"


def get_pool() -> ConnectionPool:
    global _pool
    if _pool is None:
        _pool = ConnectionPool(
            Config.DATABASE_URL,
            min_size=Config.POOL_MIN_SIZE,
            max_size=Config.POOL_MAX_SIZE,
            kwargs={"autocommit": True},  # Services open transactions explicitly
        )
    return _pool


def get_db():
    """Get a database connection for the current request."""
    if "db" not in g:
        g.db = get_pool().getconn()
    return g.db


def prepare_schema() -> None:
    """Create tables on first use. Idempotent."""
    global _schema_ready
    if _schema_ready or current_app.extensions.get(EXTENSION_KEY) is not None:
        return
    ensure_schema(get_db())
    _schema_ready = True


def get_backend() -> StorageBackend:
    """Storage for the current request.

    An explicit backend registered on the app (the in-memory store) wins;
    otherwise a Postgres backend bound to this request's pooled connection.
    """
    if "backend" not in g:
        backend = current_app.extensions.get(EXTENSION_KEY)
        g.backend = backend if backend is not None else PostgresBackend(get_db())
    return g.backend


def get_ancestry() -> AncestryResolver:
    if "ancestry" not in g:
        g.ancestry = AncestryResolver(get_backend().hierarchy)
    return g.ancestry


def get_hierarchy() -> HierarchyStore:
    if "hierarchy" not in g:
        g.hierarchy = HierarchyStore(get_backend(), get_ancestry())
    return g.hierarchy


def get_team() -> TeamRegistry:
    if "team" not in g:
        g.team = TeamRegistry(get_backend().team)
    return g.team


def get_access() -> AccessDecisionEngine:
    if "access" not in g:
        g.access = AccessDecisionEngine(get_team())
    return g.access


def get_note_settings() -> NoteSettingsService:
    if "note_settings" not in g:
        g.note_settings = NoteSettingsService(get_backend().settings)
    return g.note_settings


def get_invitations() -> InvitationFlow:
    if "invitations" not in g:
        g.invitations = InvitationFlow(get_backend(), get_team())
    return g.invitations


def get_notes() -> NoteDirectory:
    if "notes" not in g:
        g.notes = NoteDirectory(
            get_backend(), get_note_settings(), get_hierarchy(), get_team()
        )
    return g.notes


def close_db(exc=None):
    """Return connection to pool at end of request."""
    db = g.pop("db", None)
    if db is not None:
        get_pool().putconn(db)


def init_app(app, backend: StorageBackend | None = None):
    if backend is None and Config.STORAGE_BACKEND == "memory":
        backend = MemoryBackend()
    app.extensions[EXTENSION_KEY] = backend
    app.teardown_appcontext(close_db)
