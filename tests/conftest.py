import pytest

from collabnotes import create_app
from collabnotes.security import AccessDecisionEngine
from collabnotes.services import (
    AncestryResolver,
    HierarchyStore,
    InvitationFlow,
    NoteDirectory,
    NoteSettingsService,
    TeamRegistry,
)
from collabnotes.storage import MemoryBackend

OWNER = 1
OTHER = 2


@pytest.fixture()
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture()
def ancestry(backend) -> AncestryResolver:
    return AncestryResolver(backend.hierarchy)


@pytest.fixture()
def hierarchy(backend, ancestry) -> HierarchyStore:
    return HierarchyStore(backend, ancestry)


@pytest.fixture()
def team(backend) -> TeamRegistry:
    return TeamRegistry(backend.team)


@pytest.fixture()
def note_settings(backend) -> NoteSettingsService:
    return NoteSettingsService(backend.settings)


@pytest.fixture()
def invitations(backend, team) -> InvitationFlow:
    return InvitationFlow(backend, team)


@pytest.fixture()
def access(team) -> AccessDecisionEngine:
    return AccessDecisionEngine(team)


@pytest.fixture()
def notes(backend, note_settings, hierarchy, team) -> NoteDirectory:
    return NoteDirectory(backend, note_settings, hierarchy, team)


@pytest.fixture()
def make_note(notes):
    """Create a private note owned by OWNER unless told otherwise; returns its id."""

    def _make(creator_id: int = OWNER, parent_id: int | None = None, is_public=False):
        return notes.create_note(creator_id, parent_id, is_public).id

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture()
def app(backend):
    app = create_app(backend)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login(client):
    def _login(user_id: int | None) -> None:
        with client.session_transaction() as sess:
            if user_id is None:
                sess.pop("user_id", None)
            else:
                sess["user_id"] = user_id

    return _login
