"""Integration tests for the Postgres backend.

Skipped unless COLLABNOTES_TEST_DATABASE_URL points at a disposable database.
"""

import os
import threading

import pytest

from collabnotes.entities import MemberRole
from collabnotes.errors import (
    AlreadyMember,
    CycleDetected,
    HostnameTaken,
    InvitationNotFound,
)
from collabnotes.migrations import ensure_schema
from collabnotes.schemas import NoteSettingsPatch
from collabnotes.services import (
    AncestryResolver,
    HierarchyStore,
    InvitationFlow,
    NoteDirectory,
    NoteSettingsService,
    TeamRegistry,
)

DATABASE_URL = os.environ.get("COLLABNOTES_TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(
    not DATABASE_URL, reason="COLLABNOTES_TEST_DATABASE_URL not set"
)


def _connect():
    import psycopg

    return psycopg.connect(DATABASE_URL, autocommit=True)


def _services(conn):
    from collabnotes.storage.postgres import PostgresBackend

    backend = PostgresBackend(conn)
    team = TeamRegistry(backend.team)
    hierarchy = HierarchyStore(backend)
    notes = NoteDirectory(
        backend, NoteSettingsService(backend.settings), hierarchy, team
    )
    return backend, hierarchy, team, notes


@pytest.fixture()
def conn():
    conn = _connect()
    ensure_schema(conn)
    with conn.cursor() as cur:
        cur.execute(
            "TRUNCATE note_teams, note_relations, note_settings, notes RESTART IDENTITY"
        )
    yield conn
    conn.close()


def test_hierarchy_round_trip(conn):
    backend, hierarchy, _, notes = _services(conn)
    a, b, c = (notes.create_note(1, is_public=False).id for _ in range(3))
    hierarchy.attach(a, b)
    hierarchy.attach(b, c)

    ancestry = AncestryResolver(backend.hierarchy)
    assert ancestry.get_ancestor_chain(a) == [c, b]
    assert ancestry.get_ultimate_root(a) == c
    with pytest.raises(CycleDetected):
        hierarchy.reparent(c, a)

    hierarchy.remove_all_edges_touching(b)
    assert ancestry.get_parent(a) is None
    assert ancestry.get_parent(b) is None


def test_concurrent_opposite_moves(conn):
    _, _, _, notes = _services(conn)
    a, b = notes.create_note(1).id, notes.create_note(1).id
    barrier = threading.Barrier(2)
    outcomes = []

    def move(child, parent):
        worker = _connect()
        try:
            _, store, _, _ = _services(worker)
            barrier.wait()
            store.reparent(child, parent)
            outcomes.append("ok")
        except CycleDetected:
            outcomes.append("cycle")
        finally:
            worker.close()

    threads = [
        threading.Thread(target=move, args=(a, b)),
        threading.Thread(target=move, args=(b, a)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["cycle", "ok"]


def test_concurrent_team_inserts(conn):
    _, _, _, notes = _services(conn)
    note = notes.create_note(1).id
    barrier = threading.Barrier(4)
    results = []

    def join():
        worker = _connect()
        try:
            _, _, team, _ = _services(worker)
            barrier.wait()
            team.create(note, 7, MemberRole.READ)
            results.append("created")
        except AlreadyMember:
            results.append("duplicate")
        finally:
            worker.close()

    threads = [threading.Thread(target=join) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == ["created", "duplicate", "duplicate", "duplicate"]


def test_invitation_regeneration(conn):
    backend, _, team, notes = _services(conn)
    note = notes.create_note(1).id
    flow = InvitationFlow(backend, team)
    old_hash = backend.settings.get_by_note_id(note).invitation_hash

    new_hash = flow.regenerate(note).invitation_hash

    with pytest.raises(InvitationNotFound):
        flow.redeem(old_hash, 9)
    assert flow.redeem(new_hash, 9).role == MemberRole.READ


def test_duplicate_hostname(conn):
    backend, _, _, notes = _services(conn)
    settings = NoteSettingsService(backend.settings)
    first, second = notes.create_note(1).id, notes.create_note(1).id
    settings.patch(first, NoteSettingsPatch(custom_hostname="docs.example.com"))

    with conn.transaction():
        with pytest.raises(HostnameTaken):
            settings.patch(second, NoteSettingsPatch(custom_hostname="docs.example.com"))
        # The enclosing transaction is still usable after the conflict
        assert settings.get_by_note_id(second).custom_hostname is None
