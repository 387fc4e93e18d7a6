"""Unit tests for NoteDirectory."""

import pytest

from collabnotes.entities import MemberRole
from collabnotes.errors import InvalidRelation, NoteNotFound
from collabnotes.schemas import NoteSettingsPatch


class TestNoteDirectory:
    def test_create_with_parent(self, notes, ancestry, make_note):
        parent = make_note()
        child = notes.create_note(1, parent_id=parent, is_public=False)
        assert ancestry.get_parent(child.id) == parent

    def test_create_with_missing_parent_writes_nothing(self, backend, notes):
        with pytest.raises(InvalidRelation):
            notes.create_note(1, parent_id=999)
        assert backend.notes.get_by_id(1) is None

    def test_resolve_includes_visibility(self, notes):
        note = notes.create_note(1, is_public=True)
        view = notes.resolve(note.public_id)
        assert (view.id, view.creator_id, view.is_public) == (note.id, 1, True)

    def test_resolve_unknown(self, notes):
        with pytest.raises(NoteNotFound):
            notes.resolve("missing")

    def test_lookup_by_hostname(self, notes, note_settings, make_note):
        note = make_note()
        note_settings.patch(note, NoteSettingsPatch(custom_hostname="team.example.com"))

        assert notes.get_note_by_hostname("team.example.com").id == note
        assert notes.get_note_by_hostname("other.example.com") is None

    def test_delete_orphans_children_and_drops_team(self, notes, team, ancestry, make_note):
        parent = make_note()
        child = make_note(parent_id=parent)
        team.create(parent, 2, MemberRole.READ)

        assert notes.delete_note(parent) is True

        assert not notes.note_exists(parent)
        assert notes.note_exists(child)
        assert ancestry.get_parent(child) is None
        assert team.list_by_note(parent) == []

    def test_failed_create_rolls_back_note_row(self, backend, notes, note_settings, monkeypatch):
        def broken_create(note_id, is_public=None):
            raise RuntimeError("settings store unavailable")

        monkeypatch.setattr(note_settings, "create", broken_create)

        with pytest.raises(RuntimeError):
            notes.create_note(1)
        assert backend.notes.get_by_id(1) is None


class TestMemoryTransaction:
    def test_restores_all_tables_on_error(self, backend, make_note, team, hierarchy):
        parent, child = make_note(), make_note()

        with pytest.raises(RuntimeError):
            with backend.transaction():
                hierarchy.attach(child, parent)
                team.create(parent, 2, MemberRole.WRITE)
                backend.notes.delete(parent)
                raise RuntimeError("abort")

        assert backend.notes.exists(parent)
        assert backend.hierarchy.get_parent(child) is None
        assert team.get_role(2, parent) is None

    def test_inner_failure_keeps_outer_writes(self, backend, make_note, hierarchy):
        parent, child, other = make_note(), make_note(), make_note()

        with backend.transaction():
            hierarchy.attach(child, parent)
            with pytest.raises(RuntimeError):
                with backend.transaction():
                    hierarchy.attach(other, parent)
                    raise RuntimeError("abort")

        assert backend.hierarchy.get_parent(child) == parent
        assert backend.hierarchy.get_parent(other) is None
