"""Unit tests for InvitationFlow and NoteSettingsService."""

import pytest

from collabnotes.entities import MemberRole
from collabnotes.errors import (
    AlreadyMember,
    HostnameTaken,
    InvitationNotFound,
    NoteNotFound,
)
from collabnotes.schemas import NoteSettingsPatch
from collabnotes.security import UNAMBIGUOUS_ALPHABET, create_invitation_hash


class TestInvitationHash:
    def test_fixed_length_unambiguous_alphabet(self):
        token = create_invitation_hash()
        assert len(token) == 10
        assert set(token) <= set(UNAMBIGUOUS_ALPHABET)

    def test_hashes_differ(self, invitations):
        assert len({invitations.generate_hash() for _ in range(100)}) == 100

    def test_new_note_gets_a_hash(self, note_settings, make_note):
        settings = note_settings.get_by_note_id(make_note())
        assert settings.invitation_hash


class TestRedeem:
    def test_redeem_adds_read_member(self, invitations, note_settings, team, make_note):
        note = make_note()
        invitation_hash = note_settings.get_by_note_id(note).invitation_hash

        member = invitations.redeem(invitation_hash, 3)

        assert (member.note_id, member.user_id, member.role) == (note, 3, MemberRole.READ)
        assert [m.user_id for m in team.list_by_note(note)] == [3]

    def test_second_redeem_by_same_user_raises(self, invitations, note_settings, team, make_note):
        note = make_note()
        invitation_hash = note_settings.get_by_note_id(note).invitation_hash
        invitations.redeem(invitation_hash, 3)

        with pytest.raises(AlreadyMember):
            invitations.redeem(invitation_hash, 3)
        assert len(team.list_by_note(note)) == 1

    def test_hash_is_reusable_by_other_users(self, invitations, note_settings, team, make_note):
        note = make_note()
        invitation_hash = note_settings.get_by_note_id(note).invitation_hash
        invitations.redeem(invitation_hash, 3)
        invitations.redeem(invitation_hash, 4)

        assert sorted(m.user_id for m in team.list_by_note(note)) == [3, 4]

    def test_unknown_hash(self, invitations):
        with pytest.raises(InvitationNotFound):
            invitations.redeem("nope", 3)

    def test_redeem_does_not_downgrade_writer(self, invitations, note_settings, team, make_note):
        note = make_note()
        team.create(note, 3, MemberRole.WRITE)
        with pytest.raises(AlreadyMember):
            invitations.redeem(note_settings.get_by_note_id(note).invitation_hash, 3)
        assert team.get_role(3, note) == MemberRole.WRITE


class TestRegenerate:
    def test_old_hash_stops_working(self, invitations, note_settings, make_note):
        note = make_note()
        old_hash = note_settings.get_by_note_id(note).invitation_hash

        new_hash = invitations.regenerate(note).invitation_hash

        assert new_hash != old_hash
        assert note_settings.get_by_note_id(note).invitation_hash == new_hash
        with pytest.raises(InvitationNotFound):
            invitations.redeem(old_hash, 5)
        assert invitations.redeem(new_hash, 5).user_id == 5

    def test_regenerate_unknown_note(self, invitations):
        with pytest.raises(NoteNotFound):
            invitations.regenerate(999)


class TestNoteSettings:
    def test_patch_only_given_fields(self, note_settings, make_note):
        note = make_note(is_public=False)
        before = note_settings.get_by_note_id(note)

        after = note_settings.patch(note, NoteSettingsPatch(custom_hostname="docs.example.com"))

        assert after.custom_hostname == "docs.example.com"
        assert after.is_public is False
        assert after.invitation_hash == before.invitation_hash

    def test_hostname_already_used_by_another_note(self, note_settings, make_note):
        first, second = make_note(), make_note()
        note_settings.patch(first, NoteSettingsPatch(custom_hostname="docs.example.com"))

        with pytest.raises(HostnameTaken):
            note_settings.patch(second, NoteSettingsPatch(custom_hostname="docs.example.com"))
        assert note_settings.get_by_note_id(second).custom_hostname is None

    def test_same_note_can_keep_its_hostname(self, note_settings, make_note):
        note = make_note()
        note_settings.patch(note, NoteSettingsPatch(custom_hostname="docs.example.com"))
        again = note_settings.patch(note, NoteSettingsPatch(custom_hostname="docs.example.com"))
        assert again.custom_hostname == "docs.example.com"

    def test_patch_visibility(self, note_settings, make_note):
        note = make_note(is_public=False)
        note_settings.patch(note, NoteSettingsPatch(is_public=True))
        assert note_settings.is_public(note) is True

    def test_patch_rejects_unknown_fields(self):
        with pytest.raises(ValueError):
            NoteSettingsPatch.model_validate({"invitation_hash": "mine"})

    def test_patch_rejects_null_visibility(self):
        with pytest.raises(ValueError):
            NoteSettingsPatch.model_validate({"is_public": None})

    def test_missing_settings(self, note_settings):
        with pytest.raises(NoteNotFound):
            note_settings.get_by_note_id(999)
