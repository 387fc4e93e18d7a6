"""Postgres storage backend over a single psycopg connection.

Connections come from the shared pool in autocommit mode; multi-statement work is
wrapped in ``conn.transaction()`` by the backend.
"""

from contextlib import contextmanager
from typing import Optional

from psycopg import Connection, sql
from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row

from ..entities import MemberRole, NoteRecord, NoteSettings, TeamMember
from ..errors import HostnameTaken
from .base import (
    HierarchyStorage,
    NoteSettingsStorage,
    NoteStorage,
    StorageBackend,
    TeamStorage,
)

# Key for pg_advisory_xact_lock taken by every hierarchy write
HIERARCHY_LOCK_KEY = 0x6E6F7465  # "note"

SETTINGS_COLUMNS = "id, note_id, custom_hostname, is_public, invitation_hash"
UPDATABLE_SETTINGS = ("custom_hostname", "is_public", "invitation_hash")
# Default name Postgres gives the UNIQUE on note_settings.custom_hostname
HOSTNAME_CONSTRAINT = "note_settings_custom_hostname_key"


def _to_member(row: dict) -> TeamMember:
    return TeamMember(
        id=row["id"],
        note_id=row["note_id"],
        user_id=row["user_id"],
        role=MemberRole(row["role"]),
    )


def _to_settings(row: dict) -> NoteSettings:
    return NoteSettings(
        id=row["id"],
        note_id=row["note_id"],
        custom_hostname=row["custom_hostname"],
        is_public=row["is_public"],
        invitation_hash=row["invitation_hash"],
    )


class PostgresNoteStorage(NoteStorage):
    def __init__(self, conn: Connection):
        self._conn = conn

    def create(self, public_id: str, creator_id: int) -> NoteRecord:
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                INSERT INTO notes (public_id, creator_id)
                VALUES (%s, %s)
                RETURNING id, public_id, creator_id
                """,
                (public_id, creator_id),
            )
            return NoteRecord(**cur.fetchone())

    def get_by_id(self, note_id: int) -> Optional[NoteRecord]:
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                "SELECT id, public_id, creator_id FROM notes WHERE id = %s",
                (note_id,),
            )
            row = cur.fetchone()
            return NoteRecord(**row) if row else None

    def get_by_public_id(self, public_id: str) -> Optional[NoteRecord]:
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                "SELECT id, public_id, creator_id FROM notes WHERE public_id = %s",
                (public_id,),
            )
            row = cur.fetchone()
            return NoteRecord(**row) if row else None

    def delete(self, note_id: int) -> bool:
        with self._conn.cursor() as cur:
            cur.execute("DELETE FROM notes WHERE id = %s", (note_id,))
            return cur.rowcount > 0


class PostgresHierarchyStorage(HierarchyStorage):
    def __init__(self, conn: Connection):
        self._conn = conn

    def get_parent(self, note_id: int) -> Optional[int]:
        with self._conn.cursor() as cur:
            cur.execute(
                "SELECT parent_id FROM note_relations WHERE note_id = %s", (note_id,)
            )
            row = cur.fetchone()
            return row[0] if row else None

    def set_parent(self, note_id: int, parent_id: int) -> None:
        # UNIQUE(note_id) turns a second insert into a replace
        with self._conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO note_relations (note_id, parent_id)
                VALUES (%s, %s)
                ON CONFLICT (note_id) DO UPDATE SET parent_id = EXCLUDED.parent_id
                """,
                (note_id, parent_id),
            )

    def delete_parent(self, note_id: int) -> bool:
        with self._conn.cursor() as cur:
            cur.execute("DELETE FROM note_relations WHERE note_id = %s", (note_id,))
            return cur.rowcount > 0

    def delete_touching(self, note_id: int) -> int:
        with self._conn.cursor() as cur:
            cur.execute(
                "DELETE FROM note_relations WHERE note_id = %s OR parent_id = %s",
                (note_id, note_id),
            )
            return cur.rowcount

    def list_children(self, note_id: int) -> list[int]:
        with self._conn.cursor() as cur:
            cur.execute(
                "SELECT note_id FROM note_relations WHERE parent_id = %s ORDER BY note_id",
                (note_id,),
            )
            return [row[0] for row in cur.fetchall()]

    def has_relation(self, note_id: int) -> bool:
        with self._conn.cursor() as cur:
            cur.execute(
                """
                SELECT 1 FROM note_relations
                WHERE note_id = %s OR parent_id = %s
                LIMIT 1
                """,
                (note_id, note_id),
            )
            return cur.fetchone() is not None


class PostgresTeamStorage(TeamStorage):
    def __init__(self, conn: Connection):
        self._conn = conn

    def insert(
        self, note_id: int, user_id: int, role: MemberRole
    ) -> Optional[TeamMember]:
        # The loser of a concurrent insert gets no row back
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                INSERT INTO note_teams (note_id, user_id, role)
                VALUES (%s, %s, %s)
                ON CONFLICT (note_id, user_id) DO NOTHING
                RETURNING id, note_id, user_id, role
                """,
                (note_id, user_id, role.value),
            )
            row = cur.fetchone()
            return _to_member(row) if row else None

    def get(self, note_id: int, user_id: int) -> Optional[TeamMember]:
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, note_id, user_id, role FROM note_teams
                WHERE note_id = %s AND user_id = %s
                """,
                (note_id, user_id),
            )
            row = cur.fetchone()
            return _to_member(row) if row else None

    def list_by_note(self, note_id: int) -> list[TeamMember]:
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, note_id, user_id, role FROM note_teams
                WHERE note_id = %s ORDER BY id
                """,
                (note_id,),
            )
            return [_to_member(row) for row in cur.fetchall()]

    def update_role(
        self, note_id: int, user_id: int, role: MemberRole
    ) -> Optional[TeamMember]:
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                UPDATE note_teams SET role = %s
                WHERE note_id = %s AND user_id = %s
                RETURNING id, note_id, user_id, role
                """,
                (role.value, note_id, user_id),
            )
            row = cur.fetchone()
            return _to_member(row) if row else None

    def delete_by_id(self, member_id: int) -> bool:
        with self._conn.cursor() as cur:
            cur.execute("DELETE FROM note_teams WHERE id = %s", (member_id,))
            return cur.rowcount > 0

    def delete_by_note(self, note_id: int) -> int:
        with self._conn.cursor() as cur:
            cur.execute("DELETE FROM note_teams WHERE note_id = %s", (note_id,))
            return cur.rowcount


class PostgresNoteSettingsStorage(NoteSettingsStorage):
    def __init__(self, conn: Connection):
        self._conn = conn

    def _fetch_one(self, query: str, params: tuple) -> Optional[NoteSettings]:
        with self._conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            return _to_settings(row) if row else None

    def create(
        self, note_id: int, is_public: bool, invitation_hash: str
    ) -> NoteSettings:
        return self._fetch_one(
            f"""
            INSERT INTO note_settings (note_id, is_public, invitation_hash)
            VALUES (%s, %s, %s)
            RETURNING {SETTINGS_COLUMNS}
            """,
            (note_id, is_public, invitation_hash),
        )

    def get_by_note_id(self, note_id: int) -> Optional[NoteSettings]:
        return self._fetch_one(
            f"SELECT {SETTINGS_COLUMNS} FROM note_settings WHERE note_id = %s",
            (note_id,),
        )

    def get_by_invitation_hash(self, invitation_hash: str) -> Optional[NoteSettings]:
        # FOR SHARE makes a concurrent regeneration wait for the redeeming transaction
        return self._fetch_one(
            f"""
            SELECT {SETTINGS_COLUMNS} FROM note_settings
            WHERE invitation_hash = %s
            FOR SHARE
            """,
            (invitation_hash,),
        )

    def get_by_hostname(self, hostname: str) -> Optional[NoteSettings]:
        return self._fetch_one(
            f"SELECT {SETTINGS_COLUMNS} FROM note_settings WHERE custom_hostname = %s",
            (hostname,),
        )

    def update(self, note_id: int, changes: dict) -> Optional[NoteSettings]:
        fields = [f for f in UPDATABLE_SETTINGS if f in changes]
        if not fields:
            return self.get_by_note_id(note_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(f)) for f in fields
        )
        query = sql.SQL(
            "UPDATE note_settings SET {} WHERE note_id = %s RETURNING "
            + SETTINGS_COLUMNS
        ).format(assignments)
        try:
            # Savepoint so a conflict leaves an enclosing transaction usable
            with self._conn.transaction(), self._conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, (*[changes[f] for f in fields], note_id))
                row = cur.fetchone()
        except UniqueViolation as e:
            if e.diag.constraint_name == HOSTNAME_CONSTRAINT:
                raise HostnameTaken(
                    f"Hostname {changes['custom_hostname']} is already in use"
                ) from e
            raise
        return _to_settings(row) if row else None

    def delete(self, note_id: int) -> bool:
        with self._conn.cursor() as cur:
            cur.execute("DELETE FROM note_settings WHERE note_id = %s", (note_id,))
            return cur.rowcount > 0


class PostgresBackend(StorageBackend):
    def __init__(self, conn: Connection):
        self._conn = conn
        self.notes = PostgresNoteStorage(conn)
        self.hierarchy = PostgresHierarchyStorage(conn)
        self.team = PostgresTeamStorage(conn)
        self.settings = PostgresNoteSettingsStorage(conn)

    def transaction(self):
        return self._conn.transaction()

    @contextmanager
    def hierarchy_lock(self):
        with self._conn.transaction():
            with self._conn.cursor() as cur:
                cur.execute("SELECT pg_advisory_xact_lock(%s)", (HIERARCHY_LOCK_KEY,))
            yield
