"""Table definitions for the Postgres backend. Idempotent."""

import logging

from psycopg import Connection

log = logging.getLogger(__name__)

TABLES = {
    "notes": """
        CREATE TABLE IF NOT EXISTS notes (
            id SERIAL PRIMARY KEY,
            public_id TEXT NOT NULL UNIQUE,
            creator_id INTEGER NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """,
    "note_relations": """
        CREATE TABLE IF NOT EXISTS note_relations (
            id SERIAL PRIMARY KEY,
            note_id INTEGER NOT NULL UNIQUE REFERENCES notes (id) ON DELETE CASCADE,
            parent_id INTEGER NOT NULL REFERENCES notes (id) ON DELETE CASCADE,
            CHECK (note_id <> parent_id)
        )
    """,
    "note_teams": """
        CREATE TABLE IF NOT EXISTS note_teams (
            id SERIAL PRIMARY KEY,
            note_id INTEGER NOT NULL REFERENCES notes (id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL,
            role TEXT NOT NULL CHECK (role IN ('read', 'write')),
            UNIQUE (note_id, user_id)
        )
    """,
    "note_settings": """
        CREATE TABLE IF NOT EXISTS note_settings (
            id SERIAL PRIMARY KEY,
            note_id INTEGER NOT NULL UNIQUE REFERENCES notes (id) ON DELETE CASCADE,
            custom_hostname TEXT UNIQUE,
            is_public BOOLEAN NOT NULL DEFAULT TRUE,
            invitation_hash TEXT NOT NULL UNIQUE
        )
    """,
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS note_relations_parent_idx ON note_relations (parent_id)",
]


def ensure_schema(conn: Connection) -> None:
    with conn.transaction():
        with conn.cursor() as cur:
            for statement in TABLES.values():
                cur.execute(statement)
            for statement in INDEXES:
                cur.execute(statement)
    log.info("Database schema ensured")
