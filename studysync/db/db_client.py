import json
import logging
from typing import List, Optional
from uuid import UUID
import asyncpg
from datetime import datetime, timezone
from ..models.db_models import User, Note, Paper, Subject, Role

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS users (
        id UUID PRIMARY KEY,
        full_name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'user'
    );
    CREATE TABLE IF NOT EXISTS notes (
        id UUID PRIMARY KEY,
        owner_id UUID NOT NULL REFERENCES users(id),
        title TEXT NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        subject TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'Pending',
        attachments JSONB NOT NULL DEFAULT '[]'::jsonb,
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL
    );
    CREATE TABLE IF NOT EXISTS papers (
        id UUID PRIMARY KEY,
        subject TEXT NOT NULL,
        year INTEGER NOT NULL,
        semester INTEGER NOT NULL,
        term TEXT NOT NULL,
        file JSONB NOT NULL,
        uploaded_by UUID REFERENCES users(id),
        created_at TIMESTAMPTZ NOT NULL
    );
    CREATE TABLE IF NOT EXISTS subjects (
        id UUID PRIMARY KEY,
        owner_id UUID NOT NULL REFERENCES users(id),
        subject TEXT NOT NULL,
        attended_classes INTEGER NOT NULL DEFAULT 0,
        total_classes INTEGER NOT NULL DEFAULT 0,
        history JSONB NOT NULL DEFAULT '[]'::jsonb
    );
"""


async def init_connection(connection: asyncpg.Connection):
    """Decodes JSONB columns into Python lists/dicts for every pooled connection."""
    await connection.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


async def create_pool(dsn: str, min_size: int = 1, max_size: int = 10) -> asyncpg.Pool:
    return await asyncpg.create_pool(dsn=dsn, min_size=min_size, max_size=max_size, init=init_connection)


class AsyncPostgresClient:
    """
    PostgreSQL client that owns every query the application runs.
    """
    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def ensure_schema(self):
        """Creates the tables if they do not exist yet."""
        async with self._pool.acquire() as connection:
            await connection.execute(SCHEMA_SQL)

    # ===== Users =====

    async def add_user(self, user: User):
        query = """
            INSERT INTO users (id, full_name, email, password_hash, role)
            VALUES ($1, $2, $3, $4, $5);
        """
        async with self._pool.acquire() as connection:
            await connection.execute(query, user.id, user.full_name, user.email, user.password_hash, user.role.value)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        query = "SELECT * FROM users WHERE email = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, email)
            return User(**record) if record else None

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        query = "SELECT * FROM users WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, user_id)
            return User(**record) if record else None

    async def set_user_role(self, email: str, role: Role) -> str:
        query = "UPDATE users SET role = $2 WHERE email = $1;"
        async with self._pool.acquire() as connection:
            return await connection.execute(query, email, role.value)

    # ===== Notes =====

    async def add_note(self, note: Note):
        query = """
            INSERT INTO notes (id, owner_id, title, content, subject, status, attachments, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9);
        """
        async with self._pool.acquire() as connection:
            await connection.execute(
                query, note.id, note.owner_id, note.title, note.content, note.subject,
                note.status.value, [a.model_dump() for a in note.attachments],
                note.created_at, note.updated_at
            )

    async def get_notes(self, owner_id: UUID) -> List[Note]:
        """Returns the owner's notes, newest first."""
        query = "SELECT * FROM notes WHERE owner_id = $1 ORDER BY created_at DESC;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, owner_id)
            return [Note(**record) for record in records]

    async def get_note(self, note_id: UUID, owner_id: UUID) -> Optional[Note]:
        query = "SELECT * FROM notes WHERE id = $1 AND owner_id = $2;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, note_id, owner_id)
            return Note(**record) if record else None

    async def update_note(self, note: Note) -> str:
        query = """
            UPDATE notes
            SET title = $2, content = $3, subject = $4, status = $5, attachments = $6, updated_at = $7
            WHERE id = $1;
        """
        async with self._pool.acquire() as connection:
            return await connection.execute(
                query, note.id, note.title, note.content, note.subject, note.status.value,
                [a.model_dump() for a in note.attachments], note.updated_at
            )

    async def delete_note(self, note_id: UUID, owner_id: UUID) -> str:
        query = "DELETE FROM notes WHERE id = $1 AND owner_id = $2;"
        async with self._pool.acquire() as connection:
            return await connection.execute(query, note_id, owner_id)

    # ===== Papers =====

    async def add_paper(self, paper: Paper):
        query = """
            INSERT INTO papers (id, subject, year, semester, term, file, uploaded_by, created_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8);
        """
        async with self._pool.acquire() as connection:
            await connection.execute(
                query, paper.id, paper.subject, paper.year, paper.semester, paper.term.value,
                paper.file.model_dump(), paper.uploaded_by, paper.created_at
            )

    async def get_papers(self) -> List[Paper]:
        query = "SELECT * FROM papers ORDER BY created_at DESC;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query)
            return [Paper(**record) for record in records]

    async def get_paper(self, paper_id: UUID) -> Optional[Paper]:
        query = "SELECT * FROM papers WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, paper_id)
            return Paper(**record) if record else None

    async def delete_paper(self, paper_id: UUID) -> str:
        query = "DELETE FROM papers WHERE id = $1;"
        async with self._pool.acquire() as connection:
            return await connection.execute(query, paper_id)

    # ===== Attendance subjects =====

    async def add_subject(self, subject: Subject):
        query = """
            INSERT INTO subjects (id, owner_id, subject, attended_classes, total_classes, history)
            VALUES ($1, $2, $3, $4, $5, $6);
        """
        async with self._pool.acquire() as connection:
            await connection.execute(
                query, subject.id, subject.owner_id, subject.subject, subject.attended_classes,
                subject.total_classes, [h.model_dump(mode="json") for h in subject.history]
            )

    async def get_subjects(self, owner_id: UUID) -> List[Subject]:
        query = "SELECT * FROM subjects WHERE owner_id = $1 ORDER BY subject;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, owner_id)
            return [Subject(**record) for record in records]

    async def get_subject(self, subject_id: UUID, owner_id: UUID) -> Optional[Subject]:
        query = "SELECT * FROM subjects WHERE id = $1 AND owner_id = $2;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, subject_id, owner_id)
            return Subject(**record) if record else None

    async def update_subject(self, subject: Subject) -> str:
        """Writes back the name, both counters and the full history."""
        query = """
            UPDATE subjects
            SET subject = $2, attended_classes = $3, total_classes = $4, history = $5
            WHERE id = $1;
        """
        async with self._pool.acquire() as connection:
            return await connection.execute(
                query, subject.id, subject.subject, subject.attended_classes, subject.total_classes,
                [h.model_dump(mode="json") for h in subject.history]
            )

    async def delete_subject(self, subject_id: UUID, owner_id: UUID) -> str:
        query = "DELETE FROM subjects WHERE id = $1 AND owner_id = $2;"
        async with self._pool.acquire() as connection:
            return await connection.execute(query, subject_id, owner_id)


def rows_affected(status_msg: str) -> int:
    """Parses asyncpg's command tag, e.g. 'DELETE 1' -> 1."""
    try:
        return int(status_msg.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
