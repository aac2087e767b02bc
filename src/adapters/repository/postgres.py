"""
PostgreSQL repository adapters - Implement UserDirectory and QuestionStore.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 with raw SQL.

Atomicity Design - OTP Pairing:
-------------------------------
Every write to a user row is a single conditional statement, so
concurrent writers from any number of processes cannot leave a row
with a mismatched otp_code/otp_expires_at pair:

1. **create_pending**: INSERT ... ON CONFLICT (email) DO NOTHING. The
   primary key on email makes the uniqueness check and the insert one
   step; a lost race returns no row and raises EmailAlreadyExists.

2. **update_pending_credentials / update_otp / mark_verified**:
   UPDATE ... WHERE email = %s AND is_verified = FALSE, writing both OTP
   columns together. When no row matches, a follow-up SELECT in the same
   transaction tells AccountNotFound from AlreadyVerified.

3. **otp_pairing CHECK constraint** (migrations/001_create_users.sql):
   the database rejects any row whose OTP columns disagree with
   is_verified.

Every connection checkout is bounded by the configured timeout; pool
timeouts and driver errors surface as StorageUnavailable.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool, PoolTimeout

from src.domain.exceptions import (
    AccountNotFound,
    AlreadyVerified,
    EmailAlreadyExists,
    StorageUnavailable,
)
from src.domain.models import Answer, Question, UserRecord

logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    "email, password_hash, otp_code, otp_expires_at, is_verified, created_at, updated_at"
)


def _to_record(row: tuple) -> UserRecord:
    return UserRecord(
        email=row[0],
        password_hash=row[1],
        otp_code=row[2],
        otp_expires_at=row[3],
        is_verified=row[4],
        created_at=row[5],
        updated_at=row[6],
    )


class _PooledRepository:
    def __init__(self, pool: ConnectionPool, timeout: float = 5.0) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            timeout: Seconds to wait for a pooled connection
        """
        self._pool = pool
        self._timeout = timeout

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        try:
            with self._pool.connection(timeout=self._timeout) as conn:
                yield conn
        except (PoolTimeout, psycopg.Error) as e:
            logger.error(f"Database operation failed: {type(e).__name__}")
            raise StorageUnavailable() from e


class PostgresUserDirectory(_PooledRepository):
    """
    Implements UserDirectory protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def find_by_email(self, email: str) -> UserRecord | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s"

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _to_record(row) if row is not None else None

    def create_pending(
        self, email: str, password_hash: str, otp_code: str, otp_expires_at: datetime
    ) -> UserRecord:
        sql = f"""
            INSERT INTO users (email, password_hash, otp_code, otp_expires_at, is_verified)
            VALUES (%s, %s, %s, %s, FALSE)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_USER_COLUMNS}
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, password_hash, otp_code, otp_expires_at))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            raise EmailAlreadyExists(email)
        return _to_record(row)

    def update_pending_credentials(
        self, email: str, password_hash: str, otp_code: str, otp_expires_at: datetime
    ) -> UserRecord:
        sql = f"""
            UPDATE users
            SET password_hash = %s, otp_code = %s, otp_expires_at = %s, updated_at = NOW()
            WHERE email = %s AND is_verified = FALSE
            RETURNING {_USER_COLUMNS}
        """
        return self._update_pending(sql, (password_hash, otp_code, otp_expires_at, email), email)

    def update_otp(self, email: str, otp_code: str, otp_expires_at: datetime) -> UserRecord:
        sql = f"""
            UPDATE users
            SET otp_code = %s, otp_expires_at = %s, updated_at = NOW()
            WHERE email = %s AND is_verified = FALSE
            RETURNING {_USER_COLUMNS}
        """
        return self._update_pending(sql, (otp_code, otp_expires_at, email), email)

    def mark_verified(self, email: str) -> UserRecord:
        sql = f"""
            UPDATE users
            SET is_verified = TRUE, otp_code = NULL, otp_expires_at = NULL, updated_at = NOW()
            WHERE email = %s AND is_verified = FALSE
            RETURNING {_USER_COLUMNS}
        """
        return self._update_pending(sql, (email,), email)

    def _update_pending(self, sql: str, params: tuple, email: str) -> UserRecord:
        """Run a conditional update; explain a miss as not-found or already-verified."""
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            if row is None:
                cursor.execute("SELECT is_verified FROM users WHERE email = %s", (email,))
                existing = cursor.fetchone()
                conn.commit()
                if existing is None:
                    raise AccountNotFound(email)
                raise AlreadyVerified(email)
            conn.commit()
        return _to_record(row)


class PostgresQuestionStore(_PooledRepository):
    """Implements QuestionStore protocol; answers are kept as a JSONB array."""

    def add(self, question_text: str, answers: list[Answer]) -> Question:
        sql = """
            INSERT INTO questions (question_text, answers)
            VALUES (%s, %s)
            RETURNING id
        """
        payload = [{"text": a.text, "score": a.score} for a in answers]

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (question_text, Jsonb(payload)))
            row = cursor.fetchone()
            conn.commit()

        return Question(id=str(row[0]), question_text=question_text, answers=list(answers))

    def list_all(self) -> list[Question]:
        sql = "SELECT id, question_text, answers FROM questions ORDER BY id"

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql)
            rows = cursor.fetchall()

        return [
            Question(
                id=str(row[0]),
                question_text=row[1],
                answers=[Answer(text=a["text"], score=a["score"]) for a in row[2]],
            )
            for row in rows
        ]


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
