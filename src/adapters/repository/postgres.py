"""
PostgreSQL repository adapters - Implement the domain's store ports.

This module provides the PostgreSQL implementations of IdentityRepository
and MagicLinkTokenRepository using psycopg3 with raw SQL.

Concurrency Design - Conditional Single-Row Updates:
----------------------------------------------------
No operation holds a lock across round trips. Every mutation that depends
on current state is expressed as one UPDATE/DELETE whose WHERE clause
carries the precondition:

1. **consume_otp**: ``WHERE email = %s AND otp_hash = %s``. A concurrent
   re-issue changes otp_hash, so a stale consume matches zero rows and the
   new code is never cleared by an old one.

2. **verified**: only ever written as TRUE. No statement in this module
   sets it FALSE.

3. **magic link tokens**: ``DELETE ... RETURNING expires``. Exactly one
   caller receives the row, which makes links single-use.

4. **create**: ``INSERT ... ON CONFLICT (email) DO NOTHING``. The UNIQUE
   constraint on email decides sign-up races.

Infrastructure errors (psycopg.Error) are re-raised as StoreUnavailable.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import StoreUnavailable
from src.domain.ports import Identity

logger = logging.getLogger(__name__)

_IDENTITY_COLUMNS = "id, email, name, password_hash, verified, otp_hash, otp_expires, created_at"


def _row_to_identity(row: tuple) -> Identity:
    return Identity(
        id=row[0],
        email=row[1],
        name=row[2],
        password_hash=row[3],
        verified=row[4],
        otp_hash=row[5],
        otp_expires=row[6],
        created_at=row[7],
    )


class _PostgresRepository:
    """Shared connection handling for the PostgreSQL adapters."""

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                yield cursor
                conn.commit()
        except psycopg.Error as e:
            logger.error("Credential store error: %s", e)
            raise StoreUnavailable("credential store unavailable") from e


class PostgresIdentityRepository(_PostgresRepository):
    """
    Implements IdentityRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def get_by_email(self, email: str) -> Identity | None:
        sql = f"SELECT {_IDENTITY_COLUMNS} FROM identities WHERE email = %s"

        with self._cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _row_to_identity(row) if row is not None else None

    def create(self, email: str, name: str, password_hash: str | None) -> Identity | None:
        """
        Atomically create an unverified identity.

        Returns:
            The new Identity, or None if the email already exists
        """
        sql = f"""
            INSERT INTO identities (id, email, name, password_hash, verified, created_at)
            VALUES (%s, %s, %s, %s, FALSE, NOW())
            ON CONFLICT (email) DO NOTHING
            RETURNING {_IDENTITY_COLUMNS}
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (uuid.uuid4().hex, email, name, password_hash))
            row = cursor.fetchone()
        return _row_to_identity(row) if row is not None else None

    def store_otp(self, email: str, otp_hash: str, expires: datetime) -> bool:
        """Overwrite any outstanding code; both columns in one statement."""
        sql = """
            UPDATE identities
            SET otp_hash = %s, otp_expires = %s
            WHERE email = %s
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (otp_hash, expires, email))
            return cursor.rowcount == 1

    def consume_otp(self, email: str, otp_hash: str) -> bool:
        """Clear the code and verify, only if the checked code is still current."""
        sql = """
            UPDATE identities
            SET otp_hash = NULL, otp_expires = NULL, verified = TRUE
            WHERE email = %s AND otp_hash = %s
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (email, otp_hash))
            return cursor.rowcount == 1

    def mark_verified(self, email: str) -> bool:
        sql = """
            UPDATE identities
            SET verified = TRUE, otp_hash = NULL, otp_expires = NULL
            WHERE email = %s
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (email,))
            return cursor.rowcount == 1

    def create_verified(self, email: str) -> Identity:
        """Insert a verified identity, or verify the row a concurrent caller created."""
        sql = f"""
            INSERT INTO identities (id, email, name, verified, created_at)
            VALUES (%s, %s, '', TRUE, NOW())
            ON CONFLICT (email) DO UPDATE
            SET verified = TRUE, otp_hash = NULL, otp_expires = NULL
            RETURNING {_IDENTITY_COLUMNS}
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (uuid.uuid4().hex, email))
            row = cursor.fetchone()
        return _row_to_identity(row)


class PostgresMagicLinkTokenRepository(_PostgresRepository):
    """Implements MagicLinkTokenRepository protocol via psycopg3."""

    def save(self, email: str, token_hash: str, expires: datetime) -> None:
        sql = """
            INSERT INTO magic_link_tokens (email, token_hash, expires)
            VALUES (%s, %s, %s)
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (email, token_hash, expires))

    def consume(self, email: str, token_hash: str) -> datetime | None:
        sql = """
            DELETE FROM magic_link_tokens
            WHERE email = %s AND token_hash = %s
            RETURNING expires
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (email, token_hash))
            row = cursor.fetchone()
        return row[0] if row is not None else None

    def purge_expired(self, now: datetime) -> int:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM magic_link_tokens WHERE expires < %s", (now,))
            return cursor.rowcount


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
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
