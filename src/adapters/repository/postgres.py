"""
PostgreSQL repository adapter - Implements UserDirectory protocol.

This module provides the PostgreSQL implementation of the domain's
user directory port using psycopg3 with raw SQL.

Uniqueness:
-----------
username, email and public_id carry UNIQUE constraints. create() relies on
them rather than on a prior SELECT, so two concurrent registrations for the
same identity cannot both succeed: the loser gets a UniqueViolation, which
is reported to the domain as ConflictError.
"""

import logging
import uuid
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import ConflictError, NotFoundError
from src.domain.user import PendingUser, User

logger = logging.getLogger(__name__)

_USER_COLUMNS = """
    public_id, username, email, password_hash, enabled,
    verification_token, created_at, updated_at
"""


def _to_user(row: dict) -> User:
    return User(
        public_id=row["public_id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        enabled=row["enabled"],
        verification_token=row["verification_token"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresUserDirectory:
    """
    Implements UserDirectory protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        sql = "SELECT 1 FROM users WHERE username = %s OR email = %s LIMIT 1"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (username, email))
            return cursor.fetchone() is not None

    def create(self, pending_user: PendingUser) -> User:
        """
        Insert a disabled user with a fresh public_id.

        Raises:
            ConflictError: username or email violates a UNIQUE constraint
        """
        sql = f"""
            INSERT INTO users (public_id, username, email, password_hash, enabled, verification_token)
            VALUES (%s, %s, %s, %s, FALSE, %s)
            RETURNING {_USER_COLUMNS}
        """

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(
                    sql,
                    (
                        str(uuid.uuid4()),
                        pending_user.username,
                        pending_user.email,
                        pending_user.password_hash,
                        pending_user.verification_token,
                    ),
                )
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation:
            raise ConflictError(pending_user.username) from None
        return _to_user(row)

    def find_by_username(self, username: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE username = %s"

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (username,))
            row = cursor.fetchone()
        return _to_user(row) if row is not None else None

    def find_by_public_id(self, public_id: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE public_id = %s"

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (public_id,))
            row = cursor.fetchone()
        return _to_user(row) if row is not None else None

    def update(self, user: User) -> User:
        """
        Persist email, password hash, enabled flag and verification token.

        Raises:
            NotFoundError: no row with user.public_id
            ConflictError: new email belongs to another user
        """
        sql = f"""
            UPDATE users
            SET email = %s,
                password_hash = %s,
                enabled = %s,
                verification_token = %s,
                updated_at = NOW()
            WHERE public_id = %s
            RETURNING {_USER_COLUMNS}
        """

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(
                    sql,
                    (
                        user.email,
                        user.password_hash,
                        user.enabled,
                        user.verification_token,
                        user.public_id,
                    ),
                )
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation:
            raise ConflictError(user.email) from None

        if row is None:
            raise NotFoundError(user.public_id)
        return _to_user(row)

    def list_users(self, limit: int, offset: int) -> list[User]:
        sql = f"""
            SELECT {_USER_COLUMNS} FROM users
            ORDER BY created_at, username
            LIMIT %s OFFSET %s
        """

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (limit, offset))
            return [_to_user(row) for row in cursor.fetchall()]

    def count_users(self) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM users")
            return cursor.fetchone()[0]

    def delete(self, public_id: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM users WHERE public_id = %s", (public_id,))
            conn.commit()
            return cursor.rowcount == 1


MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """
    Apply every *.sql file in migrations_dir, in filename order.

    All files run in one transaction, so a failing file leaves the schema
    untouched. Files must be idempotent; they are re-applied on each start.

    Returns:
        Names of the applied files
    """
    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.warning("No migrations found in %s", migrations_dir)
        return []

    with pool.connection() as conn:
        for sql_file in sql_files:
            logger.debug("Applying migration %s", sql_file.name)
            try:
                conn.execute(sql_file.read_text())
            except psycopg.Error as e:
                raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

    logger.info("Applied %d migration(s) from %s", len(sql_files), migrations_dir)
    return [f.name for f in sql_files]
