"""Database repository for user accounts."""

from __future__ import annotations

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, Role
from .domain.errors import DuplicateAccountError, MissingAccountError

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id BIGSERIAL PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    first_name TEXT,
    last_name TEXT,
    role TEXT NOT NULL DEFAULT 'USER' CHECK (role IN ('USER', 'ADMIN'))
)
"""

_COLUMNS = "id, username, password_hash, email, first_name, last_name, role"


class AccountRepository:
    """Postgres-backed account persistence relying on unique constraints for integrity."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the ``users`` table when it does not exist yet."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            conn.commit()

    def find_by_id(self, account_id: int) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM users WHERE id = %s", (account_id,))

    def find_by_username(self, username: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM users WHERE username = %s", (username,))

    def exists_by_username(self, username: str) -> bool:
        return self._exists("SELECT 1 FROM users WHERE username = %s", (username,))

    def exists_by_email(self, email: str) -> bool:
        return self._exists("SELECT 1 FROM users WHERE email = %s", (email,))

    def find_all(self) -> list[Account]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY id")
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def save(self, account: Account) -> Account:
        """Insert or update ``account`` and return the stored row.

        Raises
        ------
        DuplicateAccountError
            When the write violates the username or email unique constraint.
        MissingAccountError
            When an update matches no row because the account was deleted.
        """
        if account.id is None:
            query = f"""
                INSERT INTO users (username, password_hash, email, first_name, last_name, role)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {_COLUMNS}
            """
            params: tuple = (
                account.username,
                account.password_hash,
                account.email,
                account.first_name,
                account.last_name,
                account.role.value,
            )
        else:
            query = f"""
                UPDATE users
                SET password_hash = %s, email = %s, first_name = %s, last_name = %s, role = %s
                WHERE id = %s
                RETURNING {_COLUMNS}
            """
            params = (
                account.password_hash,
                account.email,
                account.first_name,
                account.last_name,
                account.role.value,
                account.id,
            )

        with self._pool.connection() as conn:
            try:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
                conn.commit()
            except errors.UniqueViolation as exc:
                conn.rollback()
                raise DuplicateAccountError(_describe_violation(exc)) from exc

        if row is None:
            raise MissingAccountError(f"user {account.id} no longer exists")
        return self._map_record(row)

    def delete(self, account: Account) -> None:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM users WHERE id = %s", (account.id,))
            conn.commit()

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def _exists(self, query: str, params: tuple) -> bool:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchone() is not None

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            id=row[0],
            username=row[1],
            password_hash=row[2],
            email=row[3],
            first_name=row[4],
            last_name=row[5],
            role=Role(row[6]),
        )


def _describe_violation(exc: errors.UniqueViolation) -> str:
    constraint = exc.diag.constraint_name or ""
    if "username" in constraint:
        return "username already exists"
    if "email" in constraint:
        return "email already exists"
    return "account already exists"
