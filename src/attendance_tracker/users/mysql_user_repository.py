from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import as_utc
from ..core.enums import Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, full_name, email, password_hash, role, status, created_at, updated_at"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row.get("password_hash"),
        role=Role(row["role"]),
        status=UserStatus(row["status"]),
        created_at=as_utc(row["created_at"]) if row.get("created_at") else None,
        updated_at=as_utc(row["updated_at"]) if row.get("updated_at") else None,
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, *, full_name: str, email: str, password_hash: Optional[str], role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, status)
                VALUES(%s,%s,%s,%s,'active')
                """,
                (full_name, email, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def upsert_by_email(self, *, email: str, full_name: str) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(user_id) makes lastrowid point at the existing row on update
            cur.execute(
                """
                INSERT INTO users(full_name, email, role, status)
                VALUES(%s,%s,'student','active')
                ON DUPLICATE KEY UPDATE
                    user_id=LAST_INSERT_ID(user_id),
                    full_name=VALUES(full_name)
                """,
                (full_name, email),
            )
            user_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            return _to_user(fetchone(cur))

    def set_role(self, user_id: int, *, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET role=%s WHERE user_id=%s", (role.value, int(user_id)))
            return cur.rowcount > 0

    def set_status(self, user_id: int, *, status: UserStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE user_id=%s", (status.value, int(user_id)))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id DESC")
            return [_to_user(r) for r in fetchall(cur)]
