# dbadmin/repositories/user_repository.py
import logging
import re
from typing import Any, Dict, List, Optional

from psycopg2 import sql
from sqlalchemy import text
from sqlalchemy.engine import Engine

from dbadmin.db.connections import get_engine

log = logging.getLogger(__name__)

# роль, которую нельзя удалить/переименовать/заблокировать из консоли
PROTECTED_ROLES = ("postgres",)

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_@.\-]*$")
MAX_USERNAME_LEN = 63  # NAMEDATALEN - 1


def validate_username(name: str) -> None:
    if not name:
        raise ValueError("Username cannot be empty")
    if len(name) > MAX_USERNAME_LEN:
        raise ValueError(f"Username cannot exceed {MAX_USERNAME_LEN} characters")
    if not _USERNAME_RE.match(name):
        raise ValueError("Invalid username format")


def _ensure_not_protected(name: str, action: str) -> None:
    if name.lower() in PROTECTED_ROLES:
        raise ValueError(f"Cannot {action} {name} user")


_USER_COLUMNS = """
    r.rolname AS username,
    r.rolcanlogin AS can_login,
    NOT r.rolcanlogin AS is_locked,
    r.rolsuper AS is_superuser,
    r.rolvaliduntil AS valid_until,
    r.rolconnlimit AS conn_limit
"""


class UserRepository:
    """
    Учётные записи сервера = роли PostgreSQL.
    «Заблокирована» = роль без LOGIN.
    Чтение: через SQLAlchemy text(), DDL: через psycopg2.sql (идентификаторы и пароли
    нельзя передать bind-параметрами).
    """

    def __init__(self, dbname: str, engine: Optional[Engine] = None):
        self.dbname = dbname
        self.engine = engine or get_engine(dbname)

    # ---------- helpers ----------

    def _exists(self, conn, username: str) -> bool:
        row = conn.execute(
            text("SELECT 1 FROM pg_roles WHERE rolname = :n"),
            {"n": username},
        ).fetchone()
        return row is not None

    def _require_exists(self, username: str) -> None:
        with self.engine.connect() as conn:
            if not self._exists(conn, username):
                raise ValueError(f"User '{username}' not found")

    def _execute_ddl(self, statement: sql.Composable) -> None:
        raw = self.engine.raw_connection()
        try:
            with raw.cursor() as cur:
                cur.execute(statement)
            raw.commit()
        except Exception:
            raw.rollback()
            raise
        finally:
            raw.close()

    # ---------- чтение ----------

    def list_users(self) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {_USER_COLUMNS} FROM pg_roles r ORDER BY r.rolname")
            ).mappings().all()
        return [dict(r) for r in rows]

    def get_user_details(self, username: str) -> Dict[str, Any]:
        validate_username(username)
        with self.engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {_USER_COLUMNS} FROM pg_roles r WHERE r.rolname = :n"),
                {"n": username},
            ).mappings().fetchone()
            if not row:
                raise ValueError(f"User '{username}' not found")

            member_of = conn.execute(
                text("""
                    SELECT g.rolname
                    FROM pg_auth_members m
                    JOIN pg_roles g ON g.oid = m.roleid
                    JOIN pg_roles u ON u.oid = m.member
                    WHERE u.rolname = :n
                    ORDER BY g.rolname
                """),
                {"n": username},
            ).scalars().all()

        details = dict(row)
        details["member_of"] = list(member_of)
        return details

    # ---------- изменения ----------

    def create_user(self, username: str, password: str = "", conn_limit: Optional[int] = None) -> None:
        validate_username(username)
        with self.engine.connect() as conn:
            if self._exists(conn, username):
                raise ValueError(f"User '{username}' already exists")

        parts = [sql.SQL("CREATE ROLE {} LOGIN").format(sql.Identifier(username))]
        if password:
            parts.append(sql.SQL("PASSWORD {}").format(sql.Literal(password)))
        if conn_limit:
            parts.append(sql.SQL("CONNECTION LIMIT {}").format(sql.Literal(int(conn_limit))))

        self._execute_ddl(sql.SQL(" ").join(parts))
        log.info("[users] created %s", username)

    def change_password(self, username: str, new_password: str) -> None:
        validate_username(username)
        if not new_password:
            raise ValueError("New password is required")
        self._require_exists(username)
        self._execute_ddl(
            sql.SQL("ALTER ROLE {} PASSWORD {}").format(
                sql.Identifier(username), sql.Literal(new_password)
            )
        )
        log.info("[users] password changed for %s", username)

    def lock_user(self, username: str) -> None:
        validate_username(username)
        _ensure_not_protected(username, "lock")
        self._require_exists(username)
        self._execute_ddl(sql.SQL("ALTER ROLE {} NOLOGIN").format(sql.Identifier(username)))
        log.info("[users] locked %s", username)

    def unlock_user(self, username: str) -> None:
        validate_username(username)
        self._require_exists(username)
        self._execute_ddl(sql.SQL("ALTER ROLE {} LOGIN").format(sql.Identifier(username)))
        log.info("[users] unlocked %s", username)

    def rename_user(self, old_username: str, new_username: str) -> None:
        validate_username(old_username)
        validate_username(new_username)
        _ensure_not_protected(old_username, "rename")
        self._require_exists(old_username)
        self._execute_ddl(
            sql.SQL("ALTER ROLE {} RENAME TO {}").format(
                sql.Identifier(old_username), sql.Identifier(new_username)
            )
        )
        log.info("[users] renamed %s -> %s", old_username, new_username)

    def delete_user(self, username: str) -> None:
        validate_username(username)
        _ensure_not_protected(username, "delete")
        self._require_exists(username)
        self._execute_ddl(sql.SQL("DROP ROLE {}").format(sql.Identifier(username)))
        log.info("[users] dropped %s", username)
