"""
Tests for user account repository validation and DDL dispatch
"""
from unittest.mock import MagicMock

import pytest
from psycopg2 import sql

from dbadmin.repositories.user_repository import UserRepository, validate_username


def _engine(existing=True):
    """Engine double: pg_roles lookup answers `existing`, raw connection records DDL"""
    engine = MagicMock()
    conn = engine.connect.return_value.__enter__.return_value
    conn.execute.return_value.fetchone.return_value = (1,) if existing else None
    return engine


def _ddl(engine):
    raw = engine.raw_connection.return_value
    cur = raw.cursor.return_value.__enter__.return_value
    return raw, cur


@pytest.mark.parametrize("name", ["bob", "app_user", "svc.reader", "a-b", "user@corp", "_x1"])
def test_valid_usernames(name):
    validate_username(name)


@pytest.mark.parametrize("name,msg", [
    ("", "cannot be empty"),
    ("a" * 64, "cannot exceed"),
    ("-bob", "Invalid username format"),
    ("bob smith", "Invalid username format"),
    ("bob;drop", "Invalid username format"),
])
def test_invalid_usernames(name, msg):
    with pytest.raises(ValueError, match=msg):
        validate_username(name)


@pytest.mark.parametrize("action", ["delete_user", "lock_user"])
def test_protected_role_is_refused_before_db_access(action):
    engine = _engine()
    repo = UserRepository("postgres", engine=engine)

    with pytest.raises(ValueError, match="Cannot"):
        getattr(repo, action)("postgres")

    engine.connect.assert_not_called()
    engine.raw_connection.assert_not_called()


def test_rename_protected_role_refused():
    repo = UserRepository("postgres", engine=_engine())
    with pytest.raises(ValueError, match="Cannot rename"):
        repo.rename_user("postgres", "pg")


def test_delete_unknown_user():
    engine = _engine(existing=False)
    repo = UserRepository("postgres", engine=engine)

    with pytest.raises(ValueError, match="not found"):
        repo.delete_user("ghost")
    engine.raw_connection.assert_not_called()


def test_delete_user_runs_ddl_and_commits():
    engine = _engine()
    repo = UserRepository("postgres", engine=engine)

    repo.delete_user("bob")

    raw, cur = _ddl(engine)
    statement = cur.execute.call_args[0][0]
    assert isinstance(statement, sql.Composed)
    raw.commit.assert_called_once()
    raw.close.assert_called_once()


def test_create_existing_user_refused():
    engine = _engine(existing=True)
    repo = UserRepository("postgres", engine=engine)

    with pytest.raises(ValueError, match="already exists"):
        repo.create_user("bob", "secret")
    engine.raw_connection.assert_not_called()


def test_ddl_failure_rolls_back():
    engine = _engine()
    raw, cur = _ddl(engine)
    cur.execute.side_effect = RuntimeError("boom")
    repo = UserRepository("postgres", engine=engine)

    with pytest.raises(RuntimeError):
        repo.unlock_user("bob")

    raw.rollback.assert_called_once()
    raw.commit.assert_not_called()
    raw.close.assert_called_once()


def test_change_password_requires_value():
    repo = UserRepository("postgres", engine=_engine())
    with pytest.raises(ValueError, match="required"):
        repo.change_password("bob", "")
