"""
Tests for engine cache, ping and the startup health check
"""
import pytest
from sqlalchemy import create_engine

from dbadmin.db import connections


@pytest.fixture(autouse=True)
def engines(monkeypatch):
    """'good' is a SQLite engine, anything else fails for lack of BASE_DSN"""
    eng = create_engine("sqlite://")
    monkeypatch.setattr(connections, "_engines", {"good": eng})
    monkeypatch.setattr(connections, "BASE_DSN", None)
    monkeypatch.setattr(connections, "DEFAULT_DB", "good")
    for key in ("STARTUP_CHECK", "STARTUP_CHECK_DBS", "STARTUP_STRICT"):
        monkeypatch.delenv(key, raising=False)
    yield eng
    eng.dispose()


def test_get_engine_is_cached(engines):
    assert connections.get_engine("good") is engines


def test_get_engine_without_dsn():
    with pytest.raises(RuntimeError, match="BASE_DSN"):
        connections.get_engine("other")


def test_ping_defaults_to_default_db():
    assert connections.ping() is True
    assert connections.ping("other") is False


def test_healthcheck_uses_default_db_without_list():
    assert connections.startup_healthcheck() == 0


def test_healthcheck_counts_failures(monkeypatch):
    monkeypatch.setenv("STARTUP_CHECK_DBS", "good, other, third")
    assert connections.startup_healthcheck() == 2


def test_healthcheck_strict_raises(monkeypatch):
    monkeypatch.setenv("STARTUP_CHECK_DBS", "other")
    monkeypatch.setenv("STARTUP_STRICT", "1")
    with pytest.raises(RuntimeError, match="1 connection"):
        connections.startup_healthcheck()


def test_healthcheck_disabled(monkeypatch):
    monkeypatch.setenv("STARTUP_CHECK", "0")
    monkeypatch.setenv("STARTUP_CHECK_DBS", "other")
    assert connections.startup_healthcheck() == 0
