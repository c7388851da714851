from __future__ import annotations

import sqlite3

import pytest

from database import config
from database.engine import Database, close_database
from utils.exceptions import DatabaseBusyError
from utils.hierarchy_service import HierarchyService


@pytest.fixture()
def file_database(tmp_path, monkeypatch):
    monkeypatch.setitem(config.SQLITE_PRAGMAS, "busy_timeout", 100)
    path = tmp_path / "busy.db"
    db = Database(f"sqlite:///{path}")
    db.create_all()
    yield db, path
    db.close()


def test_sqlite_pragmas_applied(file_database) -> None:
    db, _ = file_database

    with db.engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA busy_timeout").scalar() == 100
        assert conn.exec_driver_sql("PRAGMA journal_mode").scalar().lower() == "wal"
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1


def test_lock_timeout_raises_database_busy(file_database) -> None:
    db, path = file_database
    service = HierarchyService(db)

    # 另一个连接持有写锁
    holder = sqlite3.connect(str(path), isolation_level=None)
    holder.execute("BEGIN IMMEDIATE")
    try:
        with pytest.raises(DatabaseBusyError):
            service.create_strategy({"title": "Blocked"})
    finally:
        holder.execute("ROLLBACK")
        holder.close()

    assert service.list_strategies() == []
    assert service.create_strategy({"title": "After"})["title"] == "After"


def test_close_database_resets_handle(file_database) -> None:
    db, _ = file_database

    close_database(db)

    assert db.engine is None
    assert db.SessionLocal is None
    # 再次使用时重新打开
    with db.session() as session:
        assert session.bind is not None
