"""
数据库引擎和会话管理

Database 对象封装引擎与会话工厂，由服务层通过构造函数注入；
测试中每个用例使用独立的内存数据库实例。
"""
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from database.config import DATABASE_URL, SQLALCHEMY_CONFIG, SQLITE_PRAGMAS
from utils.exceptions import DatabaseBusyError

logger = logging.getLogger(__name__)


def _is_lock_timeout(error: OperationalError) -> bool:
    """SQLite 在 busy_timeout 耗尽后报告 'database is locked'"""
    return "database is locked" in str(error.orig).lower()


class Database:
    """数据库句柄：显式 open/close 生命周期"""

    def __init__(self, url: str = DATABASE_URL, **engine_options):
        self.url = url
        self.engine_options = {**SQLALCHEMY_CONFIG, **engine_options}
        self.engine = None
        self.SessionLocal: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def open(self) -> "Database":
        """创建引擎与会话工厂（重复调用无副作用）"""
        if self.engine is not None:
            return self

        connect_args = {"check_same_thread": False} if self.is_sqlite else {}
        self.engine = create_engine(self.url, connect_args=connect_args, **self.engine_options)

        if self.is_sqlite:
            event.listen(self.engine, "connect", _set_sqlite_pragma)

        # 创建会话工厂
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )
        return self

    def close(self) -> None:
        """关闭数据库连接"""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None

    def create_all(self) -> None:
        """创建所有表"""
        from database.models.base import Base

        self.open()
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        获取数据库会话的上下文管理器，退出时提交，异常时回滚

        Example:
            with db.session() as session:
                session.query(Strategy).all()
        """
        self.open()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except OperationalError as e:
            session.rollback()
            if _is_lock_timeout(e):
                raise DatabaseBusyError("数据库繁忙（锁等待超时），请稍后重试") from e
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """为SQLite设置 WAL、busy_timeout 与外键约束"""
    cursor = dbapi_conn.cursor()
    cursor.execute(f"PRAGMA journal_mode={SQLITE_PRAGMAS['journal_mode']}")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_PRAGMAS['busy_timeout']}")
    cursor.execute(f"PRAGMA foreign_keys={SQLITE_PRAGMAS['foreign_keys']}")
    cursor.close()
    logger.debug("SQLite PRAGMA 已设置: %s", SQLITE_PRAGMAS)


# 进程级默认数据库句柄（Web 应用使用）
default_database = Database()


def init_database(database: Database = default_database) -> Database:
    """
    初始化数据库
    - 创建所有表
    """
    database.create_all()
    logger.info("数据库初始化完成: %s", database.url)
    return database


def close_database(database: Database = default_database) -> None:
    """关闭数据库连接"""
    database.close()
    logger.info("数据库连接已关闭")
