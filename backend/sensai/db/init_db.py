"""
数据库初始化脚本
负责创建数据库引擎和表结构
"""

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

# 导入模型，确保 SQLModel.metadata 中注册了所有表
from sensai.models import User, Resume, IndustryInsight, Assessment  # noqa: F401
from sensai.logger import logger

# update_user 事务的墙钟预算（秒）
DEFAULT_TRANSACTION_TIMEOUT = 10.0


def transaction_timeout_seconds() -> float:
    return float(os.getenv("TRANSACTION_TIMEOUT_SECONDS", DEFAULT_TRANSACTION_TIMEOUT))


def get_database_url() -> str:
    """
    获取数据库连接 URL
    优先使用 DATABASE_URL，其次 DATABASE_PATH 指向的 SQLite 文件
    """
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    db_path = os.environ.get("DATABASE_PATH", "database.db")
    # 确保路径是绝对路径
    if not os.path.isabs(db_path):
        # 从 backend 目录解析
        project_root = Path(__file__).parent.parent.parent
        db_path = str(project_root / db_path)
    return f"sqlite:///{db_path}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite 默认不检查外键，users.industry -> industry_insights.industry 依赖它
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, lock_timeout: Optional[float] = None) -> Engine:
    """
    按 URL 创建引擎
    SQLite 连接会打开外键检查；锁等待默认等于事务预算，
    拿不到写锁的事务不会在预算之外继续阻塞

    Args:
        database_url: 数据库连接 URL
        lock_timeout: SQLite 锁等待（秒），默认读取 TRANSACTION_TIMEOUT_SECONDS
    """
    is_sqlite = database_url.startswith("sqlite")
    connect_args = {}
    if is_sqlite:
        if lock_timeout is None:
            lock_timeout = transaction_timeout_seconds()
        connect_args = {"check_same_thread": False, "timeout": lock_timeout}

    engine = create_engine(
        database_url,
        echo=False,  # 设置为 True 可查看 SQL 语句
        pool_pre_ping=not is_sqlite,
        connect_args=connect_args
    )

    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def get_engine() -> Engine:
    """
    创建并返回数据库引擎
    """
    return create_db_engine(get_database_url())


def create_tables(engine: Engine) -> None:
    """
    创建所有数据库表
    SQLModel 会自动根据模型创建表结构
    """
    SQLModel.metadata.create_all(engine)
    logger.info(f"[init_db] 数据表已就绪: {engine.url.render_as_string(hide_password=True)}")


def init_db() -> Engine:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构
    """
    logger.info("[init_db] 开始初始化数据库")
    engine = get_engine()
    create_tables(engine)
    logger.info("[init_db] 数据库初始化完成")
    return engine


if __name__ == "__main__":
    # 直接运行此脚本时，执行数据库初始化
    init_db()
