"""
SQLite 数据库引擎与初始化。

约定：
- 使用单文件 SQLite（测试用 ":memory:"）。
- 不实现迁移：表结构变更时删除旧数据库文件重建。
"""

from __future__ import annotations

import os
import sqlite3
from datetime import datetime, timezone


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


MEMORY_PATH = ":memory:"


def connect_sqlite(sqlite_path: str, *, busy_timeout_ms: int = 5000) -> sqlite3.Connection:
    """连接 SQLite。

文件库使用 WAL 日志；内存库只打开外键约束。
    """

    in_memory = sqlite_path == MEMORY_PATH
    if not in_memory:
        os.makedirs(os.path.dirname(os.path.abspath(sqlite_path)), exist_ok=True)

    conn = sqlite3.connect(sqlite_path, check_same_thread=False, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    if not in_memory:
        conn.execute("PRAGMA journal_mode = WAL;")
        conn.execute("PRAGMA synchronous = NORMAL;")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """初始化数据库表（如果不存在则创建）。"""

    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS users (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          name TEXT NOT NULL,
          email TEXT NOT NULL,
          username TEXT NOT NULL UNIQUE,
          password TEXT NOT NULL,
          created_at TEXT NOT NULL,
          updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS products (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          name TEXT NOT NULL,
          price REAL NOT NULL,
          created_at TEXT NOT NULL,
          updated_at TEXT NOT NULL
        );
        """
    )
    conn.commit()
