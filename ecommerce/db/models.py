"""
数据模型（轻量 CRUD）。

说明：
- 不引入 ORM，使用 sqlite3 + 参数化 SQL。
- users.password 目前按原值存储（与旧服务的数据兼容），比较时使用常量时间比较。
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

from ecommerce.db.engine import utc_timestamp


# SQLite INTEGER 主键的上界
MAX_ROW_ID = 2**63 - 1


class DbError(RuntimeError):
    """数据库操作错误。"""


class AlreadyExistsError(DbError):
    """唯一约束等导致的重复创建。"""


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    username: str
    password: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float
    created_at: str
    updated_at: str


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=int(row["id"]),
        name=str(row["name"]),
        email=str(row["email"]),
        username=str(row["username"]),
        password=str(row["password"]),
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


def _row_to_product(row: sqlite3.Row) -> Product:
    return Product(
        id=int(row["id"]),
        name=str(row["name"]),
        price=float(row["price"]),
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


def _update_fields(
    conn: sqlite3.Connection,
    *,
    table: str,
    row_id: int,
    fields: dict[str, Any],
) -> None:
    forbidden = {"id", "created_at"}
    bad = forbidden.intersection(fields.keys())
    if bad:
        raise ValueError(f"fields not updatable: {sorted(bad)}")

    fields = dict(fields)
    fields["updated_at"] = utc_timestamp()

    columns = ", ".join([f"{k} = ?" for k in fields.keys()])
    values = list(fields.values())
    values.append(int(row_id))

    try:
        cur = conn.execute(f"UPDATE {table} SET {columns} WHERE id = ?", values)
    except sqlite3.IntegrityError as exc:
        raise AlreadyExistsError(f"{table} update violates unique constraint: id={row_id}") from exc
    if cur.rowcount != 1:
        raise DbError(f"{table} row not found or update failed: id={row_id}")
    conn.commit()


# ---------- users ----------


def create_user(
    conn: sqlite3.Connection,
    *,
    name: str,
    email: str,
    username: str,
    password: str,
) -> User:
    """创建用户（username 唯一）。"""

    now = utc_timestamp()
    try:
        cur = conn.execute(
            """
            INSERT INTO users (name, email, username, password, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (name, email, username, password, now, now),
        )
    except sqlite3.IntegrityError as exc:
        raise AlreadyExistsError(f"user already exists: username={username}") from exc

    conn.commit()
    got = get_user_by_id(conn, int(cur.lastrowid))
    if got is None:
        raise DbError("failed to read user after create")
    return got


def get_user_by_id(conn: sqlite3.Connection, user_id: int) -> User | None:
    row = conn.execute("SELECT * FROM users WHERE id = ?", (int(user_id),)).fetchone()
    return _row_to_user(row) if row else None


def get_user_by_username(conn: sqlite3.Connection, username: str) -> User | None:
    row = conn.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
    return _row_to_user(row) if row else None


def list_users(conn: sqlite3.Connection) -> list[User]:
    rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
    return [_row_to_user(row) for row in rows]


def update_user_fields(conn: sqlite3.Connection, *, user_id: int, fields: dict[str, Any]) -> User:
    """按 id 更新用户字段（仅用于内部受控调用）。"""

    if fields:
        _update_fields(conn, table="users", row_id=user_id, fields=fields)
    got = get_user_by_id(conn, user_id)
    if got is None:
        raise DbError(f"user not found: id={user_id}")
    return got


def delete_user(conn: sqlite3.Connection, user_id: int) -> bool:
    cur = conn.execute("DELETE FROM users WHERE id = ?", (int(user_id),))
    conn.commit()
    return cur.rowcount == 1


# ---------- products ----------


def create_product(conn: sqlite3.Connection, *, name: str, price: float) -> Product:
    now = utc_timestamp()
    cur = conn.execute(
        "INSERT INTO products (name, price, created_at, updated_at) VALUES (?, ?, ?, ?)",
        (name, float(price), now, now),
    )
    conn.commit()
    got = get_product_by_id(conn, int(cur.lastrowid))
    if got is None:
        raise DbError("failed to read product after create")
    return got


def get_product_by_id(conn: sqlite3.Connection, product_id: int) -> Product | None:
    row = conn.execute("SELECT * FROM products WHERE id = ?", (int(product_id),)).fetchone()
    return _row_to_product(row) if row else None


def list_products(conn: sqlite3.Connection) -> list[Product]:
    rows = conn.execute("SELECT * FROM products ORDER BY id").fetchall()
    return [_row_to_product(row) for row in rows]


def update_product_fields(conn: sqlite3.Connection, *, product_id: int, fields: dict[str, Any]) -> Product:
    if fields:
        _update_fields(conn, table="products", row_id=product_id, fields=fields)
    got = get_product_by_id(conn, product_id)
    if got is None:
        raise DbError(f"product not found: id={product_id}")
    return got


def delete_product(conn: sqlite3.Connection, product_id: int) -> bool:
    cur = conn.execute("DELETE FROM products WHERE id = ?", (int(product_id),))
    conn.commit()
    return cur.rowcount == 1
