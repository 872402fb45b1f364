"""
用户业务逻辑。

职责：
- 登录：按用户名查找凭据、比较密码、签发 token
- 用户 CRUD 的字段校验
"""

from __future__ import annotations

import hmac
import logging
import sqlite3

from ecommerce.core.security import AuthError
from ecommerce.core.tokens import TokenCodec
from ecommerce.db import models

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "invalid username or password"


class NotFoundError(RuntimeError):
    """资源不存在。"""


class ValidationError(ValueError):
    """请求字段不合法。"""


class InvalidCredentialsError(AuthError):
    """用户不存在、存储出错、密码错误都使用同一条信息，避免泄露账号是否存在。"""

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS_MESSAGE)


def _password_matches(supplied: str, stored: str) -> bool:
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))


def login(conn: sqlite3.Connection, codec: TokenCodec, *, username: str, password: str) -> str:
    """校验用户名/密码并签发 token。

异常：
    InvalidCredentialsError：查找失败或密码不匹配
    SigningError：签名失败（原样抛出）
    """

    try:
        user = models.get_user_by_username(conn, username)
    except sqlite3.Error as exc:
        logger.warning("credential lookup failed for %r: %s", username, exc)
        raise InvalidCredentialsError() from exc
    if user is None:
        logger.info("login failed for %r", username)
        raise InvalidCredentialsError()
    if not _password_matches(password, user.password):
        logger.info("login failed for %r", username)
        raise InvalidCredentialsError()

    token = codec.issue(username)
    logger.info("login succeeded for %r", username)
    return token


def _require_fields(**values: str | None) -> dict[str, str]:
    cleaned = {k: (v or "").strip() for k, v in values.items()}
    if any(v == "" for v in cleaned.values()):
        raise ValidationError("all fields are required")
    return cleaned


def register_user(
    conn: sqlite3.Connection,
    *,
    name: str | None,
    email: str | None,
    username: str | None,
    password: str | None,
) -> models.User:
    fields = _require_fields(name=name, email=email, username=username)
    if not password:
        raise ValidationError("all fields are required")

    user = models.create_user(conn, password=password, **fields)
    logger.info("user registered: id=%s username=%r", user.id, user.username)
    return user


def get_user_or_404(conn: sqlite3.Connection, *, user_id: int) -> models.User:
    user = models.get_user_by_id(conn, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(conn: sqlite3.Connection) -> list[models.User]:
    return models.list_users(conn)


def update_user(
    conn: sqlite3.Connection,
    *,
    user_id: int,
    name: str | None,
    email: str | None,
    username: str | None,
    password: str | None,
) -> models.User:
    """整体更新：所有字段都必须提供。"""

    fields = _require_fields(name=name, email=email, username=username)
    if not password:
        raise ValidationError("all fields are required")
    get_user_or_404(conn, user_id=user_id)

    user = models.update_user_fields(conn, user_id=user_id, fields={**fields, "password": password})
    logger.info("user updated: id=%s", user_id)
    return user


def delete_user(conn: sqlite3.Connection, *, user_id: int) -> None:
    if not models.delete_user(conn, user_id):
        raise NotFoundError("User not found")
    logger.info("user deleted: id=%s", user_id)


def user_to_dict(user: models.User) -> dict:
    """对外输出，不包含 password。"""

    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "username": user.username,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }
