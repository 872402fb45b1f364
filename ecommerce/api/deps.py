"""
FastAPI 依赖注入（鉴权、数据库连接、token 签发器）。
"""

from __future__ import annotations

import sqlite3

from fastapi import Header, Request

from ecommerce.core.security import AuthGate
from ecommerce.core.tokens import TokenCodec


def get_db(request: Request) -> sqlite3.Connection:
    conn = getattr(request.app.state, "db", None)
    if conn is None:
        raise RuntimeError("app database not initialized")
    return conn


def get_token_codec(request: Request) -> TokenCodec:
    codec = getattr(request.app.state, "token_codec", None)
    if codec is None:
        raise RuntimeError("app token codec not initialized")
    return codec


def get_auth_gate(request: Request) -> AuthGate:
    gate = getattr(request.app.state, "auth_gate", None)
    if gate is None:
        raise RuntimeError("app auth gate not initialized")
    return gate


def require_auth(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> str:
    """校验 Bearer token，通过后把主体挂到 request.state.principal。

失败时由 AuthGate 抛出 GateRejected，app 中注册的处理器会把它转成 401 纯文本响应。
    """

    principal = get_auth_gate(request).authenticate(authorization)
    request.state.principal = principal
    return principal
