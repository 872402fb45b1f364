"""
FastAPI 应用装配。

约定：
- 使用 SQLite 作为持久化，连接在 lifespan 中打开/关闭。
- /login、/users、/healthz 不需要鉴权；/products 整组经过 AuthGate。
- 测试可以注入 token_verifier 替换真实的签名校验。
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from ecommerce.api.routes.auth import router as auth_router
from ecommerce.api.routes.health import router as health_router
from ecommerce.api.routes.products import router as products_router
from ecommerce.api.routes.users import router as users_router
from ecommerce.core.config import Settings, load_settings
from ecommerce.core.security import AuthGate, GateRejected
from ecommerce.core.tokens import JwtTokenVerifier, TokenCodec, TokenVerifier
from ecommerce.db.engine import connect_sqlite, init_db


def create_app(
    settings: Settings,
    *,
    token_codec: TokenCodec | None = None,
    token_verifier: TokenVerifier | None = None,
) -> FastAPI:
    codec = token_codec or TokenCodec.from_settings(settings)
    verifier = token_verifier or JwtTokenVerifier(codec)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        conn = connect_sqlite(settings.sqlite_path)
        init_db(conn)
        app.state.db = conn
        app.state.token_codec = codec
        app.state.auth_gate = AuthGate(verifier)
        try:
            yield
        finally:
            conn.close()

    app = FastAPI(title="ecommerce", version="0.1.0", lifespan=lifespan)

    @app.exception_handler(GateRejected)
    async def _gate_rejected(request: Request, exc: GateRejected) -> PlainTextResponse:
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(products_router)
    return app


def build_app() -> FastAPI:
    """从环境变量加载配置并构建应用。"""

    settings = load_settings()
    return create_app(settings)
