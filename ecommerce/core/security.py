"""
安全与鉴权。

约定客户端通过 `Authorization: Bearer <token>` 传递 token。
AuthGate 只依赖 TokenVerifier 能力（verify_token），不关心具体签名方案，
因此测试时可以注入假的 verifier。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecommerce.core.tokens import TokenVerifier

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
MISSING_TOKEN_MESSAGE = "Unauthorized - Missing Token"
INVALID_TOKEN_MESSAGE = "invalid token"


class AuthError(Exception):
    """鉴权失败。"""


class GateRejected(AuthError):
    """请求被 AuthGate 拒绝；message 直接作为 401 响应体。"""

    status_code = 401

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def parse_bearer_token(authorization_header: str | None) -> str | None:
    """从 Authorization 头解析 Bearer token。

返回：
    - 头以字面量 "Bearer " 开头：去掉前缀后的剩余部分（可能为空串，交给 verifier 判定）
    - 头不存在或前缀不匹配：None
    """

    if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
        return None
    return authorization_header[len(BEARER_PREFIX) :]


class AuthGate:
    """受保护路由的入口检查：没有可信主体就不放行。

每个请求只调用一次 verifier，不重试；verifier 的具体错误类型不会透出给调用方。
    """

    def __init__(self, verifier: "TokenVerifier") -> None:
        self.verifier = verifier

    def authenticate(self, authorization_header: str | None) -> str:
        token = parse_bearer_token(authorization_header)
        if token is None:
            logger.info("rejecting request: missing bearer token")
            raise GateRejected(MISSING_TOKEN_MESSAGE)
        try:
            principal = self.verifier.verify_token(token)
        except AuthError as exc:
            logger.info("rejecting request: %s: %s", type(exc).__name__, exc)
            raise GateRejected(INVALID_TOKEN_MESSAGE) from exc
        logger.debug("request authenticated as %s", principal)
        return principal
