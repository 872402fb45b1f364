"""
签名 token 的签发与校验。

token 格式为标准 JWT（HS256）：header.payload.signature 三段 base64url，
payload 至少包含：
    - username：主体（登录用户名）
    - exp：过期时间（Unix 秒）

服务端不保存会话，校验完全依赖签名与 exp；因此不支持吊销。
"""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

import jwt

from ecommerce.core.config import Settings
from ecommerce.core.security import AuthError

ALGORITHM = "HS256"
PRINCIPAL_CLAIM = "username"


class TokenError(AuthError):
    """token 校验失败的基类。"""


class MalformedTokenError(TokenError):
    """无法解析 token 结构。"""


class InvalidSignatureError(TokenError):
    """签名不匹配（或使用了非 HS256 算法）。"""


class TokenExpiredError(TokenError):
    """当前时间已不早于 exp。"""


class MissingClaimError(TokenError):
    """缺少主体或 exp 声明。"""


class SigningError(RuntimeError):
    """签发 token 时底层签名失败（不应发生）。"""


class TokenVerifier(Protocol):
    def verify_token(self, token: str) -> str: ...


class TokenCodec:
    def __init__(self, secret: str, *, ttl_seconds: int = 2 * 60 * 60, clock: Callable[[], float] = time.time) -> None:
        if not secret:
            raise ValueError("secret must not be empty")
        self._secret = secret
        self._ttl_seconds = int(ttl_seconds)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Callable[[], float] = time.time) -> "TokenCodec":
        return cls(settings.jwt_secret, ttl_seconds=settings.token_ttl_minutes * 60, clock=clock)

    def issue(self, principal: str) -> str:
        """为 principal 签发 token，有效期 ttl_seconds。"""

        claims = {
            PRINCIPAL_CLAIM: principal,
            "exp": int(self._clock()) + self._ttl_seconds,
        }
        try:
            return jwt.encode(claims, self._secret, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise SigningError(f"failed to sign token: {exc}") from exc

    def decode(self, token: str) -> str:
        """校验签名与过期时间，返回 principal。

异常：
    MalformedTokenError / InvalidSignatureError / TokenExpiredError / MissingClaimError
        """

        try:
            # exp 由下面按注入的时钟自行判断
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignatureError("token signature mismatch") from exc
        except jwt.InvalidAlgorithmError as exc:
            raise InvalidSignatureError(f"token algorithm not allowed: {exc}") from exc
        except jwt.PyJWTError as exc:
            raise MalformedTokenError(f"malformed token: {exc}") from exc

        exp = claims.get("exp")
        if exp is None:
            raise MissingClaimError("token has no exp claim")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise MalformedTokenError(f"exp claim must be numeric, got: {exp!r}")
        if self._clock() >= exp:
            raise TokenExpiredError("token expired")

        principal = claims.get(PRINCIPAL_CLAIM)
        if not isinstance(principal, str):
            raise MissingClaimError(f"token has no string {PRINCIPAL_CLAIM} claim")
        return principal


class JwtTokenVerifier:
    """TokenVerifier 的生产实现：直接委托给 TokenCodec.decode。"""

    def __init__(self, codec: TokenCodec) -> None:
        self.codec = codec

    def verify_token(self, token: str) -> str:
        return self.codec.decode(token)
