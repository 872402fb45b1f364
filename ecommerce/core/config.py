"""
配置加载模块。

设计目标：
1. 统一从环境变量读取配置，避免散落在各处。
2. 签名密钥在进程启动时固定下来，通过 Settings 注入 TokenCodec，不使用模块级可变变量。
3. 缺失或格式错误的配置直接抛 ConfigError，错误信息里带上变量名。
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

DEFAULT_ENV_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))
DEFAULT_SQLITE_PATH = "./data/ecommerce.sqlite3"
DEFAULT_TOKEN_TTL_MINUTES = 120
MAX_TOKEN_TTL_MINUTES = 24 * 60


class ConfigError(ValueError):
    """配置错误（缺失、格式不正确等）。"""


def _env(environ: Mapping[str, str], key: str) -> str | None:
    """去掉首尾空白；未设置或全空白都视为缺省。"""

    return (environ.get(key) or "").strip() or None


def _token_ttl_minutes(environ: Mapping[str, str]) -> int:
    raw = _env(environ, "TOKEN_TTL_MINUTES")
    if raw is None:
        return DEFAULT_TOKEN_TTL_MINUTES
    try:
        minutes = int(raw)
    except ValueError as exc:
        raise ConfigError(f"TOKEN_TTL_MINUTES must be int, got: {raw!r}") from exc
    if not 1 <= minutes <= MAX_TOKEN_TTL_MINUTES:
        raise ConfigError(f"TOKEN_TTL_MINUTES must be within 1..{MAX_TOKEN_TTL_MINUTES}, got: {minutes}")
    return minutes


@dataclass(frozen=True)
class Settings:
    """项目配置。

字段说明：
    jwt_secret:
        token 签名/校验共用的对称密钥（HS256），进程生命周期内不变。
    token_ttl_minutes:
        token 有效期（分钟），默认 2 小时。
    sqlite_path:
        SQLite 数据库文件路径，测试可用 ":memory:"。
    log_level:
        日志等级（INFO/DEBUG...）。
    """

    jwt_secret: str
    token_ttl_minutes: int = DEFAULT_TOKEN_TTL_MINUTES
    sqlite_path: str = DEFAULT_SQLITE_PATH
    log_level: str = "INFO"


def load_settings(
    environ: Mapping[str, str] | None = None,
    *,
    env_path: str | None = None,
) -> Settings:
    """从环境变量加载配置。

注意：
    - 为了方便测试，允许注入 environ（此时不读取 .env）。
    - JWT_SECRET 必须存在。
    """

    if environ is None:
        load_dotenv(env_path or DEFAULT_ENV_PATH)
        env: Mapping[str, str] = os.environ
    else:
        env = environ

    jwt_secret = _env(env, "JWT_SECRET")
    if jwt_secret is None:
        raise ConfigError("missing required environment variable: JWT_SECRET")

    return Settings(
        jwt_secret=jwt_secret,
        token_ttl_minutes=_token_ttl_minutes(env),
        sqlite_path=_env(env, "SQLITE_PATH") or DEFAULT_SQLITE_PATH,
        log_level=(_env(env, "LOG_LEVEL") or "INFO").upper(),
    )
