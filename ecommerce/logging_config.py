"""
日志配置（dictConfig），同时交给 uvicorn 使用。

健康检查请求很频繁，访问日志里过滤掉 /healthz。
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any


class HealthCheckFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if "/healthz" in message and "GET" in message:
                return False
        return True


def get_logging_config(log_level: str = "INFO") -> dict[str, Any]:
    level = (log_level or "INFO").upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {"()": HealthCheckFilter},
        },
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            "ecommerce": {"handlers": ["default"], "level": level, "propagate": False},
        },
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(log_level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(log_level))
