"""
服务启动入口。

运行方式：
    python main.py
"""

from __future__ import annotations

import os

import uvicorn

from ecommerce.api.app import create_app
from ecommerce.core.config import load_settings
from ecommerce.logging_config import configure_logging, get_logging_config


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)

    host = os.environ.get("HOST", "0.0.0.0").strip() or "0.0.0.0"
    port_raw = os.environ.get("PORT", "8080").strip() or "8080"
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ValueError(f"PORT must be int, got: {port_raw!r}") from exc

    uvicorn.run(app, host=host, port=port, log_config=get_logging_config(settings.log_level))


if __name__ == "__main__":
    main()
