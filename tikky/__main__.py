"""
Uvicorn launcher for the counter API.

Usage:
  python -m tikky [--host 0.0.0.0] [--port 8080] [--log-level info]

Defaults come from the environment (HOST, PORT, LOG_LEVEL, REDIS_ADDR, ...).
The process exits with status 1 if Redis cannot be reached at startup.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

import uvicorn

from tikky.core.config import get_settings
from tikky.core.logging import configure_logging
from tikky.main import create_app
from tikky.services.counter_store import StoreError, connect_store

logger = logging.getLogger("app")


def main(argv: Optional[list[str]] = None) -> None:
    cfg = get_settings()

    parser = argparse.ArgumentParser(description="Run the tikky counter API (uvicorn)")
    parser.add_argument("--host", default=cfg.host, help="Bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=cfg.port, help="Port (default: %(default)s)")
    parser.add_argument("--log-level", default=cfg.log_level, help="Log level (default: %(default)s)")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        store = connect_store(cfg)
    except StoreError as exc:
        logger.error("Failed to connect to redis", extra={"event": {"err": str(exc)}})
        raise SystemExit(1) from exc
    logger.info("Successfully connected to Redis")

    try:
        logger.info("Server starting", extra={"event": {"host": args.host, "port": args.port}})
        uvicorn.run(
            create_app(store),
            host=args.host,
            port=args.port,
            log_level=args.log_level.lower(),
            log_config=None,
            timeout_graceful_shutdown=cfg.shutdown_timeout,
        )
    finally:
        store.close()
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
