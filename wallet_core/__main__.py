"""Launch the wallet API under uvicorn."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Sequence

import uvicorn

from .config.loader import CONFIG_PATH_ENV
from .util.env import env_int, env_str
from .util.logging import setup_logging

LOGGER = logging.getLogger("wallet_core.run")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wallet core API server.")
    parser.add_argument(
        "--host",
        default=env_str("WALLET_API_HOST", "127.0.0.1"),
        help="bind host for uvicorn",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=env_int("WALLET_API_PORT", 8000),
        help="bind port for uvicorn",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"YAML config path (overrides ${CONFIG_PATH_ENV})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="enable uvicorn autoreload (development only)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    setup_logging()
    args = _build_parser().parse_args(argv)
    if args.config:
        os.environ[CONFIG_PATH_ENV] = args.config
    LOGGER.info("starting wallet api host=%s port=%s", args.host, args.port)
    uvicorn.run(
        "wallet_core.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=bool(args.reload),
        log_config=None,
    )
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
