from __future__ import annotations

import logging
import sys

from .env import env_str

_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"


def setup_logging(level: str | None = None) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root = logging.getLogger()
    root.handlers = [handler]
    resolved = (level or env_str("WALLET_LOG_LEVEL", "INFO") or "INFO").upper()
    root.setLevel(getattr(logging, resolved, logging.INFO))
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
