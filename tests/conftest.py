from __future__ import annotations

import os

import pytest

os.environ.setdefault("WALLET_LOG_LEVEL", "WARNING")


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # a developer's shell or .env must not leak into tests
    monkeypatch.delenv("WALLET_CONFIG_PATH", raising=False)
    monkeypatch.delenv("WALLET_CACHE_ENABLED", raising=False)
