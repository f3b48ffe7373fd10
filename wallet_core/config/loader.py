from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..util.env import env_flag, env_float, env_int, env_str
from .schema import LoadedConfig, WalletConfig

CONFIG_PATH_ENV = "WALLET_CONFIG_PATH"


def load_yaml(path: Path | str) -> dict[str, Any]:
    cfg_path = Path(path)
    with cfg_path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise TypeError(f"Configuration root must be a mapping, got {type(payload)!r}")
    return payload


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    node = dict(raw.get("node") or {})
    retry = dict(raw.get("retry") or {})
    cache = dict(raw.get("cache") or {})

    base_url = env_str("NODE_BASE_URL")
    if base_url:
        node["base_url"] = base_url
    api_key = env_str("NODE_API_KEY")
    if api_key:
        node["api_key"] = api_key
    if "NODE_CONNECT_TIMEOUT_SEC" in os.environ:
        node["connect_timeout_s"] = env_float("NODE_CONNECT_TIMEOUT_SEC", 30.0)
    if "NODE_READ_TIMEOUT_SEC" in os.environ:
        node["read_timeout_s"] = env_float("NODE_READ_TIMEOUT_SEC", 30.0)
    if "NODE_RETRY_ATTEMPTS" in os.environ:
        retry["max_attempts"] = env_int("NODE_RETRY_ATTEMPTS", 3)
    if "NODE_RETRY_DELAY_SEC" in os.environ:
        retry["delay_s"] = env_float("NODE_RETRY_DELAY_SEC", 0.5)
    if "WALLET_CACHE_ENABLED" in os.environ:
        cache["enabled"] = env_flag("WALLET_CACHE_ENABLED", True)

    merged = dict(raw)
    merged.update({"node": node, "retry": retry, "cache": cache})
    return merged


def load_wallet_config(path: str | Path | None = None) -> LoadedConfig:
    """Load the YAML config (if any) and apply environment overrides."""

    reference = path if path is not None else env_str(CONFIG_PATH_ENV)
    cfg_path = Path(reference) if reference else None
    raw = load_yaml(cfg_path) if cfg_path is not None else {}
    data = WalletConfig.model_validate(_apply_env_overrides(raw))
    return LoadedConfig(path=cfg_path, data=data)


def validate_payload(payload: Any) -> list[str]:
    """Return a list of validation errors for ``payload``.

    The function returns an empty list when the payload is valid.
    """

    errors: list[str] = []
    try:
        WalletConfig.model_validate(payload)
    except ValidationError as exc:
        for entry in exc.errors():
            location = ".".join(str(part) for part in entry.get("loc", ()))
            message = str(entry.get("msg") or "invalid")
            errors.append(f"{location}: {message}" if location else message)
    return errors


__all__ = ["CONFIG_PATH_ENV", "load_yaml", "load_wallet_config", "validate_payload"]
