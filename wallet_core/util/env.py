"""Environment helpers: ``.env`` loading and typed lookups."""

from __future__ import annotations

import os
from pathlib import Path

_COMMENT_PREFIXES: tuple[str, ...] = ("#", "//")
_TRUTHY = {"1", "true", "yes", "on"}


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def load_env_file(path: str | Path = ".env") -> None:
    """Populate ``os.environ`` from ``KEY=value`` lines in ``path``.

    Variables that are already set win over the file. Blank lines, comment
    lines and ``export `` prefixes are handled.
    """

    env_path = Path(path)
    if not env_path.is_file():
        return
    try:
        content = env_path.read_text(encoding="utf-8")
    except OSError:
        return

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        os.environ.setdefault(key, _strip_quotes(value.strip()))


def env_str(name: str, default: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


__all__ = ["load_env_file", "env_str", "env_flag", "env_float", "env_int"]
