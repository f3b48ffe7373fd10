from __future__ import annotations

from .util.env import load_env_file

# Load `.env` once package is imported. Existing variables are preserved.
load_env_file()
