"""Configuration constants, .env parsing, and poll interval settings."""

from __future__ import annotations

import os
from pathlib import Path


def read_env_file(keys: list[str]) -> dict[str, str]:
    """Parse .env file and return values for requested keys.

    Does NOT load into os.environ; callers decide what to do with values.
    """
    env_file = Path.cwd() / ".env"
    try:
        content = env_file.read_text()
    except OSError:
        return {}

    result: dict[str, str] = {}
    wanted = set(keys)

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        eq_idx = trimmed.find("=")
        if eq_idx == -1:
            continue
        key = trimmed[:eq_idx].strip()
        if key not in wanted:
            continue
        value = trimmed[eq_idx + 1 :].strip()
        if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
            value = value[1:-1]
        if value:
            result[key] = value

    return result


def _setting(name: str, default: str) -> str:
    return os.environ.get(name) or _env_config.get(name, default)


def _interval(name: str, default: float) -> float:
    """Read a poll interval in seconds, ignoring non-positive or unparsable values."""
    raw = _setting(name, "")
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# Read config values from .env (falls back to os.environ).
_env_config = read_env_file(
    ["GROUPIFY_ORIGIN", "ADMIN_POLL_INTERVAL", "JOIN_POLL_INTERVAL", "UPDATE_POLL_INTERVAL", "STORE_DIR"]
)

# Origin the join URL is scoped to
GROUPIFY_ORIGIN: str = _setting("GROUPIFY_ORIGIN", "http://localhost:3000").rstrip("/")

ADMIN_POLL_INTERVAL: float = _interval("ADMIN_POLL_INTERVAL", 3.0)  # seconds
JOIN_POLL_INTERVAL: float = _interval("JOIN_POLL_INTERVAL", 3.0)
UPDATE_POLL_INTERVAL: float = _interval("UPDATE_POLL_INTERVAL", 1.0)

MIN_GROUP_COUNT: int = 2
STORAGE_KEY_PREFIX: str = "groupify_session_"

# Absolute paths
PROJECT_ROOT: Path = Path.cwd()
STORE_DIR: Path = Path(_setting("STORE_DIR", str(PROJECT_ROOT / "store"))).resolve()
STORE_FILENAME: str = "groupify.db"
