"""Shared utilities for refimage."""

from __future__ import annotations

import os
import random
import string
from datetime import datetime, timezone
from pathlib import Path
import tomllib


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def random_token(length: int = 8) -> str:
    return "".join(random.choice(string.ascii_uppercase) for _ in range(length))


_TRUTHY = frozenset({"1", "true", "yes", "on"})
_QUOTES = ("\"", "'")


def getenv_str(key: str, default: str = "") -> str:
    return str(os.getenv(key) or "").strip() or default


def getenv_flag(key: str, default: bool = False) -> bool:
    raw = getenv_str(key)
    if not raw:
        return default
    return raw.lower() in _TRUTHY


def getenv_int(key: str, default: int | None = None) -> int | None:
    raw = getenv_str(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc


def parse_env_line(line: str) -> tuple[str, str] | None:
    """Split one ``.env`` line into ``(key, value)``; comments and junk give None."""
    text = line.strip().removeprefix("export ").strip()
    if not text or text.startswith("#"):
        return None
    key, sep, value = text.partition("=")
    key, value = key.strip(), value.strip()
    if not sep or not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value.startswith(_QUOTES):
        value = value[1:-1]
    return key, value


def load_dotenv(path: Path | None = None, override: bool = False) -> bool:
    env_path = path or _default_env_path()
    if not env_path.exists():
        return False
    pairs = filter(None, map(parse_env_line, env_path.read_text(encoding="utf-8").splitlines()))
    for key, value in pairs:
        if override or key not in os.environ:
            os.environ[key] = value
    return True


def _default_env_path() -> Path:
    cwd = Path.cwd()
    project_root = _find_project_root(cwd)
    if project_root:
        env_path = project_root / ".env"
        if env_path.exists():
            return env_path
    return cwd / ".env"


def _find_project_root(start: Path) -> Path | None:
    for current in (start,) + tuple(start.parents):
        pyproject = current / "pyproject.toml"
        if not pyproject.exists():
            continue
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError:
            continue
        if data.get("project", {}).get("name"):
            return current
    return None
