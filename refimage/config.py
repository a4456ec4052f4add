"""Environment-driven settings."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

from .utils import getenv_flag, getenv_int, getenv_str

DEFAULT_TOOL = "mogrify"
DEFAULT_DATA_DIR = Path("features/support/data")
DEFAULT_DUPLICATE_THRESHOLD = 15


@dataclass(frozen=True)
class Settings:
    tool: str = DEFAULT_TOOL
    tool_timeout_s: int | None = None
    data_dir: Path = DEFAULT_DATA_DIR
    scratch_dir: Path = Path(tempfile.gettempdir())
    duplicate_check: bool = False
    duplicate_threshold: int = DEFAULT_DUPLICATE_THRESHOLD
    events_path: Path | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        events = getenv_str("REFIMAGE_EVENTS")
        scratch = getenv_str("REFIMAGE_SCRATCH_DIR")
        threshold = getenv_int("REFIMAGE_DUPLICATE_THRESHOLD", DEFAULT_DUPLICATE_THRESHOLD)
        return cls(
            tool=getenv_str("REFIMAGE_TOOL", DEFAULT_TOOL),
            tool_timeout_s=_positive_or_none(getenv_int("REFIMAGE_TOOL_TIMEOUT_S")),
            data_dir=Path(getenv_str("REFIMAGE_DATA_DIR") or DEFAULT_DATA_DIR),
            scratch_dir=Path(scratch) if scratch else Path(tempfile.gettempdir()),
            duplicate_check=getenv_flag("REFIMAGE_DUPLICATE_CHECK"),
            duplicate_threshold=DEFAULT_DUPLICATE_THRESHOLD if threshold is None else threshold,
            events_path=Path(events).expanduser() if events else None,
        )


def _positive_or_none(value: int | None) -> int | None:
    # Zero or negative disables the timeout.
    if value is None or value <= 0:
        return None
    return value
