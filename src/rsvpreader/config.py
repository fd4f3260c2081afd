"""Application configuration defaults."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

DEFAULT_WPM = 300
MIN_WPM = 50
MAX_WPM = 1000
WPM_STEP = 10


def clamp_wpm(value: int) -> int:
    """Snap a requested reading speed to the nearest step inside the supported range."""
    snapped = round(int(value) / WPM_STEP) * WPM_STEP
    return max(MIN_WPM, min(snapped, MAX_WPM))


def _get_default_db_path() -> Path:
    """Get the default bookmark database path based on platform and execution context."""
    user_db = Path.home() / "Documents" / "RSVPReader" / "bookmarks.db"

    # When running as a frozen app (PyInstaller bundle)
    if getattr(sys, "frozen", False):
        return user_db

    # When running from source, prefer local data/ if it exists
    local_db = Path("data/bookmarks.db")
    if local_db.parent.exists():
        return local_db

    return user_db


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    wpm: int = DEFAULT_WPM
    bookmark_limit: int = 10
    label_chars: int = 20

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        self.wpm = clamp_wpm(self.wpm)

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path
