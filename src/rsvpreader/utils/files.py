"""Utility helpers for working with documents on disk."""

from __future__ import annotations

import hashlib
from pathlib import Path

BOOKMARK_KEY_PREFIX = "rsvp-bookmarks-"


def read_text(path: Path) -> str:
    """Read a UTF-8 text document, replacing undecodable bytes."""
    return path.read_text(encoding="utf-8", errors="replace")


def document_identity(text: str, name: str = "") -> str:
    """Derive the key bookmarks for a document are stored under.

    The key hashes both the name and the full content, so two files with the
    same name but different text keep separate bookmark lists. Empty text has
    no identity.
    """
    if not text:
        return ""
    sha = hashlib.sha256()
    sha.update(name.encode("utf-8"))
    sha.update(b"\0")
    sha.update(text.encode("utf-8"))
    return f"{BOOKMARK_KEY_PREFIX}{sha.hexdigest()[:16]}"
