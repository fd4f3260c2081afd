"""A single reader: one document, one scheduler, one bookmark list."""

from __future__ import annotations

import logging
from typing import Tuple

from rsvpreader.bookmarks.storage import KeyValueStore, MemoryKeyValueStore
from rsvpreader.bookmarks.store import BookmarkStore
from rsvpreader.config import AppConfig
from rsvpreader.models import Bookmark, Frame
from rsvpreader.reading.scheduler import PlaybackScheduler, TimerBackend
from rsvpreader.reading.tokenizer import tokenize
from rsvpreader.utils.files import document_identity

LOGGER = logging.getLogger(__name__)


class ReaderSession:
    """Coordinates tokenizing, playback and bookmarks for the loaded text."""

    def __init__(
        self,
        kv: KeyValueStore | None = None,
        *,
        config: AppConfig | None = None,
        timer: TimerBackend | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.scheduler = PlaybackScheduler(timer, wpm=self.config.wpm)
        self.bookmarks = BookmarkStore(
            kv if kv is not None else MemoryKeyValueStore(),
            limit=self.config.bookmark_limit,
            label_chars=self.config.label_chars,
        )
        self.name = ""

    @property
    def document_id(self) -> str:
        return self.bookmarks.document_id

    @property
    def frame(self) -> Frame:
        return self.scheduler.frame

    def load_text(self, text: str, name: str = "") -> int:
        """Load a new document and return its word count."""
        tokens = tokenize(text)
        self.name = name
        self.scheduler.load(tokens)
        self.bookmarks.switch_document(document_identity(text, name))
        LOGGER.info("Loaded %s (%d words)", name or "text", len(tokens))
        return len(tokens)

    def save_bookmark(self, label: str | None = None) -> Bookmark | None:
        return self.bookmarks.create(self.scheduler.frame, label)

    def jump_to(self, bookmark: Bookmark) -> None:
        """Move to a bookmark and pause so reading does not race ahead."""
        self.scheduler.seek(self.bookmarks.load(bookmark), pause=True)

    def delete_bookmark(self, bookmark_id: str) -> bool:
        return self.bookmarks.delete(bookmark_id)

    def list_bookmarks(self) -> Tuple[Bookmark, ...]:
        return self.bookmarks.bookmarks
