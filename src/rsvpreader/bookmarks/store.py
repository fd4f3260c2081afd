"""Per-document bookmark lists backed by a key-value store."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, List, Tuple

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from rsvpreader.bookmarks.storage import KeyValueStore
from rsvpreader.models import Bookmark, Frame

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
DEFAULT_LABEL_CHARS = 20


class BookmarkRecord(BaseModel):
    """Serialized form of a bookmark."""

    id: str
    index: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)
    timestamp: int
    label: str

    @classmethod
    def from_bookmark(cls, bookmark: Bookmark) -> "BookmarkRecord":
        return cls(
            id=bookmark.id,
            index=bookmark.index,
            percentage=bookmark.percentage,
            timestamp=bookmark.timestamp,
            label=bookmark.label,
        )

    def to_bookmark(self) -> Bookmark:
        return Bookmark(
            id=self.id,
            index=self.index,
            percentage=self.percentage,
            timestamp=self.timestamp,
            label=self.label,
        )


_RECORDS = TypeAdapter(List[BookmarkRecord])


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return uuid.uuid4().hex


def decode_bookmarks(raw: str | None) -> List[Bookmark]:
    """Parse a stored list; anything unreadable counts as no bookmarks."""
    if not raw:
        return []
    try:
        records = _RECORDS.validate_json(raw)
    except ValidationError as exc:
        LOGGER.warning("Discarding unreadable bookmark list: %s", exc)
        return []
    return [record.to_bookmark() for record in records]


def encode_bookmarks(bookmarks: List[Bookmark]) -> str:
    records = [BookmarkRecord.from_bookmark(bookmark) for bookmark in bookmarks]
    return _RECORDS.dump_json(records).decode("utf-8")


class BookmarkStore:
    """Most-recent-first bookmark list for the active document."""

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        limit: int = DEFAULT_LIMIT,
        label_chars: int = DEFAULT_LABEL_CHARS,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.kv = kv
        self.limit = limit
        self.label_chars = label_chars
        self._clock = clock
        self._id_factory = id_factory
        self._document_id = ""
        self._bookmarks: List[Bookmark] = []

    @property
    def document_id(self) -> str:
        return self._document_id

    @property
    def bookmarks(self) -> Tuple[Bookmark, ...]:
        return tuple(self._bookmarks)

    def switch_document(self, document_id: str) -> Tuple[Bookmark, ...]:
        """Replace the active list with the one saved for ``document_id``."""
        self._document_id = document_id
        self._bookmarks = decode_bookmarks(self.kv.get(document_id)) if document_id else []
        LOGGER.debug("Loaded %d bookmarks for %r", len(self._bookmarks), document_id)
        return self.bookmarks

    def create(self, frame: Frame, label: str | None = None) -> Bookmark | None:
        """Bookmark the frame's position; returns ``None`` with nothing to mark."""
        if not self._document_id or frame.total == 0:
            return None
        if label is None:
            text = frame.token.text if frame.token is not None else ""
            label = text[: self.label_chars] or f"Position {frame.index}"
        bookmark = Bookmark(
            id=self._id_factory(),
            index=frame.index,
            percentage=round(frame.percentage),
            timestamp=self._clock(),
            label=label,
        )
        self._bookmarks = [bookmark, *self._bookmarks][: self.limit]
        self._persist()
        return bookmark

    def delete(self, bookmark_id: str) -> bool:
        remaining = [bookmark for bookmark in self._bookmarks if bookmark.id != bookmark_id]
        if len(remaining) == len(self._bookmarks):
            return False
        self._bookmarks = remaining
        self._persist()
        return True

    def get(self, bookmark_id: str) -> Bookmark | None:
        for bookmark in self._bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        return None

    def load(self, bookmark: Bookmark) -> int:
        """Index the scheduler should adopt for ``bookmark``."""
        return bookmark.index

    def _persist(self) -> None:
        if self._document_id:
            self.kv.set(self._document_id, encode_bookmarks(self._bookmarks))
