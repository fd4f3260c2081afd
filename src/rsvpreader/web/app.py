"""FastAPI application backing the browser reader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from rsvpreader.bookmarks.storage import SQLiteKeyValueStore
from rsvpreader.bookmarks.store import BookmarkRecord, BookmarkStore
from rsvpreader.config import AppConfig
from rsvpreader.models import Frame, Token
from rsvpreader.reading.progress import clamp_index, index_from_pointer, percentage
from rsvpreader.reading.tokenizer import tokenize
from rsvpreader.utils.files import document_identity

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="RSVP Reader API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class TokenizePayload(BaseModel):
    text: str
    name: str = ""


class ProgressPayload(BaseModel):
    index: int
    total: int = Field(ge=0)


class PointerPayload(BaseModel):
    pointer_x: float
    track_left: float = 0.0
    track_width: float
    total: int = Field(ge=0)


class BookmarkPayload(BaseModel):
    index: int
    total: int = Field(ge=0)
    word: str = ""
    label: str | None = None


def _resolve_db_path(db: Path | None) -> Path:
    if db is None:
        db = getattr(app.state, "db_path", None)
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _token_payload(token: Token) -> dict[str, Any]:
    return {
        "text": token.text,
        "is_punctuation": token.is_punctuation,
        "is_quote": token.is_quote,
        "focus_index": token.focus_index,
    }


def _open_bookmarks(document_id: str, db: Path | None) -> tuple[SQLiteKeyValueStore, BookmarkStore]:
    resolved_db = _resolve_db_path(db)
    _ensure_db_parent(resolved_db)
    kv = SQLiteKeyValueStore(resolved_db)
    store = BookmarkStore(kv)
    store.switch_document(document_id)
    return kv, store


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/tokenize")
async def tokenize_text(payload: TokenizePayload) -> dict[str, Any]:
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="Empty text")

    tokens = tokenize(payload.text)
    return {
        "document_id": document_identity(payload.text, payload.name),
        "total": len(tokens),
        "tokens": [_token_payload(token) for token in tokens],
    }


@app.post("/progress")
async def progress(payload: ProgressPayload) -> dict[str, float]:
    return {"percentage": percentage(clamp_index(payload.index, payload.total), payload.total)}


@app.post("/progress/pointer")
async def progress_from_pointer(payload: PointerPayload) -> dict[str, Any]:
    index = index_from_pointer(payload.pointer_x, payload.track_left, payload.track_width, payload.total)
    return {"index": index, "percentage": percentage(index, payload.total)}


@app.get("/bookmarks/{document_id}")
async def list_bookmarks(document_id: str, db: Path | None = None) -> dict[str, List[Dict[str, Any]]]:
    kv, store = _open_bookmarks(document_id, db)
    try:
        saved = store.bookmarks
    finally:
        kv.close()
    return {"bookmarks": [BookmarkRecord.from_bookmark(b).model_dump() for b in saved]}


@app.post("/bookmarks/{document_id}")
async def create_bookmark(
    document_id: str, payload: BookmarkPayload, db: Path | None = None
) -> dict[str, Any]:
    if payload.total == 0:
        raise HTTPException(status_code=400, detail="Document has no words")

    index = clamp_index(payload.index, payload.total)
    token = tokenize(payload.word)[0] if payload.word.strip() else None
    kv, store = _open_bookmarks(document_id, db)
    try:
        bookmark = store.create(Frame(token=token, index=index, total=payload.total), payload.label)
    finally:
        kv.close()

    if bookmark is None:
        raise HTTPException(status_code=400, detail="Nothing to bookmark")
    LOGGER.info("Saved bookmark %s for %s at %s%%", bookmark.id, document_id, bookmark.percentage)
    return {"status": "ok", "bookmark": BookmarkRecord.from_bookmark(bookmark).model_dump()}


@app.delete("/bookmarks/{document_id}/{bookmark_id}")
async def delete_bookmark(document_id: str, bookmark_id: str, db: Path | None = None) -> dict[str, Any]:
    kv, store = _open_bookmarks(document_id, db)
    try:
        deleted = store.delete(bookmark_id)
    finally:
        kv.close()

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Bookmark {bookmark_id} not found")
    return {"status": "ok", "deleted_id": bookmark_id}
