"""Command line interface for RSVP Reader."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from rsvpreader.bookmarks.storage import SQLiteKeyValueStore
from rsvpreader.config import MAX_WPM, MIN_WPM, WPM_STEP, AppConfig, clamp_wpm
from rsvpreader.models import Frame, PlaybackState, Token
from rsvpreader.reading.tokenizer import tokenize
from rsvpreader.session import ReaderSession
from rsvpreader.utils.files import read_text
from rsvpreader.web.app import app as web_app


console = Console()
app = typer.Typer(help="RSVP Reader - read text files one word at a time")

# Column the anchor letter is pinned to; focus indexes never exceed it.
ANCHOR_COLUMN = 4


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _open_store(db: Path | None) -> SQLiteKeyValueStore:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    resolved_db = config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)
    return SQLiteKeyValueStore(resolved_db)


def _load_document(path: Path) -> str:
    if not path.is_file():
        raise typer.BadParameter(f"File not found: {path}")
    text = read_text(path)
    if not text.strip():
        raise typer.BadParameter(f"No words found in {path}")
    return text


def render_token(token: Token | None) -> Text:
    """Lay out a word so its anchor letter always lands on the same column."""
    if token is None:
        return Text("Load a document to begin", style="dim italic")
    style = "italic yellow" if token.is_quote else "bold"
    rendered = Text(" " * max(ANCHOR_COLUMN - len(token.prefix), 0))
    rendered.append(token.prefix, style=style)
    rendered.append(token.focus_letter, style="bold red")
    rendered.append(token.suffix, style=style)
    return rendered


def render_frame(frame: Frame, state: PlaybackState) -> Group:
    status = f"{round(frame.percentage)}%  {frame.index} / {frame.total} words  {state.wpm} wpm"
    if not state.is_playing:
        status += "  [paused]"
    return Group(
        Panel(render_token(frame.token), padding=(1, 2)),
        Text(status, style="dim"),
        # the bar ends without a line break, so it has to come last
        ProgressBar(total=100, completed=frame.percentage),
    )


async def _play(session: ReaderSession, live: Live) -> None:
    scheduler = session.scheduler
    finished = asyncio.Event()

    def on_frame(frame: Frame) -> None:
        live.update(render_frame(frame, scheduler.state))
        if not scheduler.state.is_playing:
            finished.set()

    scheduler.listener = on_frame
    try:
        scheduler.play()
        await finished.wait()
    finally:
        scheduler.listener = None
        scheduler.pause()


@app.command()
def read(
    path: Path = typer.Argument(..., help="UTF-8 text file to read.", resolve_path=True),
    wpm: int = typer.Option(
        AppConfig().wpm, help=f"Words per minute ({MIN_WPM}-{MAX_WPM}, steps of {WPM_STEP})"
    ),
    db: Path = typer.Option(None, "--db", help="SQLite bookmark database path"),
    resume: Optional[int] = typer.Option(
        None, "--resume", help="Start from the N-th most recent bookmark"
    ),
    bookmark_on_stop: bool = typer.Option(
        False, "--bookmark-on-stop", help="Save a bookmark when interrupted with Ctrl-C"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Play a text file word by word."""
    _setup_logging(verbose)
    text = _load_document(path)
    store = _open_store(db)
    try:
        session = ReaderSession(store, config=AppConfig(wpm=clamp_wpm(wpm)))
        session.load_text(text, path.name)

        if resume is not None:
            saved = session.list_bookmarks()
            if not 1 <= resume <= len(saved):
                raise typer.BadParameter(f"No bookmark #{resume} ({len(saved)} saved)")
            session.jump_to(saved[resume - 1])

        with Live(render_frame(session.frame, session.scheduler.state), console=console) as live:
            try:
                asyncio.run(_play(session, live))
            except KeyboardInterrupt:
                console.print("[yellow]Stopped.[/yellow]")
                if bookmark_on_stop:
                    bookmark = session.save_bookmark()
                    if bookmark is not None:
                        console.print(f"Saved bookmark at {bookmark.percentage}%: {bookmark.label}")
    finally:
        store.close()


@app.command()
def tokens(
    path: Path = typer.Argument(..., help="UTF-8 text file to tokenize.", resolve_path=True),
    limit: int = typer.Option(50, help="Number of tokens to display"),
) -> None:
    """Show how a file is split into display tokens."""
    items = tokenize(_load_document(path))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#")
    table.add_column("Word")
    table.add_column("ORP")
    table.add_column("Pause")
    table.add_column("Quote")

    for index, token in enumerate(items[:limit]):
        table.add_row(
            str(index),
            render_token(token),
            str(token.focus_index),
            "yes" if token.is_punctuation else "",
            "yes" if token.is_quote else "",
        )

    console.print(table)
    console.print(f"{len(items)} words")


@app.command()
def bookmarks(
    path: Path = typer.Argument(..., help="Document the bookmarks belong to.", resolve_path=True),
    db: Path = typer.Option(None, "--db", help="SQLite bookmark database path"),
) -> None:
    """List saved bookmarks for a document."""
    text = _load_document(path)
    store = _open_store(db)
    try:
        session = ReaderSession(store)
        session.load_text(text, path.name)
        saved = session.list_bookmarks()
    finally:
        store.close()

    if not saved:
        console.print("[yellow]No bookmarks saved.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#")
    table.add_column("ID")
    table.add_column("Progress")
    table.add_column("Word")
    table.add_column("Saved")

    for position, bookmark in enumerate(saved, start=1):
        saved_at = datetime.fromtimestamp(bookmark.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        table.add_row(
            str(position),
            bookmark.id,
            f"{bookmark.percentage}% (word {bookmark.index})",
            bookmark.label,
            saved_at,
        )

    console.print(table)


@app.command("delete-bookmark")
def delete_bookmark(
    path: Path = typer.Argument(..., help="Document the bookmark belongs to.", resolve_path=True),
    bookmark_id: str = typer.Argument(..., help="Bookmark ID as shown by 'bookmarks'"),
    db: Path = typer.Option(None, "--db", help="SQLite bookmark database path"),
) -> None:
    """Delete one saved bookmark."""
    text = _load_document(path)
    store = _open_store(db)
    try:
        session = ReaderSession(store)
        session.load_text(text, path.name)
        deleted = session.delete_bookmark(bookmark_id)
    finally:
        store.close()

    if deleted:
        console.print(f"Deleted bookmark {bookmark_id}.")
    else:
        console.print(f"[yellow]Bookmark {bookmark_id} not found.[/yellow]")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite bookmark database path"),
) -> None:
    """Start the JSON API used by the browser reader."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    resolved_db = config.resolve_db_path(Path.cwd())
    web_app.state.db_path = resolved_db

    console.print(f"Starting web interface on http://{host}:{port} (bookmarks: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
