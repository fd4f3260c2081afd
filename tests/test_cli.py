"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from rsvpreader.bookmarks.storage import SQLiteKeyValueStore
from rsvpreader.cli import _ensure_db_parent, _setup_logging, app, render_frame, render_token
from rsvpreader.models import Frame, PlaybackState, Token
from rsvpreader.session import ReaderSession


runner = CliRunner()


@pytest.fixture
def document(tmp_path: Path) -> Path:
    path = tmp_path / "story.txt"
    path.write_text('He said "read faster" and smiled.', encoding="utf-8")
    return path


def _save_bookmark(db_path: Path, document: Path, index: int) -> str:
    store = SQLiteKeyValueStore(db_path)
    try:
        session = ReaderSession(store)
        session.load_text(document.read_text(encoding="utf-8"), document.name)
        session.scheduler.seek(index)
        return session.save_bookmark().id
    finally:
        store.close()


def _saved_count(db_path: Path, document: Path) -> int:
    store = SQLiteKeyValueStore(db_path)
    try:
        session = ReaderSession(store)
        session.load_text(document.read_text(encoding="utf-8"), document.name)
        return len(session.list_bookmarks())
    finally:
        store.close()


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("rsvpreader.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("rsvpreader.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestEnsureDbParent:
    """Tests for _ensure_db_parent helper."""

    def test_ensure_db_parent_creates_directory(self, tmp_path: Path) -> None:
        """Creates parent directory if it doesn't exist."""
        db_path = tmp_path / "subdir" / "test.db"
        assert not db_path.parent.exists()
        _ensure_db_parent(db_path)
        assert db_path.parent.exists()


class TestRenderToken:
    """Tests for anchored word rendering."""

    @pytest.mark.parametrize("word, focus", [("a", 0), ("word", 1), ("electrifying", 3)])
    def test_anchor_column_is_fixed(self, word: str, focus: int) -> None:
        token = Token(text=word, is_punctuation=False, is_quote=False, focus_index=focus)
        rendered = render_token(token).plain

        assert rendered[4] == word[focus]

    def test_no_token(self) -> None:
        assert "Load a document" in render_token(None).plain


class TestRenderFrame:
    """Tests for the playback frame layout."""

    def test_status_line_is_not_cropped(self) -> None:
        token = Token(text="end", is_punctuation=False, is_quote=False, focus_index=1)
        console = Console(width=80, record=True, color_system=None)

        console.print(render_frame(Frame(token, 2, 3), PlaybackState(2, False, False, 300)))
        output = console.export_text()

        assert "100%  2 / 3 words  300 wpm  [paused]" in output

    def test_playing_frame_has_no_paused_marker(self) -> None:
        token = Token(text="mid", is_punctuation=False, is_quote=False, focus_index=1)
        console = Console(width=80, record=True, color_system=None)

        console.print(render_frame(Frame(token, 1, 3), PlaybackState(1, True, False, 450)))
        output = console.export_text()

        assert "50%  1 / 3 words  450 wpm" in output
        assert "[paused]" not in output


class TestReadCommand:
    """Tests for the read command."""

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["read", str(tmp_path / "missing.txt"), "--db", str(tmp_path / "b.db")])
        assert result.exit_code != 0

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.txt"
        path.write_text("   \n", encoding="utf-8")

        result = runner.invoke(app, ["read", str(path), "--db", str(tmp_path / "b.db")])
        assert result.exit_code != 0

    def test_plays_to_the_end(self, tmp_path: Path, document: Path) -> None:
        result = runner.invoke(
            app, ["read", str(document), "--wpm", "1000", "--db", str(tmp_path / "b.db")]
        )

        assert result.exit_code == 0, result.output
        assert "100%" in result.output
        assert "5 / 6 words" in result.output

    def test_resume_without_bookmarks(self, tmp_path: Path, document: Path) -> None:
        result = runner.invoke(
            app, ["read", str(document), "--resume", "1", "--db", str(tmp_path / "b.db")]
        )
        assert result.exit_code != 0

    def test_interrupt_saves_bookmark(self, tmp_path: Path, document: Path) -> None:
        db_path = tmp_path / "b.db"

        def interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch("rsvpreader.cli.asyncio.run", side_effect=interrupt):
            result = runner.invoke(
                app, ["read", str(document), "--bookmark-on-stop", "--db", str(db_path)]
            )

        assert result.exit_code == 0, result.output
        assert "Stopped" in result.output
        assert "Saved bookmark at 0%" in result.output
        assert _saved_count(db_path, document) == 1

    def test_interrupt_without_flag_saves_nothing(self, tmp_path: Path, document: Path) -> None:
        db_path = tmp_path / "b.db"

        def interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch("rsvpreader.cli.asyncio.run", side_effect=interrupt):
            result = runner.invoke(app, ["read", str(document), "--db", str(db_path)])

        assert result.exit_code == 0
        assert _saved_count(db_path, document) == 0


class TestTokensCommand:
    """Tests for the tokens command."""

    def test_lists_tokens(self, document: Path) -> None:
        result = runner.invoke(app, ["tokens", str(document)])

        assert result.exit_code == 0
        assert "6 words" in result.output
        assert "smiled." in result.output

    def test_limit(self, document: Path) -> None:
        result = runner.invoke(app, ["tokens", str(document), "--limit", "2"])

        assert result.exit_code == 0
        assert "smiled." not in result.output


class TestBookmarksCommand:
    """Tests for the bookmarks and delete-bookmark commands."""

    def test_no_bookmarks(self, tmp_path: Path, document: Path) -> None:
        result = runner.invoke(app, ["bookmarks", str(document), "--db", str(tmp_path / "b.db")])

        assert result.exit_code == 0
        assert "No bookmarks saved" in result.output

    def test_lists_saved(self, tmp_path: Path, document: Path) -> None:
        db_path = tmp_path / "b.db"
        _save_bookmark(db_path, document, 3)

        result = runner.invoke(app, ["bookmarks", str(document), "--db", str(db_path)])

        assert result.exit_code == 0
        assert "60%" in result.output

    def test_delete(self, tmp_path: Path, document: Path) -> None:
        db_path = tmp_path / "b.db"
        bookmark_id = _save_bookmark(db_path, document, 3)

        result = runner.invoke(
            app, ["delete-bookmark", str(document), bookmark_id, "--db", str(db_path)]
        )

        assert result.exit_code == 0
        assert "Deleted bookmark" in result.output
        assert _saved_count(db_path, document) == 0

    def test_delete_unknown(self, tmp_path: Path, document: Path) -> None:
        result = runner.invoke(
            app, ["delete-bookmark", str(document), "nope", "--db", str(tmp_path / "b.db")]
        )

        assert result.exit_code == 0
        assert "not found" in result.output


class TestWebCommand:
    """Tests for the web command."""

    def test_web_starts_uvicorn(self, tmp_path: Path) -> None:
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["web", "--port", "9001", "--db", str(tmp_path / "b.db")])

        assert result.exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args[1]["port"] == 9001
