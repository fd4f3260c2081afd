"""Core RSVP Reader data models."""

from __future__ import annotations

from dataclasses import dataclass

from rsvpreader.config import DEFAULT_WPM
from rsvpreader.reading.progress import percentage


@dataclass(slots=True, frozen=True)
class Token:
    """A single display unit with its anchor letter position."""

    text: str
    is_punctuation: bool
    is_quote: bool
    focus_index: int

    @property
    def prefix(self) -> str:
        return self.text[: self.focus_index]

    @property
    def focus_letter(self) -> str:
        return self.text[self.focus_index : self.focus_index + 1]

    @property
    def suffix(self) -> str:
        return self.text[self.focus_index + 1 :]


@dataclass(slots=True, frozen=True)
class PlaybackState:
    """Snapshot of the scheduler's mutable state."""

    current_index: int = 0
    is_playing: bool = False
    is_scrubbing: bool = False
    wpm: int = DEFAULT_WPM


@dataclass(slots=True, frozen=True)
class Frame:
    """What the presentation layer draws after each transition."""

    token: Token | None
    index: int
    total: int

    @property
    def percentage(self) -> float:
        return percentage(self.index, self.total)


@dataclass(slots=True, frozen=True)
class Bookmark:
    """Saved reading position inside one document."""

    id: str
    index: int
    percentage: int
    timestamp: int
    label: str
