"""Timer-driven playback over a token sequence."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple

from rsvpreader.config import DEFAULT_WPM, MAX_WPM, MIN_WPM
from rsvpreader.models import Frame, PlaybackState, Token
from rsvpreader.reading.progress import clamp_index

LOGGER = logging.getLogger(__name__)

FrameListener = Callable[[Frame], None]

_UNSET: Any = object()


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerBackend(Protocol):
    """Anything able to run a callback once after a delay."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioTimer:
    """Timer backend running on the current asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)


class PlaybackScheduler:
    """Walks a token sequence one word at a time.

    Every mutation goes through :meth:`_transition`. When a value actually
    changes it cancels the pending tick and schedules at most one new tick
    from the latest state; repeating a control leaves the wait untouched.
    Changing the speed restarts the wait for the current word at the new
    rate instead of shortening a wait in progress.
    """

    def __init__(
        self,
        timer: TimerBackend | None = None,
        *,
        wpm: int = DEFAULT_WPM,
        listener: Optional[FrameListener] = None,
    ) -> None:
        _check_wpm(wpm)
        self.timer: TimerBackend = timer or AsyncioTimer()
        self.listener = listener
        self._tokens: Tuple[Token, ...] = ()
        self._index = 0
        self._playing = False
        self._scrubbing = False
        self._wpm = wpm
        self._pending: TimerHandle | None = None

    @property
    def tokens(self) -> Tuple[Token, ...]:
        return self._tokens

    @property
    def total(self) -> int:
        return len(self._tokens)

    @property
    def current_token(self) -> Token | None:
        if not self._tokens:
            return None
        return self._tokens[self._index]

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            current_index=self._index,
            is_playing=self._playing,
            is_scrubbing=self._scrubbing,
            wpm=self._wpm,
        )

    @property
    def frame(self) -> Frame:
        return Frame(token=self.current_token, index=self._index, total=self.total)

    @property
    def pending_timers(self) -> int:
        return 0 if self._pending is None else 1

    def delay_ms(self) -> float:
        """Wait before the next word, doubled on clause-ending punctuation."""
        delay = (60 / self._wpm) * 1000
        token = self.current_token
        if token is not None and token.is_punctuation:
            return delay * 2
        return delay

    def load(self, tokens: Sequence[Token]) -> None:
        """Replace the token sequence and rewind to the first word, paused."""
        self._transition(tokens=tuple(tokens), index=0, playing=False)

    def toggle_play(self) -> None:
        self._transition(playing=not self._playing)

    def play(self) -> None:
        self._transition(playing=True)

    def pause(self) -> None:
        self._transition(playing=False)

    def reset(self) -> None:
        self._transition(index=0, playing=False)

    def set_wpm(self, wpm: int) -> None:
        """Change the reading speed; ``wpm`` must already be clamped."""
        _check_wpm(wpm)
        self._transition(wpm=wpm)

    def begin_scrub(self) -> None:
        self._transition(scrubbing=True)

    def end_scrub(self) -> None:
        self._transition(scrubbing=False)

    def scrub_to(self, index: int) -> None:
        if not self._scrubbing:
            LOGGER.debug("Ignoring scrub to %s outside of a scrub gesture", index)
            return
        self._transition(index=clamp_index(index, self.total))

    def seek(self, index: int, *, pause: bool = False) -> None:
        """Jump to ``index`` (clamped), optionally stopping playback."""
        self._transition(
            index=clamp_index(index, self.total),
            playing=False if pause else _UNSET,
        )

    def advance(self) -> None:
        """Move to the next word, or stop at the end of the document.

        Does nothing while a scrub gesture holds the position.
        """
        if self._scrubbing:
            LOGGER.debug("Ignoring advance during scrub at index %s", self._index)
            return
        if self._index >= self.total - 1:
            LOGGER.debug("Reached end of document at index %s", self._index)
            self._transition(playing=False)
        else:
            self._transition(index=self._index + 1)

    def cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def schedule_next(self) -> None:
        """Arm exactly one tick if playback should continue."""
        self.cancel_pending()
        if not self._playing or self._scrubbing or not self._tokens:
            return
        delay = self.delay_ms()
        LOGGER.debug("Next word in %.1f ms (index %s)", delay, self._index)
        self._pending = self.timer.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._pending = None
        self.advance()

    def _transition(
        self,
        *,
        tokens: Any = _UNSET,
        index: Any = _UNSET,
        playing: Any = _UNSET,
        scrubbing: Any = _UNSET,
        wpm: Any = _UNSET,
    ) -> None:
        changed = False
        if tokens is not _UNSET and tokens is not self._tokens:
            self._tokens, changed = tokens, True
        if index is not _UNSET and index != self._index:
            self._index, changed = index, True
        if playing is not _UNSET and playing != self._playing:
            self._playing, changed = playing, True
        if scrubbing is not _UNSET and scrubbing != self._scrubbing:
            self._scrubbing, changed = scrubbing, True
        if wpm is not _UNSET and wpm != self._wpm:
            self._wpm, changed = wpm, True
        # a repeated control must not restart the wait for the current word
        if not changed:
            return
        self.schedule_next()
        if self.listener is not None:
            self.listener(self.frame)


def _check_wpm(wpm: int) -> None:
    if not MIN_WPM <= wpm <= MAX_WPM:
        raise ValueError(f"wpm must be between {MIN_WPM} and {MAX_WPM}, got {wpm}")
