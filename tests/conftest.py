"""Shared fixtures for the RSVP Reader test suite."""

from __future__ import annotations

from typing import Callable, List

import pytest

from rsvpreader.reading.scheduler import PlaybackScheduler
from rsvpreader.reading.tokenizer import tokenize


class ManualHandle:
    def __init__(self, delay_ms: float, callback: Callable[[], None]) -> None:
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimer:
    """Timer backend that only fires when a test tells it to."""

    def __init__(self) -> None:
        self.handles: List[ManualHandle] = []

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay_ms, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> List[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def fire(self) -> float:
        """Fire the single outstanding timer and return its delay."""
        (handle,) = self.active
        handle.fired = True
        handle.callback()
        return handle.delay_ms


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def scheduler(timer: ManualTimer) -> PlaybackScheduler:
    sched = PlaybackScheduler(timer, wpm=300)
    sched.load(tokenize("The quick brown fox. Jumps over"))
    return sched
