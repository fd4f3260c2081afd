"""Pointer-driven scrubbing along a progress track."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from rsvpreader.reading.progress import index_from_pointer, pointer_from_index
from rsvpreader.reading.scheduler import PlaybackScheduler

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Track:
    """Horizontal extent of the progress bar in pointer coordinates."""

    left: float
    width: float

    def thumb_x(self, index: int, total: int) -> float:
        return pointer_from_index(index, total, self.left, self.width)


class ScrubGesture:
    """Live drag on a track; only valid inside :func:`scrubbing`."""

    def __init__(self, scheduler: PlaybackScheduler, track: Track) -> None:
        self.scheduler = scheduler
        self.track = track

    def move(self, pointer_x: float) -> int:
        index = index_from_pointer(pointer_x, self.track.left, self.track.width, self.scheduler.total)
        self.scheduler.scrub_to(index)
        return index


@contextmanager
def scrubbing(scheduler: PlaybackScheduler, track: Track, pointer_x: float) -> Iterator[ScrubGesture]:
    """Hold the scheduler in scrub mode for the lifetime of a drag.

    Advancement is suspended on entry and the scrub always ends on exit,
    even when the drag is aborted by an exception, so a playing reader
    resumes from wherever the pointer was released.
    """
    scheduler.begin_scrub()
    gesture = ScrubGesture(scheduler, track)
    try:
        gesture.move(pointer_x)
        yield gesture
    finally:
        scheduler.end_scrub()
        LOGGER.debug("Scrub released at index %s", scheduler.state.current_index)
