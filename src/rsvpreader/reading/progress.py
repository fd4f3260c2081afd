"""Conversions between word index, completion percentage and track position."""

from __future__ import annotations

import math


def clamp_index(index: int, total: int) -> int:
    """Clamp an index into ``[0, total - 1]``; an empty sequence maps to 0."""
    if total <= 0:
        return 0
    return max(0, min(int(index), total - 1))


def percentage(index: int, total: int) -> float:
    """Completion percentage of ``index`` within ``total`` words."""
    if total <= 1:
        return 0.0
    return index / (total - 1) * 100


def index_from_pointer(pointer_x: float, track_left: float, track_width: float, total: int) -> int:
    """Translate a pointer position along a progress track into a word index.

    The pointer offset is clamped to the track so that a drag leaving the
    track on either side pins the index to the first or last word.
    """
    if total <= 0 or track_width <= 0:
        return 0
    offset = max(0.0, min(pointer_x - track_left, track_width))
    ratio = offset / track_width
    return clamp_index(math.floor(ratio * (total - 1)), total)


def pointer_from_index(index: int, total: int, track_left: float, track_width: float) -> float:
    """Horizontal position of the progress thumb for ``index``."""
    return track_left + track_width * percentage(clamp_index(index, total), total) / 100
