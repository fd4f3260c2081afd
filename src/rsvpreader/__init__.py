"""RSVP Reader - one word at a time, anchored on the optimal recognition point."""

__version__ = "0.1.0"
