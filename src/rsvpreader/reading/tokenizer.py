"""Split raw text into RSVP display tokens.

Each whitespace-separated word becomes a :class:`~rsvpreader.models.Token`
carrying its anchor letter (the optimal recognition point), whether it closes
a clause and whether it sits inside quoted dialogue.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List

from rsvpreader.models import Token

PAUSE_ENDINGS = (".", ",", ";", "!", "?")
QUOTE_MARKS = ('"', "'")

_STRIP_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")

# (max stripped length, focus index); anything longer anchors at 4
_FOCUS_STEPS = ((1, 0), (5, 1), (9, 2), (13, 3))


def focus_index(word: str) -> int:
    """Return the anchor letter position for ``word``.

    Punctuation does not count towards the length so that ``"end."`` and
    ``"end"`` anchor on the same letter.
    """
    length = len(_STRIP_PUNCTUATION.sub("", word))
    for limit, index in _FOCUS_STEPS:
        if length <= limit:
            return index
    return 4


def _fold_quotes(words: Iterable[str]) -> Iterator[tuple[str, bool]]:
    """Pair each word with its quoted flag, carrying the open-quote state forward."""
    in_quotes = False
    for word in words:
        opens = word.startswith(QUOTE_MARKS)
        closes = word.endswith(QUOTE_MARKS)
        yield word, in_quotes or opens or closes
        if closes:
            in_quotes = False
        elif opens:
            in_quotes = True


def tokenize(text: str) -> List[Token]:
    """Convert ``text`` into display tokens. Never raises."""
    if not text:
        return []
    return [
        Token(
            text=word,
            is_punctuation=word.endswith(PAUSE_ENDINGS),
            is_quote=quoted,
            focus_index=focus_index(word),
        )
        for word, quoted in _fold_quotes(text.split())
    ]
