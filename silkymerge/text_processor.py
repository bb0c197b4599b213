"""Sentence splitting and fuzzy text comparison.

The translators often merge two JP sublines into one EN sentence pair.
When the script forces those sublines to stay apart, the EN text has to be
broken back up at a sentence boundary.
"""

import math
from typing import Optional

from rapidfuzz.distance import Levenshtein

# Tried in this order when looking for a sentence boundary
SENTENCE_MARKS = (".", "?", "!")

# Allowed edit distance, as a share of the text length (plus one)
FUZZY_RATIO = 0.1

# Flat distance under which a reference/source divergence is never reported
MISMATCH_FLOOR = 2


def edit_distance(a: str, b: str, score_cutoff: Optional[int] = None) -> int:
    """Levenshtein distance between *a* and *b*.

    With *score_cutoff*, any distance above it is reported as cutoff + 1.
    """
    return Levenshtein.distance(a, b, score_cutoff=score_cutoff)


def tolerance(length: int) -> int:
    """Largest edit distance still counted as the same line."""
    return math.ceil(length * FUZZY_RATIO) + 1


def fuzzy_equal(text: str, reference: str) -> bool:
    """True if *reference* is within tolerance of *text* (sized on *text*)."""
    limit = tolerance(len(text))
    return edit_distance(text, reference, score_cutoff=limit) <= limit


def is_large_mismatch(source: str, reference: str) -> bool:
    """True if the divergence is big enough to flag for human review."""
    dist = edit_distance(source, reference)
    return dist > MISMATCH_FLOOR and dist > math.ceil(len(source) * FUZZY_RATIO)


def try_split(text: str, mark: str, allow_multi: bool = False) -> Optional[tuple]:
    """Split *text* into two sentences at the last ``"<mark> "``.

    Returns ``(first, second)`` where *first* keeps the mark and *second*
    starts after the following space, or None when there is no boundary.
    Unless *allow_multi* is set, more than one boundary is ambiguous and
    also returns None.
    """
    separator = mark + " "
    first = text.find(separator)
    last = text.rfind(separator)
    if last < 0 or (not allow_multi and first != last):
        return None
    return text[:last + 1], text[last + 2:]


def split_sentence(text: str, allow_multi: bool = False) -> Optional[tuple]:
    """Try each sentence mark in turn; return the first split that works."""
    for mark in SENTENCE_MARKS:
        parts = try_split(text, mark, allow_multi)
        if parts is not None:
            return parts
    return None


def split_three(first: str, second: str) -> Optional[tuple]:
    """Spread two EN blocks over three JP sublines.

    Either the first block holds two sentences (and the second block is
    the third part) or the second block does.  Single, unambiguous
    boundaries are preferred over splitting a multi-sentence block.
    """
    for allow_multi in (False, True):
        parts = split_sentence(first, allow_multi)
        if parts is not None:
            return parts[0], parts[1], second
        parts = split_sentence(second, allow_multi)
        if parts is not None:
            return first, parts[0], parts[1]
    return None
