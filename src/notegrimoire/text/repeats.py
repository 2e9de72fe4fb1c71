"""Generic adjacent-repeat collapsing.

Selections spanning several DOM text nodes often yield the same run twice
at a node boundary ("Lac+Lac+", "Ton+→A+→D+Ton+→A+→D+"). Rather than
enumerate every duplicate, fold any contiguous repetition of a unit back to
one copy and repeat until nothing changes.

Each pass scans left to right; at every position the *shortest* unit that
repeats is taken, and the whole run of its repetitions collapses to one
copy. Units made only of digits are left alone, so ``1000000`` keeps its
zeros. Collapsing can expose a new repeat (``abab`` + ``cabab``), hence the
fixpoint loop. ``max_passes`` bounds the loop; every productive pass
shortens the text, so the bound is only a guard.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def _repeat_pattern(min_period: int) -> re.Pattern[str]:
    # Lazy unit: the shortest repeating unit wins at each position
    return re.compile(rf"(.{{{min_period},}}?)\1+")


def _fold(match: re.Match[str]) -> str:
    unit = match.group(1)
    return match.group(0) if unit.isdigit() else unit


def collapse_adjacent_repeats(
    text: str, *, min_period: int = 3, max_passes: int = 50
) -> str:
    """Collapse contiguous repeats of any unit to a single occurrence.

    Args:
        text: Text to collapse. Newlines are never part of a unit.
        min_period: Shortest unit length considered. Units shorter than this
            are ordinary spelling ("ll", "--") and are left alone. Units
            made only of digits are never folded.
        max_passes: Upper bound on collapse passes.

    Returns:
        Text with no contiguous repeat of any non-numeric unit of at least
        ``min_period`` characters (unless the pass bound was hit). Applying
        the function to its own output returns it unchanged.
    """
    if len(text) < 2 * min_period:
        return text

    pattern = _repeat_pattern(min_period)
    for _ in range(max_passes):
        collapsed = pattern.sub(_fold, text)
        if collapsed == text:
            return text
        text = collapsed

    logger.debug("Repeat collapse stopped at pass bound %d", max_passes)
    return text

