"""Plain-text normalization for selection text.

``selection.toString()`` over rendered markdown is noisy: CR/LF mixes,
line breaks inserted between every inline node of a multi-node selection,
and fragments yielded twice at node boundaries. ``normalize()`` cleans that
up in a fixed order:

1. unify line endings, trim
2. de-wrap breaks sitting between two non-whitespace characters
3. apply the known duplicate pattern table
4. collapse adjacent repeats to a fixpoint
5. fold whitespace runs to one space, trim

The result is idempotent: ``normalize(normalize(x)) == normalize(x)``.
"""

# Pattern: Functional Core (pure string transforms)

from __future__ import annotations

import logging
import re

from notegrimoire.config import get_settings
from notegrimoire.text.duplicate_patterns import (
    DEFAULT_TEXT_PATTERNS,
    DuplicatePattern,
    apply_patterns,
)
from notegrimoire.text.repeats import collapse_adjacent_repeats

logger = logging.getLogger(__name__)

# A (possibly doubled) newline with optional surrounding whitespace, strictly
# between two non-whitespace characters
_ARTIFICIAL_BREAK = re.compile(r"(?<=\S)\s*\n{1,2}\s*(?=\S)")

_WHITESPACE_RUN = re.compile(r"\s{2,}")

_MAX_SETTLE_ROUNDS = 5


def unify_line_endings(text: str) -> str:
    """Convert CRLF and lone CR to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def dewrap(text: str, passes: int = 3) -> str:
    """Remove line breaks that are artefacts of multi-node selections.

    A break between two non-whitespace characters is removed along with its
    surrounding whitespace. Leading and trailing breaks are trimmed.
    """
    if "\n" not in text:
        return text
    for _ in range(passes):
        dewrapped = _ARTIFICIAL_BREAK.sub("", text)
        if dewrapped == text:
            break
        text = dewrapped
    return text.strip()


def normalize(
    raw_text: str | None,
    *,
    patterns: tuple[DuplicatePattern, ...] | None = None,
) -> str:
    """Normalize raw selection text.

    Args:
        raw_text: Text as returned by the host selection API.
        patterns: Known duplicate table. Defaults to ``DEFAULT_TEXT_PATTERNS``;
            pass ``()`` to rely on generic repeat collapsing alone.

    Returns:
        Normalized text with Unix line breaks, no artificial breaks and no
        adjacent duplicated runs.
    """
    if not raw_text:
        return ""

    cfg = get_settings().capture
    if patterns is None:
        patterns = DEFAULT_TEXT_PATTERNS

    text = unify_line_endings(raw_text).strip()
    text = dewrap(text, cfg.dewrap_passes)
    # Pattern rewrites and repeat collapses can each line up a new match for
    # the other; settle them together so a second call is a no-op.
    for _ in range(_MAX_SETTLE_ROUNDS):
        settled = _settle(
            text, patterns, cfg.repeat_min_period, cfg.repeat_max_passes
        )
        if settled == text:
            break
        text = settled

    logger.debug("Normalized selection text: %d -> %d chars", len(raw_text), len(text))
    return text


def _settle(
    text: str,
    patterns: tuple[DuplicatePattern, ...],
    min_period: int,
    max_passes: int,
) -> str:
    text = apply_patterns(text, patterns)
    text = collapse_adjacent_repeats(
        text, min_period=min_period, max_passes=max_passes
    )
    return _WHITESPACE_RUN.sub(" ", text).strip()
