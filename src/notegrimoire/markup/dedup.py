"""Duplicate removal for canonical markup, run right before a note is stored.

Selections that cross inline wrappers can carry the same text twice with
markup in between (``<span>Ton⁺→A⁺</span><span>Ton*→A*</span>``, or a
paragraph cloned at both ends of a range). ``dedupe_markup()`` removes the
known duplicates from the pattern table, then collapses repeated bare text
runs.

Unlike the text normalizer's repeat collapse, this runs a small fixed
number of passes rather than looping to a fixpoint. Markup-level repeats
are rare and a bounded number of passes clears the ones seen in practice.
"""

from __future__ import annotations

import logging
import re

from notegrimoire.config import get_settings
from notegrimoire.markup.canonicalizer import find_protected_ranges
from notegrimoire.models import SpanKind
from notegrimoire.text.duplicate_patterns import (
    DuplicatePattern,
    apply_patterns,
    markup_patterns,
)

logger = logging.getLogger(__name__)

# Bare text between the end of one tag and the start of the next
_TEXT_RUN = re.compile(r"(?<=>)[^<]+(?=<)")
_WHITESPACE_RUN = re.compile(r"\s{2,}")
# Inline wrappers left empty once their copy of a run was dropped
_EMPTY_INLINE = re.compile(r"<(strong|em|code|span|sup|sub)>\s*</\1>")

_Range = tuple[int, int, SpanKind]


def _enclosing_kind(ranges: list[_Range], start: int, end: int) -> SpanKind | None:
    for range_start, range_end, kind in ranges:
        if range_start <= start and end <= range_end:
            return kind
    return None


def _pick_copy_to_drop(
    first: SpanKind | None, second: SpanKind | None
) -> int | None:
    """Decide which copy of a repeated run goes: 0 for the earlier, 1 for the later.

    The copy outside a protected span is kept. Between two unprotected copies
    the later one is kept. Formula internals are never edited, and a pair
    where both copies are protected is left alone.
    """
    if first is None and second is None:
        return 0
    if first is not None and second is not None:
        return None
    if first is None:
        return None if second == SpanKind.FORMULA else 1
    return None if first == SpanKind.FORMULA else 0


def _collapse_repeated_runs(
    markup: str, min_run: int, window: int, formula_marker: str
) -> str:
    """Run one pass of repeated-run collapsing over *markup*."""
    runs = [
        (m.start(), m.end(), m.group(0))
        for m in _TEXT_RUN.finditer(markup)
        if len(m.group(0)) >= min_run and m.group(0).strip()
    ]
    if len(runs) < 2:
        return markup

    ranges = find_protected_ranges(markup, formula_marker)
    drops: list[tuple[int, int]] = []
    used: set[int] = set()

    for i, (first_start, first_end, text) in enumerate(runs):
        if i in used:
            continue
        for j in range(i + 1, len(runs)):
            second_start, second_end, other = runs[j]
            if second_start - first_end > window:
                break
            if j in used or other != text:
                continue
            drop = _pick_copy_to_drop(
                _enclosing_kind(ranges, first_start, first_end),
                _enclosing_kind(ranges, second_start, second_end),
            )
            if drop is None:
                continue
            used.update((i, j))
            drops.append(
                (first_start, first_end) if drop == 0 else (second_start, second_end)
            )
            break

    for start, end in sorted(drops, reverse=True):
        markup = markup[:start] + markup[end:]
    return markup


def dedupe_markup(
    markup: str | None,
    *,
    patterns: tuple[DuplicatePattern, ...] | None = None,
    min_run: int | None = None,
    window: int | None = None,
    passes: int | None = None,
    formula_marker: str | None = None,
) -> str:
    """Remove selection-induced duplicates from canonical markup.

    Args:
        markup: Canonical markup. Markup without any tag is returned as is.
        patterns: Known duplicate table. Defaults to ``markup_patterns(window)``.
        min_run: Shortest bare text run considered for collapsing.
        window: Most characters allowed between two copies.
        passes: Number of collapse passes.
        formula_marker: Class marker of formula containers.

    Returns:
        Deduplicated markup with whitespace runs folded.
    """
    if not markup:
        return ""
    if "<" not in markup:
        return markup

    cfg = get_settings().capture
    min_run = cfg.dedup_min_run if min_run is None else min_run
    window = cfg.dedup_window if window is None else window
    passes = cfg.dedup_passes if passes is None else passes
    formula_marker = formula_marker or cfg.formula_marker
    if patterns is None:
        patterns = markup_patterns(window)

    markup = apply_patterns(markup, patterns)
    for pass_number in range(passes):
        collapsed = _collapse_repeated_runs(markup, min_run, window, formula_marker)
        if collapsed == markup:
            break
        logger.debug(
            "Markup dedup pass %d removed %d chars",
            pass_number + 1,
            len(markup) - len(collapsed),
        )
        markup = collapsed

    markup = _EMPTY_INLINE.sub("", markup)
    return _WHITESPACE_RUN.sub(" ", markup).strip()
