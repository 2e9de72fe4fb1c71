"""Plain-text normalization for selection text."""

from notegrimoire.text.duplicate_patterns import (
    DEFAULT_TEXT_PATTERNS,
    DuplicatePattern,
    apply_patterns,
    markup_patterns,
)
from notegrimoire.text.normalizer import dewrap, normalize, unify_line_endings
from notegrimoire.text.repeats import collapse_adjacent_repeats

__all__ = [
    "DEFAULT_TEXT_PATTERNS",
    "DuplicatePattern",
    "apply_patterns",
    "collapse_adjacent_repeats",
    "dewrap",
    "markup_patterns",
    "normalize",
    "unify_line_endings",
]
