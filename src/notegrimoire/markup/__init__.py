"""Markup canonicalization, dedup and plain-text fallback for selections."""

from notegrimoire.markup.canonicalizer import canonicalize, find_protected_ranges
from notegrimoire.markup.dedup import dedupe_markup
from notegrimoire.markup.fallback import (
    display_with_superscript,
    markup_to_text,
    text_to_markup,
)
from notegrimoire.markup.placeholders import PLACEHOLDER_PATTERN, PlaceholderTable

__all__ = [
    "PLACEHOLDER_PATTERN",
    "PlaceholderTable",
    "canonicalize",
    "dedupe_markup",
    "display_with_superscript",
    "find_protected_ranges",
    "markup_to_text",
    "text_to_markup",
]
