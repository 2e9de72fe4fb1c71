"""Placeholder tokens for protected spans.

A protected span (formula, superscript, subscript) is swapped for a plain
token before the destructive sanitising phases of canonicalization, then
spliced back verbatim. Tokens are plain word characters, so no tag or
attribute pattern can match inside them.

Format: __FORMULA_PLACEHOLDER_{n}__, __SUPERSCRIPT_PLACEHOLDER_{n}__,
__SUBSCRIPT_PLACEHOLDER_{n}__ with ``n`` zero-based per kind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from notegrimoire.models import ProtectedSpan, SpanKind

PLACEHOLDER_PATTERN = re.compile(
    r"__(FORMULA|SUPERSCRIPT|SUBSCRIPT)_PLACEHOLDER_(\d+)__"
)

# Restoration follows protection order
RESTORE_ORDER = (SpanKind.FORMULA, SpanKind.SUPERSCRIPT, SpanKind.SUBSCRIPT)

# Nested tokens (a protected span recorded around an earlier token) resolve
# within this many rounds
_MAX_RESTORE_ROUNDS = 8


def token_prefix(kind: SpanKind) -> str:
    """Return the fixed prefix shared by every token of *kind*."""
    return f"__{kind.upper()}_PLACEHOLDER_"


def contains_token(text: str, *kinds: SpanKind) -> bool:
    """Check whether *text* holds a token of any of *kinds* (all kinds if none)."""
    if not kinds:
        return PLACEHOLDER_PATTERN.search(text) is not None
    return any(token_prefix(kind) in text for kind in kinds)


@dataclass
class PlaceholderTable:
    """Per-call record of protected spans, keyed by kind and index.

    One table lives for exactly one canonicalization call, so the index
    counters never leak between calls.
    """

    spans: dict[SpanKind, list[ProtectedSpan]] = field(
        default_factory=lambda: {kind: [] for kind in SpanKind}
    )

    def protect(self, kind: SpanKind, original: str) -> str:
        """Record *original* and return the token standing in for it."""
        bucket = self.spans[kind]
        span = ProtectedSpan(kind=kind, index=len(bucket), original=original)
        bucket.append(span)
        return span.token

    def count(self, kind: SpanKind) -> int:
        return len(self.spans[kind])

    def restore(self, markup: str) -> str:
        """Substitute every recorded token in *markup* with its original text."""
        for kind in RESTORE_ORDER:
            for span in self.spans[kind]:
                markup = markup.replace(span.token, span.original, 1)

        # A span recorded around an earlier token carries that token inside
        # its original text; resolve what surfaced after the first sweep.
        for _ in range(_MAX_RESTORE_ROUNDS):
            if not PLACEHOLDER_PATTERN.search(markup):
                break
            markup = PLACEHOLDER_PATTERN.sub(self._lookup, markup)
        return markup

    def _lookup(self, match: re.Match[str]) -> str:
        kind = SpanKind(match.group(1).lower())
        index = int(match.group(2))
        bucket = self.spans[kind]
        if index < len(bucket):
            return bucket[index].original
        return match.group(0)
