"""Data models for selection fragments and their extracted forms.

Plain frozen dataclasses: every value is created once per selection event
and superseded, never mutated, by the next one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

# Floating menu sits this many pixels above the selection
_MENU_OFFSET_PX = 45


@dataclass(frozen=True)
class SelectionRect:
    """Bounding rectangle of a live selection, in viewport pixels."""

    top: float
    left: float
    width: float
    height: float

    def menu_anchor(self) -> tuple[float, float]:
        """Return ``(top, left)`` for a menu centred above the selection."""
        return (self.top - _MENU_OFFSET_PX, self.left + self.width / 2)


@dataclass(frozen=True)
class SelectionFragment:
    """One user selection's paired raw text/markup snapshot."""

    raw_text: str
    raw_markup: str
    rect: SelectionRect | None = None


class SpanKind(StrEnum):
    """Kinds of subtree that pass through canonicalization unmodified."""

    FORMULA = "formula"
    SUPERSCRIPT = "superscript"
    SUBSCRIPT = "subscript"


@dataclass(frozen=True)
class ProtectedSpan:
    """A substring of raw markup held aside while the markup is sanitised."""

    kind: SpanKind
    index: int
    original: str

    @property
    def token(self) -> str:
        return f"__{self.kind.upper()}_PLACEHOLDER_{self.index}__"


@dataclass(frozen=True)
class SelectionOutput:
    """Normalized text and canonical markup for one selection."""

    text: str
    markup: str
    rect: SelectionRect | None = None
