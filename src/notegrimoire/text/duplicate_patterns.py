"""Known duplicate patterns for selections of genetics explanations.

The generic adjacent-repeat collapse only catches verbatim repeats. These
entries cover the asymmetric cases: the same phrase rendered once in an
alternate character form (``⁺`` vs ``+`` vs ``*``) right before its
canonical form, or a DOM boundary clone with different spacing. The later
occurrence is kept.

The table is pluggable: ``normalize()`` and ``dedupe_markup()`` accept any
sequence of ``DuplicatePattern``. Extend it only with observed duplicates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class DuplicatePattern:
    """One known duplicate and how to collapse it.

    Attributes:
        name: Short identifier for logging.
        pattern: Compiled regex matching the duplicated text.
        replacement: Replacement (may reference groups, e.g. ``\\1``).
        guard: When non-empty, the pattern only applies if at least one of
            these substrings is present in the text.
    """

    name: str
    pattern: re.Pattern[str]
    replacement: str
    guard: tuple[str, ...] = ()

    def apply(self, text: str) -> str:
        if self.guard and not any(needle in text for needle in self.guard):
            return text
        return self.pattern.sub(self.replacement, text)


def apply_patterns(text: str, patterns: tuple[DuplicatePattern, ...]) -> str:
    """Apply *patterns* to *text* in table order."""
    for entry in patterns:
        text = entry.apply(text)
    return text


_LAC_MIXED_GUARD = ("Lac⁺+Lac⁺", "Lac+Lac+", "Lac+Lac⁺")
_LAC_LOWER_GUARD = ("Lac+Lac⁺", "Lac⁺+Lac⁺")

DEFAULT_TEXT_PATTERNS: tuple[DuplicatePattern, ...] = (
    DuplicatePattern(
        "ton-chain-repeat", re.compile(r"(Ton\+→A\+→D\+)+"), "Ton+→A+→D+"
    ),
    DuplicatePattern("lac-repeat", re.compile(r"(Lac\+)+"), "Lac+"),
    DuplicatePattern(
        "ton-chain-mixed",
        re.compile(r"Ton[⁺+]→A[⁺+]→D[⁺+]→(Ton\*→A\*→D\*)"),
        r"\1",
    ),
    DuplicatePattern(
        "ton-chain-ascii", re.compile(r"Ton\+→A\+→D\+→(Ton\*→A\*→D\*)"), r"\1"
    ),
    DuplicatePattern(
        "lac-mixed", re.compile(r"Lac[⁺+]\+Lac\*"), "", guard=_LAC_MIXED_GUARD
    ),
    DuplicatePattern(
        "lac-lowercase", re.compile(r"lac\+lac\+"), "", guard=_LAC_LOWER_GUARD
    ),
    DuplicatePattern("f-prime-lac", re.compile(r"(F'Lac)+"), "F'Lac"),
    DuplicatePattern(
        "lac-operon-genes", re.compile(re.escape("LacZ, Y, ALacZ,Y,A")), "LacZ, Y, A"
    ),
    DuplicatePattern(
        "genotype-list",
        re.compile(re.escape("a-,ton-lac-,d-a-,ton-, lac-,d-")),
        "a-,ton-, lac-,d-",
    ),
)


def markup_patterns(window: int) -> tuple[DuplicatePattern, ...]:
    """Build the markup flavour of the table.

    Markup duplicates may have up to *window* characters of intervening tags
    between the two copies.

    Args:
        window: Maximum characters allowed between the copies.
    """
    between = f"[\\s\\S]{{0,{window}}}?"
    return (
        DuplicatePattern(
            "ton-chain-mixed",
            re.compile(f"Ton[⁺+]→A[⁺+]→D[⁺+]{between}(Ton\\*→A\\*→D\\*)"),
            r"\1",
        ),
        DuplicatePattern(
            "ton-chain-ascii",
            re.compile(f"Ton\\+→A\\+→D\\+{between}(Ton\\*→A\\*→D\\*)"),
            r"\1",
        ),
        DuplicatePattern(
            "lac-mixed", re.compile(r"Lac[⁺+]\+Lac\*"), "", guard=_LAC_MIXED_GUARD
        ),
        DuplicatePattern(
            "lac-lowercase", re.compile(r"lac\+lac\+"), "", guard=_LAC_LOWER_GUARD
        ),
        DuplicatePattern("f-prime-lac", re.compile(f"(F'Lac){between}\\1"), r"\1"),
        DuplicatePattern(
            "lac-operon-genes",
            re.compile(re.escape("LacZ, Y, ALacZ,Y,A")),
            "LacZ, Y, A",
        ),
        DuplicatePattern(
            "genotype-list",
            re.compile(re.escape("a-,ton-lac-,d-a-,ton-, lac-,d-")),
            "a-,ton-, lac-,d-",
        ),
    )
