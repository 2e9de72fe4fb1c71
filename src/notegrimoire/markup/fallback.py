"""Plain text <-> minimal markup conversion.

Used whenever no structural markup is available for a selection: the drop
target only received ``text/plain``, or canonicalization produced markup
with no tag left in it.

The pair is intentionally one-directional. ``markup_to_text`` drops line
breaks and forgets which characters were superscripts, so
``markup_to_text(text_to_markup(t))`` is ``t`` with its Unicode sub/superscript
characters replaced by their ASCII equivalents and newlines removed.
"""

from __future__ import annotations

import re

# Unicode superscript/subscript characters and their ASCII equivalents
SUPERSCRIPT_MAP: dict[str, str] = {
    "⁺": "+",
    "⁻": "-",
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "⁵": "5",
    "⁶": "6",
    "⁷": "7",
    "⁸": "8",
    "⁹": "9",
    "⁼": "=",
    "⁽": "(",
    "⁾": ")",
}
SUBSCRIPT_MAP: dict[str, str] = {
    "₀": "0",
    "₁": "1",
    "₂": "2",
    "₃": "3",
    "₄": "4",
    "₅": "5",
    "₆": "6",
    "₇": "7",
    "₈": "8",
    "₉": "9",
    "₊": "+",
    "₋": "-",
    "₌": "=",
    "₍": "(",
    "₎": ")",
    "ₐ": "a",
    "ₑ": "e",
    "ₒ": "o",
    "ₓ": "x",
    "ₔ": "ə",
    "ₕ": "h",
    "ₖ": "k",
    "ₗ": "l",
    "ₘ": "m",
    "ₙ": "n",
    "ₚ": "p",
    "ₛ": "s",
    "ₜ": "t",
}

_TAG = re.compile(r"<[^>]+>")

# The small fixed set of escapes the renderer emits
_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&#39;", "'"),
    ("&quot;", '"'),
)

# Gene-notation tokens shown with a superscript plus in note views
_DISPLAY_SUPERSCRIPTS: tuple[tuple[str, str], ...] = (
    ("Lac+", "Lac⁺"),
    ("lac+", "lac⁺"),
    ("Ton+", "Ton⁺"),
    ("D+", "D⁺"),
    ("A+", "A⁺"),
)


def _convert_char(char: str) -> str:
    if char in SUPERSCRIPT_MAP:
        return f"<sup>{SUPERSCRIPT_MAP[char]}</sup>"
    if char in SUBSCRIPT_MAP:
        return f"<sub>{SUBSCRIPT_MAP[char]}</sub>"
    if char == "\n":
        return "<br>"
    return char


def text_to_markup(text: str | None) -> str:
    """Convert plain text to minimal markup.

    Each Unicode superscript character becomes ``<sup>x</sup>``, each
    subscript character ``<sub>x</sub>`` (with ``x`` its ASCII equivalent),
    and each newline ``<br>``. Everything else passes through unchanged.

    Args:
        text: Plain text, typically already normalized.

    Returns:
        Markup string; empty for empty or None input.
    """
    if not text:
        return ""
    return "".join(_convert_char(char) for char in text)


def markup_to_text(markup: str | None) -> str:
    """Strip every tag and decode the fixed entity set, for edit-mode display.

    Lossy: line breaks are dropped, not expanded to newlines.
    """
    if not markup:
        return ""
    text = _TAG.sub("", markup)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text.strip()


def display_with_superscript(text: str | None) -> str:
    """Render gene-notation ``+`` markers as superscripts for display.

    Display only: stored note content keeps the ASCII form.
    """
    if not text:
        return ""
    for plain, shown in _DISPLAY_SUPERSCRIPTS:
        text = text.replace(plain, shown)
    return text
