"""Markup canonicalization for selected fragments.

The markup of a selection is a clone of the live rendered tree: KaTeX
formula subtrees, inline wrappers carrying renderer classes and styles,
paragraph and table containers, links. ``canonicalize()`` reduces it to a
minimal fragment that only uses ``<br>``, ``<strong>``, ``<em>``,
``<code>``, bare ``<span>`` wrappers and the protected spans (formulas,
superscripts, subscripts), which are carried through byte-for-byte.

Phases run strictly in order:

1.  protect formula subtrees
2.  protect explicit ``<sup>``/``<sub>`` tags
3.  protect ``<span>`` wrappers whose text holds a sup/sub character
4.  block containers -> ``<br>``
5.  bare inline formatting tags
6.  unwrap generic ``<span>`` wrappers
7.  strip links
8.  strip residual ``style``/``class``/``id`` attributes
9.  collapse whitespace and ``<br>`` runs
10. restore protected spans
11. fall back to converted plain text when no tag survived

Whitespace collapses before restoration so protected spans come back
exactly as captured.

Every phase is a best-effort pattern match over the string. Nothing here
raises on odd input: an unmatched tag is left as literal text.
"""

# Pattern: Functional Core (pure functions for markup transformation)

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from notegrimoire.config import get_settings
from notegrimoire.markup.fallback import markup_to_text, text_to_markup
from notegrimoire.markup.placeholders import PlaceholderTable, contains_token
from notegrimoire.models import SpanKind
from notegrimoire.text.normalizer import normalize

logger = logging.getLogger(__name__)

# Unicode superscript block plus the Latin-1 superscript digits
SUPERSCRIPT_CHARS = "\u2070-\u207f\u00b2\u00b3\u00b9"
# Subscript digits, signs and letters (U+2080 to U+209C)
SUBSCRIPT_CHARS = "\u2080-\u209c"
_SUPERSCRIPT_CHAR = re.compile(f"[{SUPERSCRIPT_CHARS}]")
_SUBSCRIPT_CHAR = re.compile(f"[{SUBSCRIPT_CHARS}]")
_SCRIPT_CHAR = re.compile(f"[{SUPERSCRIPT_CHARS}{SUBSCRIPT_CHARS}]")

_FLAGS = re.IGNORECASE | re.DOTALL

_TAG = re.compile(r"<[^>]+>")
_SPAN_OPEN = re.compile(r"<span\b[^>]*>", re.IGNORECASE)
_SPAN_TAG = re.compile(r"<(/?)span\b[^>]*>", re.IGNORECASE)
_CLASS_ATTR = re.compile(
    r"""(?<![\w-])class\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>"']+))""", re.IGNORECASE
)
_EXPLICIT_SCRIPT = {
    SpanKind.SUPERSCRIPT: re.compile(r"<sup\b[^>]*>.*?</sup\s*>", _FLAGS),
    SpanKind.SUBSCRIPT: re.compile(r"<sub\b[^>]*>.*?</sub\s*>", _FLAGS),
}

# Containers whose end is a line break in the note
_LINE_BLOCK_TAGS = (
    "blockquote|caption|dd|div|dt|figcaption|h[1-6]|li|p|pre|section|article"
    "|header|footer|tr"
)
# Containers that vanish without leaving a break of their own
_SILENT_BLOCK_TAGS = "dl|figure|ol|table|tbody|tfoot|thead|ul"
# Table cells end with a space so adjacent cell text stays apart
_CELL_TAGS = "td|th"

_LINE_BLOCK_CLOSE = re.compile(rf"</(?:{_LINE_BLOCK_TAGS})\s*>", re.IGNORECASE)
_LINE_BLOCK_OPEN = re.compile(rf"<(?:{_LINE_BLOCK_TAGS})\b[^>]*>", re.IGNORECASE)
_SILENT_BLOCK_TAG = re.compile(rf"</?(?:{_SILENT_BLOCK_TAGS})\b[^>]*>", re.IGNORECASE)
_CELL_CLOSE = re.compile(rf"</(?:{_CELL_TAGS})\s*>", re.IGNORECASE)
_CELL_OPEN = re.compile(rf"<(?:{_CELL_TAGS})\b[^>]*>", re.IGNORECASE)
_HR = re.compile(r"<hr\b[^>]*>", re.IGNORECASE)
_BR = re.compile(r"<br\b[^>]*>", re.IGNORECASE)
_BR_RUN = re.compile(r"<br>(?:\s*<br>)+")

_INLINE_OPEN = re.compile(r"<(strong|em|code)\b[^>]*>", re.IGNORECASE)
_BOLD_OPEN = re.compile(r"<b\b[^>]*>", re.IGNORECASE)
_BOLD_CLOSE = re.compile(r"</b\s*>", re.IGNORECASE)
_ITALIC_OPEN = re.compile(r"<i\b[^>]*>", re.IGNORECASE)
_ITALIC_CLOSE = re.compile(r"</i\s*>", re.IGNORECASE)

_LINK_TAG = re.compile(r"<a\b[^>]*>|</a\s*>", re.IGNORECASE)

_PRESENTATIONAL_ATTR = re.compile(
    r"""\s+(?:style|class|id)\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>"']+)""", re.IGNORECASE
)
_WHITESPACE_RUN = re.compile(r"\s+")


def text_content(markup: str) -> str:
    """Return *markup* with every tag removed."""
    return _TAG.sub("", markup)


def has_script_char(text: str) -> bool:
    """Check whether *text* holds a Unicode superscript or subscript character."""
    return _SCRIPT_CHAR.search(text) is not None


def _span_end(markup: str, start: int) -> int | None:
    """Return the index just past the ``</span>`` balancing an open tag.

    Args:
        markup: Markup being scanned.
        start: Index just past the opening ``<span ...>``.

    Returns:
        End index of the balancing close tag, or None when the span is never
        closed.
    """
    depth = 1
    for match in _SPAN_TAG.finditer(markup, start):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.end()
        else:
            depth += 1
    return None


def _protect_spans(
    markup: str,
    table: PlaceholderTable,
    kind: SpanKind,
    should_protect: Callable[[str, str], bool],
) -> str:
    """Replace whole ``<span>`` subtrees accepted by *should_protect*.

    Spans are visited outermost first. A rejected span is descended into, so
    a nested span can still be protected. *should_protect* receives the open
    tag and the full span markup.
    """
    out: list[str] = []
    pos = 0
    search_from = 0
    while (match := _SPAN_OPEN.search(markup, search_from)) is not None:
        end = _span_end(markup, match.end())
        span = markup[match.start() : end] if end is not None else ""
        if span and should_protect(match.group(0), span):
            out.append(markup[pos : match.start()])
            out.append(table.protect(kind, span))
            pos = search_from = match.start() + len(span)
        else:
            search_from = match.end()
    out.append(markup[pos:])
    return "".join(out)


def _class_value(open_tag: str) -> str:
    match = _CLASS_ATTR.search(open_tag)
    if match is None:
        return ""
    return next(group for group in match.groups() if group is not None)


def protect_formulas(markup: str, table: PlaceholderTable, marker: str) -> str:
    """Swap formula containers (class holds *marker*) for placeholders."""
    return _protect_spans(
        markup,
        table,
        SpanKind.FORMULA,
        lambda open_tag, _span: marker in _class_value(open_tag),
    )


def protect_explicit_scripts(markup: str, table: PlaceholderTable) -> str:
    """Swap ``<sup>``/``<sub>`` elements, with their content, for placeholders."""
    for kind, pattern in _EXPLICIT_SCRIPT.items():
        markup = pattern.sub(
            lambda m, kind=kind: table.protect(kind, m.group(0)), markup
        )
    return markup


def protect_script_wrappers(markup: str, table: PlaceholderTable) -> str:
    """Swap ``<span>`` wrappers whose text holds sup/sub characters.

    Superscript wrappers holding any placeholder are skipped. Subscript
    wrappers are skipped when they hold a formula or superscript placeholder.
    """
    markup = _protect_spans(
        markup,
        table,
        SpanKind.SUPERSCRIPT,
        lambda _tag, span: not contains_token(span)
        and _SUPERSCRIPT_CHAR.search(text_content(span)) is not None,
    )
    return _protect_spans(
        markup,
        table,
        SpanKind.SUBSCRIPT,
        lambda _tag, span: not contains_token(
            span, SpanKind.FORMULA, SpanKind.SUPERSCRIPT
        )
        and _SUBSCRIPT_CHAR.search(text_content(span)) is not None,
    )


def normalize_block_separators(markup: str) -> str:
    """Turn block container boundaries into single ``<br>`` line breaks."""
    markup = _BR.sub("<br>", markup)
    markup = _HR.sub("<br>", markup)
    markup = _LINE_BLOCK_CLOSE.sub("<br>", markup)
    markup = _LINE_BLOCK_OPEN.sub("", markup)
    markup = _CELL_CLOSE.sub(" ", markup)
    markup = _CELL_OPEN.sub("", markup)
    markup = _SILENT_BLOCK_TAG.sub("", markup)
    return _BR_RUN.sub("<br>", markup)


def normalize_inline_formatting(markup: str) -> str:
    """Rewrite emphasis/strong/code opening tags to their bare form."""
    markup = _INLINE_OPEN.sub(lambda m: f"<{m.group(1).lower()}>", markup)
    markup = _BOLD_OPEN.sub("<strong>", markup)
    markup = _BOLD_CLOSE.sub("</strong>", markup)
    markup = _ITALIC_OPEN.sub("<em>", markup)
    return _ITALIC_CLOSE.sub("</em>", markup)


def strip_presentational_attributes(markup: str) -> str:
    """Remove ``style``, ``class`` and ``id`` attributes from every tag."""
    return _TAG.sub(lambda m: _PRESENTATIONAL_ATTR.sub("", m.group(0)), markup)


def strip_generic_wrappers(markup: str) -> str:
    """Unwrap ``<span>`` wrappers, keeping those whose text has sup/sub chars.

    Kept wrappers lose their presentational attributes. Unmatched open or
    close tags stay as they are.
    """
    out: list[str] = []
    open_slots: list[int] = []
    pos = 0
    for match in _SPAN_TAG.finditer(markup):
        out.append(markup[pos : match.start()])
        pos = match.end()
        if not match.group(1):
            open_slots.append(len(out))
            out.append(match.group(0))
            continue
        if not open_slots:
            out.append(match.group(0))
            continue
        slot = open_slots.pop()
        inner = "".join(out[slot + 1 :])
        if has_script_char(text_content(inner)):
            out[slot] = strip_presentational_attributes(out[slot])
            out.append(match.group(0))
        else:
            out[slot] = ""
    out.append(markup[pos:])
    return "".join(out)


def strip_links(markup: str) -> str:
    """Remove ``<a>`` tags, keeping their content."""
    return _LINK_TAG.sub("", markup)


def collapse_whitespace(markup: str) -> str:
    """Fold whitespace runs to one space and ``<br>`` runs to one break."""
    markup = _WHITESPACE_RUN.sub(" ", markup)
    return _BR_RUN.sub("<br>", markup).strip()


def has_tag(markup: str) -> bool:
    return _TAG.search(markup) is not None


def find_protected_ranges(
    markup: str, formula_marker: str
) -> list[tuple[int, int, SpanKind]]:
    """Locate protected spans in (canonical) markup without replacing them.

    Returns:
        ``(start, end, kind)`` for each formula container, each ``<span>``
        wrapper holding sup/sub characters and each explicit ``<sup>``/``<sub>``
        element outside a formula.
    """
    formulas: list[tuple[int, int, SpanKind]] = []
    wrappers: list[tuple[int, int, SpanKind]] = []

    search_from = 0
    while (match := _SPAN_OPEN.search(markup, search_from)) is not None:
        end = _span_end(markup, match.end())
        if end is None:
            search_from = match.end()
        elif formula_marker in _class_value(match.group(0)):
            formulas.append((match.start(), end, SpanKind.FORMULA))
            search_from = end
        elif has_script_char(text := text_content(markup[match.start() : end])):
            kind = (
                SpanKind.SUPERSCRIPT
                if _SUPERSCRIPT_CHAR.search(text)
                else SpanKind.SUBSCRIPT
            )
            wrappers.append((match.start(), end, kind))
            search_from = end
        else:
            search_from = match.end()

    scripts = [
        (m.start(), m.end(), kind)
        for kind, pattern in _EXPLICIT_SCRIPT.items()
        for m in pattern.finditer(markup)
        if not _inside(formulas, m.start())
    ]
    return formulas + wrappers + scripts


def _inside(ranges: list[tuple[int, int, SpanKind]], index: int) -> bool:
    return any(start <= index < end for start, end, _kind in ranges)


def canonicalize(
    raw_markup: str | None,
    *,
    plain_text: str | None = None,
    formula_marker: str | None = None,
) -> str:
    """Reduce a selection's raw markup to canonical markup.

    Args:
        raw_markup: Serialized markup of the cloned selection range.
        plain_text: The selection's raw plain text. Used for the fallback when
            no tag survives canonicalization; without it the markup's own
            text is entity-decoded and normalized instead.
        formula_marker: Class marker of formula containers. Defaults to the
            configured ``capture.formula_marker``.

    Returns:
        Canonical markup. Empty string for empty input.
    """
    if formula_marker is None:
        formula_marker = get_settings().capture.formula_marker

    markup = raw_markup or ""
    table = PlaceholderTable()

    markup = protect_formulas(markup, table, formula_marker)
    markup = protect_explicit_scripts(markup, table)
    markup = protect_script_wrappers(markup, table)
    logger.debug(
        "Protected %d formula, %d superscript, %d subscript spans",
        table.count(SpanKind.FORMULA),
        table.count(SpanKind.SUPERSCRIPT),
        table.count(SpanKind.SUBSCRIPT),
    )

    markup = normalize_block_separators(markup)
    markup = normalize_inline_formatting(markup)
    markup = strip_generic_wrappers(markup)
    markup = strip_links(markup)
    markup = strip_presentational_attributes(markup)
    markup = collapse_whitespace(markup)
    markup = table.restore(markup)

    if has_tag(markup):
        return markup

    logger.debug("Canonical markup has no tags, converting plain text instead")
    if plain_text is not None:
        return text_to_markup(normalize(plain_text))
    return text_to_markup(normalize(markup_to_text(markup)))
