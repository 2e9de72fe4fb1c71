"""Host selection over a rendered HTML document parsed with lxml.

Outside a browser there is no live ``Selection``; this adapter models one
as an inclusive run of elements in document order, from a start element to
an end element (and the end element's subtree). It backs the CLI and
tests, and lets server-side code clip notes from stored renders.
"""

from __future__ import annotations

import html as html_module
from typing import Any

from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from notegrimoire.models import SelectionRect


class SelectionError(Exception):
    """A document or XPath expression could not be resolved for selection."""


def parse_document(markup: str) -> HtmlElement:
    """Parse rendered HTML into an lxml document tree.

    Raises:
        SelectionError: If *markup* is empty or unparseable.
    """
    try:
        return lxml_html.document_fromstring(markup)
    except (etree.LxmlError, ValueError) as exc:
        msg = f"Cannot parse document: {exc}"
        raise SelectionError(msg) from exc


def _elements(tree: HtmlElement, xpath: str) -> list[HtmlElement]:
    try:
        found = tree.xpath(xpath)
    except etree.XPathError as exc:
        msg = f"Invalid XPath {xpath!r}: {exc}"
        raise SelectionError(msg) from exc
    if not isinstance(found, list):
        msg = f"XPath {xpath!r} does not select elements"
        raise SelectionError(msg)
    return [node for node in found if isinstance(node, HtmlElement)]


class ElementRegion:
    """Tracking region rooted at one element of the document."""

    def __init__(self, element: HtmlElement) -> None:
        self.element = element

    def contains(self, node: Any) -> bool:
        if node is None or not hasattr(node, "iterancestors"):
            return False
        if node is self.element:
            return True
        return any(ancestor is self.element for ancestor in node.iterancestors())


class DocumentSelection:
    """A selection covering document-order elements from *start* to *end*."""

    def __init__(
        self,
        start: HtmlElement | None,
        end: HtmlElement | None = None,
        rect: SelectionRect | None = None,
    ) -> None:
        self._start = start
        self._end = end if end is not None else start
        self._rect = rect

    @property
    def is_collapsed(self) -> bool:
        return self._start is None

    @property
    def anchor_node(self) -> HtmlElement | None:
        return self._start

    def bounding_rect(self) -> SelectionRect | None:
        return self._rect

    def covered_roots(self) -> list[HtmlElement]:
        """Return the top-most covered elements, in document order."""
        if self._start is None or self._end is None:
            return []

        root = self._start.getroottree().getroot()
        order = list(root.iter(etree.Element))
        first = order.index(self._start)
        last_anchor = order.index(self._end)
        if last_anchor < first:
            first, last_anchor = last_anchor, first
        end_element = order[last_anchor]
        last = last_anchor + sum(1 for _ in end_element.iterdescendants(etree.Element))

        covered = order[first : last + 1]
        covered_set = set(covered)
        return [el for el in covered if el.getparent() not in covered_set]

    def to_string(self) -> str:
        roots = self.covered_roots()
        pieces: list[str] = []
        for position, element in enumerate(roots):
            pieces.append(element.text_content())
            if position < len(roots) - 1 and element.tail:
                pieces.append(element.tail)
        return "".join(pieces)

    def clone_contents(self) -> str:
        roots = self.covered_roots()
        pieces: list[str] = []
        for position, element in enumerate(roots):
            pieces.append(
                lxml_html.tostring(element, encoding="unicode", with_tail=False)
            )
            if position < len(roots) - 1 and element.tail:
                pieces.append(html_module.escape(element.tail, quote=False))
        return "".join(pieces)


def select_between(
    tree: HtmlElement,
    start_xpath: str,
    end_xpath: str | None = None,
    rect: SelectionRect | None = None,
) -> DocumentSelection:
    """Build a selection from the first matches of two XPath expressions.

    When either expression matches nothing the selection is collapsed.

    Raises:
        SelectionError: If an expression is invalid or selects non-elements.
    """
    starts = _elements(tree, start_xpath)
    ends = _elements(tree, end_xpath) if end_xpath else starts
    if not starts or not ends:
        return DocumentSelection(None, rect=rect)
    return DocumentSelection(starts[0], ends[0], rect=rect)


def region_from_xpath(tree: HtmlElement, xpath: str) -> ElementRegion | None:
    """Return the tracking region at the first match of *xpath*, if any."""
    found = _elements(tree, xpath)
    if not found:
        return None
    return ElementRegion(found[0])
