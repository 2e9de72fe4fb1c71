"""Selection capture: gate a live selection and snapshot it as a fragment.

The host (a browser bridge, a test double, or ``DocumentSelection`` over an
lxml tree) supplies the selection object; this module only decides whether
the selection is in scope and copies out its two serializations.

Usage:
    fragment = capture_selection(host_selection, ElementRegion(panel))
    if fragment is None:
        ...  # hide the floating menu
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from notegrimoire.models import SelectionFragment, SelectionRect

__all__ = ["HostSelection", "TrackingRegion", "capture_selection"]

logger = logging.getLogger(__name__)


@runtime_checkable
class HostSelection(Protocol):
    """Protocol for a live selection supplied by the host.

    Mirrors the parts of a DOM ``Selection`` the capture step needs:
    - is_collapsed: zero-width selection
    - anchor_node: node the selection started in
    - to_string(): plain-text serialization
    - clone_contents(): serialized markup of the cloned range
    - bounding_rect(): layout box, or None when the host has no layout
    """

    @property
    def is_collapsed(self) -> bool: ...

    @property
    def anchor_node(self) -> Any: ...

    def to_string(self) -> str: ...

    def clone_contents(self) -> str: ...

    def bounding_rect(self) -> SelectionRect | None: ...


@runtime_checkable
class TrackingRegion(Protocol):
    """The region of the page whose selections become notes."""

    def contains(self, node: Any) -> bool: ...


def capture_selection(
    selection: HostSelection | None, region: TrackingRegion
) -> SelectionFragment | None:
    """Snapshot *selection* as a fragment, or return None when out of scope.

    A selection is out of scope when it is missing, collapsed, holds only
    whitespace, starts outside *region*, or has a zero-width layout box.

    Args:
        selection: The host's current selection.
        region: Tracking region the selection must be anchored in.

    Returns:
        A new SelectionFragment, or None.
    """
    if selection is None or selection.is_collapsed:
        logger.debug("Selection rejected: empty or collapsed")
        return None

    raw_text = selection.to_string()
    if not raw_text.strip():
        logger.debug("Selection rejected: whitespace only")
        return None

    if not region.contains(selection.anchor_node):
        logger.debug("Selection rejected: anchor outside tracking region")
        return None

    rect = selection.bounding_rect()
    if rect is not None and rect.width <= 0:
        logger.debug("Selection rejected: zero-width bounding box")
        return None

    return SelectionFragment(
        raw_text=raw_text, raw_markup=selection.clone_contents(), rect=rect
    )
