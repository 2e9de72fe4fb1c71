"""Selection capture: scope gating and host selection adapters."""

from notegrimoire.capture.lxml_selection import (
    DocumentSelection,
    ElementRegion,
    SelectionError,
    parse_document,
    region_from_xpath,
    select_between,
)
from notegrimoire.capture.selection import (
    HostSelection,
    TrackingRegion,
    capture_selection,
)

__all__ = [
    "DocumentSelection",
    "ElementRegion",
    "HostSelection",
    "SelectionError",
    "TrackingRegion",
    "capture_selection",
    "parse_document",
    "region_from_xpath",
    "select_between",
]
