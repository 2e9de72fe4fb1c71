"""Tests for selection capture and its scope gating."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from notegrimoire.capture.selection import (
    HostSelection,
    TrackingRegion,
    capture_selection,
)
from notegrimoire.models import SelectionRect

PANEL = object()
OUTSIDE = object()


@dataclass
class FakeSelection:
    """In-memory stand-in for a host selection."""

    text: str = "Lac⁺ operon"
    markup: str = "<p>Lac<sup>+</sup> operon</p>"
    is_collapsed: bool = False
    anchor_node: Any = PANEL
    rect: SelectionRect | None = None

    def to_string(self) -> str:
        return self.text

    def clone_contents(self) -> str:
        return self.markup

    def bounding_rect(self) -> SelectionRect | None:
        return self.rect


class PanelRegion:
    def contains(self, node: Any) -> bool:
        return node is PANEL


class TestProtocols:
    """The fakes satisfy the runtime-checkable protocols."""

    def test_fake_selection_is_host_selection(self) -> None:
        assert isinstance(FakeSelection(), HostSelection)

    def test_panel_region_is_tracking_region(self) -> None:
        assert isinstance(PanelRegion(), TrackingRegion)


class TestCaptureSelection:
    """Tests for capture_selection()."""

    def test_in_scope_selection_captured(self) -> None:
        rect = SelectionRect(top=100, left=20, width=200, height=18)
        fragment = capture_selection(FakeSelection(rect=rect), PanelRegion())
        assert fragment is not None
        assert fragment.raw_text == "Lac⁺ operon"
        assert fragment.raw_markup == "<p>Lac<sup>+</sup> operon</p>"
        assert fragment.rect == rect

    def test_missing_selection(self) -> None:
        assert capture_selection(None, PanelRegion()) is None

    def test_collapsed_selection(self) -> None:
        selection = FakeSelection(is_collapsed=True)
        assert capture_selection(selection, PanelRegion()) is None

    def test_whitespace_only_selection(self) -> None:
        selection = FakeSelection(text=" \n\t ")
        assert capture_selection(selection, PanelRegion()) is None

    def test_anchor_outside_region(self) -> None:
        """Text outside the tracking region never becomes a fragment."""
        selection = FakeSelection(anchor_node=OUTSIDE)
        assert capture_selection(selection, PanelRegion()) is None

    def test_zero_width_box(self) -> None:
        rect = SelectionRect(top=0, left=0, width=0, height=10)
        assert capture_selection(FakeSelection(rect=rect), PanelRegion()) is None

    def test_no_layout_box_allowed(self) -> None:
        """Hosts without layout report no rect; the selection still counts."""
        fragment = capture_selection(FakeSelection(), PanelRegion())
        assert fragment is not None
        assert fragment.rect is None

    def test_fragment_is_a_snapshot(self) -> None:
        selection = FakeSelection()
        fragment = capture_selection(selection, PanelRegion())
        selection.text = "changed"
        assert fragment is not None
        assert fragment.raw_text == "Lac⁺ operon"


class TestSelectionRect:
    """Tests for SelectionRect.menu_anchor()."""

    def test_menu_centred_above(self) -> None:
        rect = SelectionRect(top=100, left=20, width=200, height=18)
        assert rect.menu_anchor() == (55, 120)
