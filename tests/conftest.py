"""Shared fixtures for the notegrimoire test suite."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from notegrimoire.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

RENDERED_PAGE = (
    "<html><body>"
    '<div id="nav"><p>Menu item</p></div>'
    '<div id="explanation">'
    '<p class="md">First <strong class="x">para</strong></p>'
    "<p>Second Lac⁺</p>"
    '<p>Third <a href="#ref">reference</a></p>'
    "</div>"
    "</body></html>"
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give every test defaults-only settings and a fresh settings cache."""
    for key in list(os.environ):
        if key.startswith(("CAPTURE__", "CLI__")):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rendered_page() -> str:
    """A rendered explanation page with a navigation area outside the panel."""
    return RENDERED_PAGE
