"""Selection-to-note pipeline.

Wires the pieces together the way the explanation panel uses them:

- ``extract_selection``: fragment -> normalized text + canonical markup
- ``note_markup``: what gets stored when the user adds the selection to
  the notebook
- ``drag_payload``: the plain and rich representations offered to a drop
  target
"""

# Pattern: Functional Core (pure functions; capture is the only host seam)

from __future__ import annotations

import logging

from notegrimoire.capture.selection import (
    HostSelection,
    TrackingRegion,
    capture_selection,
)
from notegrimoire.markup.canonicalizer import canonicalize, has_tag
from notegrimoire.markup.dedup import dedupe_markup
from notegrimoire.markup.fallback import text_to_markup
from notegrimoire.models import SelectionFragment, SelectionOutput
from notegrimoire.text.normalizer import normalize

logger = logging.getLogger(__name__)

PLAIN_MIME = "text/plain"
RICH_MIME = "text/html"


def extract_selection(fragment: SelectionFragment) -> SelectionOutput:
    """Produce the text and markup forms of one selection.

    The text and markup branches run independently; the markup branch only
    consults the raw text when canonicalization leaves no tag behind.
    """
    text = normalize(fragment.raw_text)
    markup = canonicalize(fragment.raw_markup, plain_text=fragment.raw_text)
    return SelectionOutput(text=text, markup=markup, rect=fragment.rect)


def capture_and_extract(
    selection: HostSelection | None, region: TrackingRegion
) -> SelectionOutput | None:
    """Capture *selection* and extract it, or return None when out of scope."""
    fragment = capture_selection(selection, region)
    if fragment is None:
        return None
    return extract_selection(fragment)


def note_markup(output: SelectionOutput) -> str:
    """Return the markup to persist for a note.

    Deduplicated canonical markup when it carries a tag; otherwise the
    normalized text converted to markup.
    """
    if output.markup and has_tag(output.markup):
        return dedupe_markup(output.markup)
    logger.debug("No structural markup for note, converting text")
    return text_to_markup(normalize(output.text))


def drag_payload(output: SelectionOutput) -> dict[str, str]:
    """Return the MIME-keyed representations for a drag source.

    Empty when the selection has no text.
    """
    if not output.text:
        return {}
    return {
        PLAIN_MIME: output.text,
        RICH_MIME: output.markup or text_to_markup(output.text),
    }
