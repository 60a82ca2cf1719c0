"""
textanchor - Durable text anchoring for mutable documents.

This library provides:
- W3C Web Annotation TextPositionSelector and TextQuoteSelector models
- Position-then-quote resolution of selectors against a live document
- Span normalization onto whole text units
- A highlighter that draws, removes and redraws inline markers idempotently

Import patterns:

    # Primary API (recommended)
    from textanchor import Annotation, Highlighter, capture, resolve

    # Full submodule imports (for internal types)
    from textanchor.ranges import TextRange, NormalizedRange
    from textanchor.anchors import TextPositionAnchor, TextQuoteAnchor

Example usage:

    from textanchor import Annotation, Highlighter, Target, capture, from_html

    root = from_html("<p>The quick brown fox</p>")
    annotation = Annotation(target=[Target(selector=capture(root, (4, 9)))])

    highlighter = Highlighter(root)
    markers = await highlighter.draw(annotation)
    highlighter.undraw(annotation)
"""

__version__ = "0.1.0"

from textanchor.dom import Element, Text, from_html, from_xml, to_html
from textanchor.errors import (
    AlreadyNormalizedError,
    AnchoringError,
    MalformedSelectorError,
    OutOfRangeError,
    QuoteNotFoundError,
    TextAnchorError,
)
from textanchor.highlighter import Highlighter, HighlighterOptions, Marker
from textanchor.models import Anchor, Annotation, Target
from textanchor.resolution import resolve
from textanchor.selection import capture
from textanchor.selectors import TextPositionSelector, TextQuoteSelector

# Primary public API
__all__ = [
    "AlreadyNormalizedError",
    "Anchor",
    "AnchoringError",
    "Annotation",
    "Element",
    "Highlighter",
    "HighlighterOptions",
    "MalformedSelectorError",
    "Marker",
    "OutOfRangeError",
    "QuoteNotFoundError",
    "Target",
    "Text",
    "TextAnchorError",
    "TextPositionSelector",
    "TextQuoteSelector",
    "capture",
    "from_html",
    "from_xml",
    "resolve",
    "to_html",
]
