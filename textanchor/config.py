"""Shared configuration for anchoring and highlighting."""

import os

# Characters of context captured on either side of a quote
CONTEXT_LENGTH = 32

# Default search cursor for quote resolution when no hint is given
DEFAULT_QUOTE_CURSOR = 0

# CSS class applied to highlight markers (configurable via environment variables)
HIGHLIGHT_CLASS = os.environ.get("TEXTANCHOR_HIGHLIGHT_CLASS", "annotator-hl")

# Number of annotations drawn per chunk in draw_all
CHUNK_SIZE = int(os.environ.get("TEXTANCHOR_CHUNK_SIZE", "10"))

# Pause between chunks in milliseconds
CHUNK_DELAY_MS = float(os.environ.get("TEXTANCHOR_CHUNK_DELAY_MS", "10"))

# Class prefix that marks annotation UI elements (selections inside are ignored)
UI_CLASS_PREFIX = "annotator-"

# Attribute carrying the persisted annotation id on each marker
ANNOTATION_ID_ATTRIBUTE = "data-annotation-id"


def validate_span(start: int, end: int) -> None:
    """Validate a character span.

    Args:
        start: Start offset
        end: End offset

    Raises:
        ValueError: If an offset is negative or end precedes start
    """
    if start < 0 or end < 0:
        raise ValueError(
            f"Invalid span: ({start}, {end}). Offsets must be non-negative (e.g., 4 9)"
        )
    if end < start:
        raise ValueError(f"Invalid span: ({start}, {end}). End must not precede start")


def validate_highlight_class(name: str) -> None:
    """Validate a highlight class name.

    Raises:
        ValueError: If the name is empty or contains whitespace
    """
    if not name or any(ch.isspace() for ch in name):
        raise ValueError(
            f"Invalid highlight class: '{name}'. Expected a single CSS class (e.g., annotator-hl)"
        )
