"""
Selector resolution pipeline.

Resolves an annotation's selectors to a single character span:

1. Resolve the position selector (cheap, stale-sensitive)
2. If a quote selector is present, verify the position span's text against it
3. On failure or mismatch, resolve the quote selector (self-verifying, scans content)
4. If neither yields a span, raise AnchoringError

The pipeline is asynchronous so that selector kinds needing external
lookups can take part without changing callers.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from textanchor.anchors import TextPositionAnchor, TextQuoteAnchor
from textanchor.dom.nodes import Element
from textanchor.errors import (
    AnchoringError,
    OutOfRangeError,
    PositionMismatchError,
    QuoteNotFoundError,
)
from textanchor.logging_config import logger
from textanchor.models import Anchor
from textanchor.selectors import TextPositionSelector, TextQuoteSelector

if TYPE_CHECKING:
    from textanchor.models import Annotation


def partition_selectors(
    selectors: Iterable[TextPositionSelector | TextQuoteSelector],
) -> tuple[TextPositionSelector | None, TextQuoteSelector | None]:
    """Return the first position selector and the first quote selector."""
    position: TextPositionSelector | None = None
    quote: TextQuoteSelector | None = None
    for selector in selectors:
        if isinstance(selector, TextPositionSelector) and position is None:
            position = selector
        elif isinstance(selector, TextQuoteSelector) and quote is None:
            quote = selector
    return position, quote


async def _query_position(root: Element, selector: TextPositionSelector) -> Anchor:
    return TextPositionAnchor.from_selector(root, selector).to_anchor()


async def _query_quote(root: Element, selector: TextQuoteSelector, hint: int | None) -> Anchor:
    return TextQuoteAnchor.from_selector(root, selector).to_anchor(hint=hint)


async def resolve(
    selectors: Iterable[TextPositionSelector | TextQuoteSelector],
    root: Element,
    hint: int | None = None,
) -> Anchor:
    """
    Resolve selectors against ``root`` to one anchor.

    Args:
        selectors: Selectors of one annotation (first of each kind is used)
        root: Document root whose plain text the selectors address
        hint: Optional search cursor for the quote selector

    Returns:
        Anchor of the resolved span

    Raises:
        MalformedSelectorError: If a selector is missing required fields
        AnchoringError: If no selector yields a usable span
    """
    position, quote = partition_selectors(selectors)
    content = root.text_content()
    errors: list[Exception] = []

    if position is not None:
        anchor = await _query_position(root, position)
        if quote is None:
            # Provisional: stale offsets surface as OutOfRangeError on normalization
            return anchor
        try:
            if anchor.end > len(content):
                raise OutOfRangeError(anchor.end, len(content), context="position selector")
            if anchor.text(content) != quote.exact:
                raise PositionMismatchError(quote.exact, anchor.text(content))
            return anchor
        except (OutOfRangeError, PositionMismatchError) as e:
            logger.debug(f"Position selector {position.start}-{position.end} unusable: {e}")
            errors.append(e)

    if quote is not None:
        try:
            return await _query_quote(root, quote, hint)
        except QuoteNotFoundError as e:
            logger.debug(f"Quote selector unusable: {e}")
            errors.append(e)

    raise AnchoringError("unable to anchor", errors)


async def resolve_annotation(annotation: Annotation, root: Element, hint: int | None = None) -> Anchor:
    """Resolve all selectors of ``annotation`` against ``root``."""
    return await resolve(annotation.selectors, root, hint=hint)
