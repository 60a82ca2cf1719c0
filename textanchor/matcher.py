"""
Quote capture and location in plain text.

Location is first-match-after-cursor, not best-match: the prefix and suffix
only move the starting cursor, they do not score candidates.
"""

from __future__ import annotations

from textanchor.config import CONTEXT_LENGTH, DEFAULT_QUOTE_CURSOR
from textanchor.errors import MalformedSelectorError, QuoteNotFoundError
from textanchor.models import Anchor
from textanchor.selectors import QUOTE_SELECTOR, TextQuoteSelector


def capture_quote(
    content: str,
    start: int,
    end: int,
    context_length: int = CONTEXT_LENGTH,
) -> TextQuoteSelector:
    """
    Build a quote selector for ``content[start:end]``.

    Args:
        content: Full plain-text content of the document
        start: Start offset (non-negative)
        end: End offset (non-negative)
        context_length: Characters of prefix/suffix to keep (default 32)

    Returns:
        TextQuoteSelector with the exact text and up to ``context_length``
        characters of context on each side

    Raises:
        MalformedSelectorError: If an offset is negative
    """
    if start < 0:
        raise MalformedSelectorError(QUOTE_SELECTOR, 'property "start" must be a non-negative integer')
    if end < 0:
        raise MalformedSelectorError(QUOTE_SELECTOR, 'property "end" must be a non-negative integer')

    exact = content[start:end]

    prefix_start = max(0, start - context_length)
    prefix = content[prefix_start:start]

    suffix_end = min(len(content), end + context_length)
    suffix = content[end:suffix_end]

    return TextQuoteSelector(exact=exact, prefix=prefix, suffix=suffix)


def locate_quote(
    content: str,
    selector: TextQuoteSelector,
    hint: int | None = None,
) -> Anchor:
    """
    Find the quote in ``content``.

    Algorithm:
    1. Start the cursor at ``hint`` (or 0)
    2. If a prefix is given and found after the cursor, move the cursor just past it
    3. Otherwise, if a suffix is given and found after ``cursor + len(exact)``,
       move the cursor to ``suffix_index - len(exact)``
    4. Return the first occurrence of ``exact`` at or after the cursor

    Args:
        content: Full plain-text content of the document
        selector: The quote selector to locate
        hint: Optional starting cursor, used to pick among repeated quotes

    Returns:
        Anchor covering the located quote

    Raises:
        MalformedSelectorError: If the selector has no exact text
        QuoteNotFoundError: If the exact text does not occur at or after the cursor
    """
    exact = getattr(selector, "exact", None)
    if exact is None:
        raise MalformedSelectorError(QUOTE_SELECTOR, 'selector missing required property "exact"')

    loc = DEFAULT_QUOTE_CURSOR if hint is None else max(0, hint)
    found_prefix = False

    if selector.prefix is not None:
        result = content.find(selector.prefix, loc)
        if result > -1:
            loc = result + len(selector.prefix)
            found_prefix = True

    if selector.suffix is not None and not found_prefix:
        result = content.find(selector.suffix, loc + len(exact))
        if result > -1:
            loc = max(0, result - len(exact))

    start = content.find(exact, loc)
    if start == -1:
        raise QuoteNotFoundError(exact, loc)
    return Anchor(start, start + len(exact))
