"""
Anchors convert between selectors and spans of a live document.

- TextPositionAnchor: offsets, the fast path that goes stale on edits
- TextQuoteAnchor: quote plus context, the content-addressed path
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Self

from textanchor.dom.nodes import Element
from textanchor.errors import MalformedSelectorError
from textanchor.matcher import capture_quote, locate_quote
from textanchor.models import Anchor
from textanchor.ranges import TextRange
from textanchor.selectors import (
    POSITION_SELECTOR,
    QUOTE_SELECTOR,
    TextPositionSelector,
    TextQuoteSelector,
    parse_selector,
)


def position_from_span(content: str, start: int, end: int) -> TextPositionSelector:
    """Extract a position selector from a span; offsets must be non-negative."""
    if start < 0 or end < 0:
        raise MalformedSelectorError(POSITION_SELECTOR, "offsets must be non-negative integers")
    return TextPositionSelector(start=start, end=max(start, end))


def resolve_position(content: str, selector: TextPositionSelector | Mapping[str, Any]) -> Anchor:
    """
    Resolve a position selector to an anchor.

    No bounds check against ``content`` is made; the anchor is provisional
    until it is mapped onto the document structure.

    Raises:
        MalformedSelectorError: If start or end is missing or negative
    """
    if not isinstance(selector, TextPositionSelector):
        selector = _expect(selector, POSITION_SELECTOR)
    return Anchor(selector.start, selector.end)


def _expect(data: Mapping[str, Any], selector_type: str) -> Any:
    data = {"type": selector_type, **dict(data)}
    if data["type"] != selector_type:
        raise MalformedSelectorError(selector_type, f"got selector of type {data['type']!r}")
    return parse_selector(data)


class TextPositionAnchor:
    """Converts between TextPositionSelector selectors and ranges of ``root``."""

    def __init__(self, root: Element, start: int, end: int) -> None:
        self.root = root
        self.start = start
        self.end = end

    def __repr__(self) -> str:
        return f"TextPositionAnchor({self.start}, {self.end})"

    @classmethod
    def from_range(cls, root: Element, text_range: TextRange) -> Self:
        span = text_range.to_offsets(root)
        return cls(root, span.start, span.end)

    @classmethod
    def from_selector(cls, root: Element, selector: TextPositionSelector | Mapping[str, Any]) -> Self:
        anchor = resolve_position(root.text_content(), selector)
        return cls(root, anchor.start, anchor.end)

    def to_anchor(self) -> Anchor:
        return Anchor(self.start, self.end)

    def to_selector(self) -> TextPositionSelector:
        return TextPositionSelector(start=self.start, end=self.end)

    def to_range(self) -> TextRange:
        """
        Raises:
            OutOfRangeError: If the offsets exceed the current content
        """
        return TextRange.from_offsets(self.root, self.start, self.end)


class TextQuoteAnchor:
    """Converts between TextQuoteSelector selectors and ranges of ``root``."""

    def __init__(
        self,
        root: Element,
        exact: str,
        prefix: str | None = None,
        suffix: str | None = None,
    ) -> None:
        self.root = root
        self.exact = exact
        self.prefix = prefix
        self.suffix = suffix

    def __repr__(self) -> str:
        return f"TextQuoteAnchor({self.exact!r})"

    @classmethod
    def from_range(cls, root: Element, text_range: TextRange) -> Self:
        span = text_range.to_offsets(root)
        selector = capture_quote(root.text_content(), span.start, span.end)
        return cls.from_selector(root, selector)

    @classmethod
    def from_selector(cls, root: Element, selector: TextQuoteSelector | Mapping[str, Any]) -> Self:
        """
        Raises:
            MalformedSelectorError: If ``exact`` is missing
        """
        if not isinstance(selector, TextQuoteSelector):
            selector = _expect(selector, QUOTE_SELECTOR)
        if selector.exact is None:
            raise MalformedSelectorError(QUOTE_SELECTOR, 'selector missing required property "exact"')
        return cls(root, selector.exact, selector.prefix, selector.suffix)

    def to_selector(self) -> TextQuoteSelector:
        return TextQuoteSelector(exact=self.exact, prefix=self.prefix, suffix=self.suffix)

    def to_anchor(self, hint: int | None = None) -> Anchor:
        """
        Raises:
            QuoteNotFoundError: If the quote is not in the document
        """
        return locate_quote(self.root.text_content(), self.to_selector(), hint=hint)

    def to_range(self, hint: int | None = None) -> TextRange:
        anchor = self.to_anchor(hint)
        return TextRange.from_offsets(self.root, anchor.start, anchor.end)

    def to_position_anchor(self, hint: int | None = None) -> TextPositionAnchor:
        """Resolve the quote and wrap the span as a position anchor."""
        anchor = self.to_anchor(hint)
        return TextPositionAnchor(self.root, anchor.start, anchor.end)
