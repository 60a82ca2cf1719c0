"""
W3C Web Annotation selectors.

This module provides the persisted, document-independent description of a
location in text:

- TextPositionSelector: character offsets into the document's plain text
- TextQuoteSelector: the exact quote plus bounded prefix/suffix context

Both are pure data. Resolution lives in ``textanchor.anchors`` and
``textanchor.resolution``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal, Self

import yaml
from pydantic import BaseModel, Field, NonNegativeInt, TypeAdapter, ValidationError, model_validator

from textanchor.errors import MalformedSelectorError

POSITION_SELECTOR = "TextPositionSelector"
QUOTE_SELECTOR = "TextQuoteSelector"


class TextPositionSelector(BaseModel):
    """
    W3C Web Annotation TextPositionSelector.

    Selects text by character offsets into the full plain-text content. Cheap
    to resolve but invalidated by any edit before the span.

    Attributes:
        type: Selector type identifier (always "TextPositionSelector")
        start: Offset of the first selected character
        end: Offset just past the last selected character
    """

    type: Literal["TextPositionSelector"] = POSITION_SELECTOR
    start: NonNegativeInt
    end: NonNegativeInt

    @model_validator(mode="after")
    def _end_not_before_start(self) -> Self:
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must not precede start ({self.start})")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form suitable for JSON or YAML."""
        return self.model_dump()


class TextQuoteSelector(BaseModel):
    """
    W3C Web Annotation TextQuoteSelector.

    Selects text by specifying an exact quote with optional prefix/suffix context.
    The prefix and suffix relocate the search cursor when the exact text appears
    multiple times.

    Example:
        selector = TextQuoteSelector(exact="quick", prefix="The ", suffix=" brown fox")

    Attributes:
        type: Selector type identifier (always "TextQuoteSelector")
        exact: The exact text to match
        prefix: Optional text that appears before the exact match
        suffix: Optional text that appears after the exact match
    """

    type: Literal["TextQuoteSelector"] = QUOTE_SELECTOR
    exact: str
    prefix: str | None = None
    suffix: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form; unset context is left out rather than written as null."""
        return self.model_dump(exclude_none=True)


Selector = Annotated[TextPositionSelector | TextQuoteSelector, Field(discriminator="type")]

SELECTOR_TYPES = {POSITION_SELECTOR: TextPositionSelector, QUOTE_SELECTOR: TextQuoteSelector}

_selector_adapter: TypeAdapter[TextPositionSelector | TextQuoteSelector] = TypeAdapter(Selector)


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item["loc"]) or "selector"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


def parse_selector(data: Mapping[str, Any] | BaseModel) -> TextPositionSelector | TextQuoteSelector | None:
    """
    Validate one selector from plain data.

    Args:
        data: A mapping with a ``type`` key, or an already-built selector

    Returns:
        The selector model, or None for selector kinds this library does not resolve

    Raises:
        MalformedSelectorError: If a known selector kind is missing fields or has
            invalid offsets
    """
    if isinstance(data, (TextPositionSelector, TextQuoteSelector)):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()

    selector_type = data.get("type")
    if selector_type not in SELECTOR_TYPES:
        return None

    try:
        return _selector_adapter.validate_python(dict(data))
    except ValidationError as e:
        raise MalformedSelectorError(selector_type, _describe(e)) from e


def parse_selectors(items: Iterable[Mapping[str, Any] | BaseModel]) -> list[TextPositionSelector | TextQuoteSelector]:
    """Validate a list of selectors, dropping unknown kinds."""
    parsed = (parse_selector(item) for item in items)
    return [s for s in parsed if s is not None]


def selectors_from_annotation(yaml_text: str) -> list[TextPositionSelector | TextQuoteSelector]:
    """
    Load selectors from W3C Web Annotation YAML.

    ``target`` may be a mapping or a list of mappings; ``selector`` may be a
    single mapping or a list.

    Example:
        selectors = selectors_from_annotation('''
            target:
              selector:
                - type: TextQuoteSelector
                  exact: "quick"
                  prefix: "The "
                - type: TextPositionSelector
                  start: 4
                  end: 9
        ''')
    """
    data = yaml.safe_load(yaml_text) or {}
    targets = data.get("target", [])
    if isinstance(targets, Mapping):
        targets = [targets]

    selectors: list[TextPositionSelector | TextQuoteSelector] = []
    for target in targets:
        raw = target.get("selector", [])
        if isinstance(raw, Mapping):
            raw = [raw]
        selectors.extend(parse_selectors(raw))
    return selectors
