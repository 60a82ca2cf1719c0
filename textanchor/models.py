"""
Annotation data models.

- Anchor: a resolved, document-specific character span (never persisted)
- Target: a persisted target with its selectors (pydantic)
- Annotation: the annotation object plus its transient drawing state
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, field_validator

from textanchor.logging_config import logger
from textanchor.selectors import (
    TextPositionSelector,
    TextQuoteSelector,
    parse_selectors,
)

if TYPE_CHECKING:
    from textanchor.highlighter import Marker
    from textanchor.ranges import NormalizedRange


@dataclass(frozen=True)
class Anchor:
    """
    A resolved character span in one document instance.

    Attributes:
        start: Offset of the first character
        end: Offset just past the last character
    """

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def text(self, content: str) -> str:
        """The slice of ``content`` this anchor covers."""
        return content[self.start : self.end]

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)


class Target(BaseModel):
    """
    Annotation target.

    Attributes:
        source: Optional document identifier (e.g. a path)
        selector: Selectors describing the span; unknown kinds are dropped
    """

    source: str | None = None
    selector: list[TextPositionSelector | TextQuoteSelector] = []

    @field_validator("selector", mode="before")
    @classmethod
    def _known_selectors(cls, value: Any) -> list[TextPositionSelector | TextQuoteSelector]:
        if value is None:
            return []
        if isinstance(value, dict):
            value = [value]
        parsed = parse_selectors(value)
        if len(parsed) < len(value):
            logger.debug(f"Ignored {len(value) - len(parsed)} unsupported selector(s)")
        return parsed

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"selector": [s.to_dict() for s in self.selector]}
        if self.source is not None:
            data["source"] = self.source
        return data


@dataclass
class LocalState:
    """Transient per-document state; never serialized.

    ``highlights`` is the single record of the markers currently applied for
    the annotation. None means nothing is drawn.
    """

    ranges: list[NormalizedRange] = field(default_factory=list)
    highlights: list[Marker] | None = None


@dataclass(eq=False)
class Annotation:
    """
    An annotation with its targets.

    Attributes:
        id: Identifier assigned by persistence (None until saved)
        text: Comment body
        quote: Human-readable quote captured at creation
        target: Targets holding the selectors
        local_id: Session-local id minted before persistence assigns one
        local: Transient resolved ranges and markers
    """

    id: str | int | None = None
    text: str = ""
    quote: str = ""
    target: list[Target] = field(default_factory=list)
    local_id: int | None = None
    local: LocalState = field(default_factory=LocalState, repr=False, compare=False)

    @property
    def selectors(self) -> list[TextPositionSelector | TextQuoteSelector]:
        """All selectors across targets, in order."""
        return [s for t in self.target for s in t.selector]

    @property
    def highlights(self) -> list[Marker]:
        return list(self.local.highlights or [])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create an Annotation from plain data (e.g. parsed YAML or JSON)."""
        targets = data.get("target", [])
        if isinstance(targets, dict):
            targets = [targets]
        return cls(
            id=data.get("id"),
            text=data.get("text", "") or "",
            quote=data.get("quote", "") or "",
            target=[Target.model_validate(t) for t in targets],
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form without transient state."""
        data: dict[str, Any] = {}
        if self.id is not None:
            data["id"] = self.id
        if self.text:
            data["text"] = self.text
        if self.quote:
            data["quote"] = self.quote
        data["target"] = [t.to_dict() for t in self.target]
        return data
