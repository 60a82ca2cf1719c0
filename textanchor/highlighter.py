"""
Highlighter: draws inline markers over annotated spans.

Each drawn annotation keeps the list of markers applied for it in
``annotation.local.highlights``; that list is what ``undraw`` removes, so it
must always match what is in the document.
"""

from __future__ import annotations

import asyncio
import re
import weakref
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveInt, field_validator

from textanchor.config import (
    ANNOTATION_ID_ATTRIBUTE,
    CHUNK_DELAY_MS,
    CHUNK_SIZE,
    HIGHLIGHT_CLASS,
    validate_highlight_class,
)
from textanchor.dom.nodes import Element
from textanchor.errors import AnchoringError, OutOfRangeError
from textanchor.identifiers import IdCounter
from textanchor.logging_config import logger
from textanchor.models import Annotation
from textanchor.ranges import NormalizedRange, TextRange
from textanchor.resolution import resolve_annotation

_WHITESPACE = re.compile(r"^\s*$")


class HighlighterHooks(BaseModel):
    """
    Callbacks the highlighter invokes. Unknown hook names and non-callables are
    rejected when the options are built.

    Attributes:
        on_drawn: ``(annotation, markers) -> None`` after a successful draw
        on_anchoring_failure: ``(annotation, error) -> None`` when draw_all
            skips an annotation
    """

    model_config = ConfigDict(extra="forbid")

    on_drawn: Callable[[Annotation, list[Any]], Any] | None = None
    on_anchoring_failure: Callable[[Annotation, Exception], Any] | None = None


class HighlighterOptions(BaseModel):
    """
    Highlighter configuration.

    Attributes:
        highlight_class: CSS class of drawn markers
        chunk_size: Annotations drawn per chunk in draw_all
        chunk_delay: Pause between chunks, in milliseconds
        hooks: Optional callbacks
    """

    model_config = ConfigDict(extra="forbid")

    highlight_class: str = HIGHLIGHT_CLASS
    chunk_size: PositiveInt = CHUNK_SIZE
    chunk_delay: NonNegativeFloat = CHUNK_DELAY_MS
    hooks: HighlighterHooks = Field(default_factory=HighlighterHooks)

    @field_validator("highlight_class")
    @classmethod
    def _single_class(cls, value: str) -> str:
        validate_highlight_class(value)
        return value


class Marker(Element):
    """A ``<span>`` wrapped around one text unit.

    The owning annotation is held by weak reference: markers never keep an
    annotation alive.
    """

    def __init__(self, annotation: Annotation, highlight_class: str = HIGHLIGHT_CLASS) -> None:
        super().__init__("span", {"class": highlight_class})
        self._annotation = weakref.ref(annotation)

    @property
    def annotation(self) -> Annotation | None:
        return self._annotation()


def unwrap(element: Element) -> None:
    """Move the element's children into its place and detach it."""
    parent = element.parent
    if parent is None:
        return
    for child in list(element.children):
        parent.insert_before(child, element)
    parent.remove(element)


def highlight_range(
    normed: NormalizedRange,
    annotation: Annotation,
    highlight_class: str = HIGHLIGHT_CLASS,
) -> list[Marker]:
    """
    Wrap every text unit of ``normed`` in a marker.

    Whitespace-only units are skipped: wrapping them would inject spans into
    containers that only accept specific children (table rows, lists).
    """
    results: list[Marker] = []
    for node in normed.text_nodes():
        if _WHITESPACE.match(node.data):
            continue
        parent = node.parent
        if parent is None:
            continue
        marker = Marker(annotation, highlight_class)
        parent.replace_child(marker, node)
        marker.append(node)
        results.append(marker)
    return results


class Highlighter:
    """
    Draws, removes and redraws highlight markers under a root element.

    Example:
        highlighter = Highlighter(root, {"chunk_size": 25})
        markers = await highlighter.draw(annotation)
        highlighter.undraw(annotation)
    """

    def __init__(
        self,
        element: Element,
        options: HighlighterOptions | dict[str, Any] | None = None,
        id_counter: IdCounter | None = None,
    ) -> None:
        """
        Args:
            element: Root element on which annotation spans are resolved and drawn
            options: HighlighterOptions or a mapping validated into one

        Raises:
            pydantic.ValidationError: If an option or hook is invalid
        """
        self.element = element
        if isinstance(options, HighlighterOptions):
            self.options = options
        else:
            self.options = HighlighterOptions.model_validate(options or {})
        self.ids = id_counter or IdCounter()
        self._log = logger.child("highlighter")

    async def draw(self, annotation: Annotation) -> list[Marker]:
        """
        Draw markers for one annotation.

        Markers already applied for the annotation are removed first, so the
        recorded list always matches the document.

        Returns:
            The markers now applied for the annotation

        Raises:
            AnchoringError: If none of its selectors resolve
            OutOfRangeError: If a stale position runs past the content
        """
        self.undraw(annotation)
        if annotation.id is None and annotation.local_id is None:
            annotation.local_id = self.ids.next()

        anchor = await resolve_annotation(annotation, self.element)
        normed = TextRange.from_offsets(self.element, anchor.start, anchor.end).normalize(self.element)
        annotation.local.ranges = [normed]

        markers = highlight_range(normed, annotation, self.options.highlight_class)
        if annotation.id is not None:
            for marker in markers:
                marker.set(ANNOTATION_ID_ATTRIBUTE, str(annotation.id))
        annotation.local.highlights = markers

        self._log.debug(f"Drew {len(markers)} marker(s) for {_label(annotation)} at {anchor.start}-{anchor.end}")
        if self.options.hooks.on_drawn is not None:
            self.options.hooks.on_drawn(annotation, list(markers))
        return list(markers)

    def undraw(self, annotation: Annotation) -> None:
        """Remove the annotation's markers. Safe to repeat and on undrawn annotations."""
        markers = annotation.local.highlights
        if markers is None:
            return
        for marker in markers:
            unwrap(marker)
        annotation.local.highlights = None
        annotation.local.ranges = []

    async def redraw(self, annotation: Annotation) -> list[Marker]:
        """Undraw then draw the annotation."""
        self.undraw(annotation)
        return await self.draw(annotation)

    async def draw_all(self, annotations: Iterable[Annotation]) -> list[Marker]:
        """
        Draw many annotations in chunks, pausing between chunks.

        Annotations that fail to anchor contribute no markers and do not stop
        the batch.

        Returns:
            All markers drawn, in annotation order
        """
        pending = list(annotations)
        size = self.options.chunk_size
        highlights: list[Marker] = []

        with self._log.indent_block(f"Drawing {len(pending)} annotation(s) in chunks of {size}"):
            for offset in range(0, len(pending), size):
                chunk = pending[offset : offset + size]
                with self._log.indent_block(f"Chunk {offset // size + 1}"):
                    for annotation in chunk:
                        highlights.extend(await self._draw_isolated(annotation))
                if offset + size < len(pending):
                    await asyncio.sleep(self.options.chunk_delay / 1000)

        return highlights

    async def _draw_isolated(self, annotation: Annotation) -> list[Marker]:
        try:
            return await self.draw(annotation)
        except (AnchoringError, OutOfRangeError) as e:
            self._log.warning(f"Skipping {_label(annotation)}: {e}")
            if self.options.hooks.on_anchoring_failure is not None:
                self.options.hooks.on_anchoring_failure(annotation, e)
            return []

    def destroy(self) -> None:
        """Unwrap every marker under the root, whichever annotation drew it.

        Annotations that are still alive have their recorded markers cleared.
        """
        for element in self.element.find_by_class(self.options.highlight_class):
            annotation = element.annotation if isinstance(element, Marker) else None
            if annotation is not None:
                annotation.local.highlights = None
                annotation.local.ranges = []
            unwrap(element)


def _label(annotation: Annotation) -> str:
    if annotation.id is not None:
        return f"annotation {annotation.id}"
    return f"local annotation {annotation.local_id}"
