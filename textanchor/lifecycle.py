"""Bind annotation lifecycle events to a highlighter.

The hook dispatcher that sequences these events lives with the host
application; this module only says what each event means for the markers.
"""

from __future__ import annotations

from collections.abc import Iterable

from textanchor.highlighter import Highlighter, Marker
from textanchor.models import Annotation


class HighlightLifecycle:
    """Keeps drawn markers in step with annotation events."""

    def __init__(self, highlighter: Highlighter) -> None:
        self.highlighter = highlighter

    async def annotations_loaded(self, annotations: Iterable[Annotation]) -> list[Marker]:
        return await self.highlighter.draw_all(annotations)

    async def annotation_created(self, annotation: Annotation) -> list[Marker]:
        return await self.highlighter.draw(annotation)

    async def annotation_updated(self, annotation: Annotation) -> list[Marker]:
        return await self.highlighter.redraw(annotation)

    def annotation_deleted(self, annotation: Annotation) -> None:
        self.highlighter.undraw(annotation)

    def destroy(self) -> None:
        self.highlighter.destroy()
