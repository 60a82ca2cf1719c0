"""Turn a selected span into selectors and new annotations."""

from __future__ import annotations

from collections.abc import Sequence

from textanchor.anchors import TextPositionAnchor, TextQuoteAnchor
from textanchor.config import HIGHLIGHT_CLASS, UI_CLASS_PREFIX
from textanchor.dom.nodes import Element, Node
from textanchor.errors import TextAnchorError
from textanchor.logging_config import logger
from textanchor.models import Anchor, Annotation, Target
from textanchor.ranges import TextRange, clip_to_container
from textanchor.selectors import TextPositionSelector, TextQuoteSelector

Span = Anchor | tuple[int, int] | TextRange


def _as_range(root: Element, span: Span) -> TextRange:
    if isinstance(span, TextRange):
        return span
    start, end = span.as_tuple() if isinstance(span, Anchor) else span
    return TextRange.from_offsets(root, start, end)


def get_selectors(root: Element, text_range: TextRange) -> list[TextPositionSelector | TextQuoteSelector]:
    """
    Describe a range with every selector kind that can be built for it.

    Kinds that fail are skipped, so the result may be shorter than usual.
    """
    results: list[TextPositionSelector | TextQuoteSelector] = []
    for anchor_type in (TextPositionAnchor, TextQuoteAnchor):
        try:
            anchor = anchor_type.from_range(root, text_range)
        except (TextAnchorError, ValueError) as e:
            logger.debug(f"{anchor_type.__name__} unavailable for selection: {e}")
            continue
        results.append(anchor.to_selector())
    return results


def capture(root: Element, span: Span) -> list[TextPositionSelector | TextQuoteSelector]:
    """
    Build ``[TextPositionSelector, TextQuoteSelector]`` for a span of ``root``.

    Args:
        root: Document root
        span: An Anchor, a ``(start, end)`` tuple or a TextRange

    Example:
        root = from_html("<p>The quick brown fox</p>")
        capture(root, (4, 9))
        # [TextPositionSelector(start=4, end=9),
        #  TextQuoteSelector(exact="quick", prefix="The ", suffix=" brown fox")]
    """
    return get_selectors(root, _as_range(root, span))


def is_annotator_ui(node: Node | None, highlight_class: str = HIGHLIGHT_CLASS) -> bool:
    """True if ``node`` sits inside annotation UI (an ``annotator-*`` element).

    Highlight markers are looked through, since selecting highlighted text is
    an ordinary selection.
    """
    element = node if isinstance(node, Element) else (node.parent if node is not None else None)
    while isinstance(element, Element) and element.has_class(highlight_class):
        element = element.parent
    while element is not None:
        if any(cls.startswith(UI_CLASS_PREFIX) for cls in element.classes):
            return True
        element = element.parent
    return False


def ranges_inside(container: Element, ranges: Sequence[TextRange]) -> list[TextRange]:
    """Clip ranges to ``container`` and drop those outside it or collapsed."""
    clipped = (clip_to_container(r, container) for r in ranges)
    return [r for r in clipped if r is not None]


def annotation_from_selection(
    root: Element,
    ranges: Sequence[TextRange],
    source: str | None = None,
    highlight_class: str = HIGHLIGHT_CLASS,
) -> Annotation | None:
    """
    Create an unsaved annotation from selected ranges.

    The quote joins the trimmed text of every range with " / "; the target
    carries the selectors of the first range. Selections that fall inside
    annotation UI produce no annotation. Markers of ``highlight_class`` count
    as document text, not UI.

    Returns:
        The annotation, or None if nothing usable was selected
    """
    ranges = ranges_inside(root, ranges)
    if not ranges:
        return None
    if any(is_annotator_ui(r.common_ancestor, highlight_class) for r in ranges):
        logger.debug("Ignoring selection inside annotation UI")
        return None

    quote = " / ".join(r.text(root).strip() for r in ranges)
    selectors = get_selectors(root, ranges[0])
    return Annotation(quote=quote, target=[Target(source=source, selector=selectors)])
