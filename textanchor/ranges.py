"""
Span normalization.

A ``TextRange`` is a raw span whose endpoints are (container, offset) pairs,
the way a browser selection reports them. ``normalize`` splits text units at
the span's boundaries so that the resulting ``NormalizedRange`` starts and
ends exactly on whole units.
"""

from __future__ import annotations

from textanchor.config import validate_span
from textanchor.dom.nodes import (
    Element,
    Node,
    Text,
    common_ancestor,
    first_text_not_before,
    last_text_up_to,
)
from textanchor.errors import AlreadyNormalizedError, OutOfRangeError
from textanchor.models import Anchor


def node_start_offset(root: Element, node: Node) -> int:
    """Number of characters of ``root`` that precede ``node`` in document order."""
    count = 0
    for current in root.iter():
        if current is node:
            return count
        if isinstance(current, Text):
            count += len(current.data)
    raise ValueError("node is not inside root")


def boundary_offset(root: Element, container: Node, offset: int) -> int:
    """Character offset in ``root`` of the boundary point (container, offset)."""
    base = node_start_offset(root, container)
    if isinstance(container, Text):
        return base + offset
    assert isinstance(container, Element)
    return base + sum(len(child.text_content()) for child in container.children[:offset])


def _seek(root: Element, offset: int, is_end: bool) -> tuple[Text, int]:
    """Find the text unit and in-unit offset for a character offset.

    A start offset on a boundary between two units resolves to the start of
    the later unit; an end offset resolves to the end of the earlier one.
    """
    count = 0
    last: Text | None = None
    for node in root.iter_text():
        length = len(node.data)
        if length == 0:
            continue
        if is_end:
            if count < offset <= count + length:
                return node, offset - count
        elif count <= offset < count + length:
            return node, offset - count
        if offset == 0 and is_end:
            return node, 0
        count += length
        last = node

    if last is not None and offset == count:
        return last, len(last.data)
    raise OutOfRangeError(offset, count, context="document content")


class NormalizedRange:
    """
    A span aligned to whole text units.

    Attributes:
        start: First text unit in the span
        end: Last text unit in the span
        common_ancestor: Smallest element containing both
        collapsed_at: For an empty span, its offset inside ``start``; such a
            range covers no units
    """

    def __init__(
        self,
        start: Text,
        end: Text,
        common_ancestor: Element,
        collapsed_at: int | None = None,
    ) -> None:
        self.start = start
        self.end = end
        self.common_ancestor = common_ancestor
        self.collapsed_at = collapsed_at

    def __repr__(self) -> str:
        return f"NormalizedRange({self.start!r}, {self.end!r})"

    def text_nodes(self) -> list[Text]:
        """All text units from start to end inclusive, in document order."""
        if self.collapsed_at is not None:
            return []
        nodes = list(self.common_ancestor.iter_text())
        try:
            first = nodes.index(self.start)
            last = nodes.index(self.end)
        except ValueError:
            return []
        return nodes[first : last + 1]

    def text(self) -> str:
        return "".join(node.data for node in self.text_nodes())

    def to_offsets(self, root: Element) -> Anchor:
        """Character span of this range within ``root``."""
        if self.collapsed_at is not None:
            offset = node_start_offset(root, self.start) + self.collapsed_at
            return Anchor(offset, offset)
        start = node_start_offset(root, self.start)
        end = node_start_offset(root, self.end) + len(self.end.data)
        return Anchor(start, max(start, end))


class TextRange:
    """
    A raw span between two boundary points.

    Containers are ``Text`` (offset counts characters) or ``Element`` (offset
    counts children). A TextRange may be normalized only once: normalizing
    splits the underlying units, so a second pass would split already-split
    structure.
    """

    def __init__(
        self,
        start_container: Node,
        start_offset: int,
        end_container: Node,
        end_offset: int,
        common_ancestor: Node | None = None,
    ) -> None:
        self.start_container = start_container
        self.start_offset = start_offset
        self.end_container = end_container
        self.end_offset = end_offset
        if common_ancestor is None:
            common_ancestor = _common_container(start_container, end_container)
        self.common_ancestor = common_ancestor
        self.tainted = False

    def __repr__(self) -> str:
        return (
            f"TextRange({self.start_container!r}, {self.start_offset}, "
            f"{self.end_container!r}, {self.end_offset})"
        )

    @classmethod
    def from_offsets(cls, root: Element, start: int, end: int) -> TextRange:
        """
        Map a character span of ``root.text_content()`` onto text units.

        Raises:
            ValueError: If an offset is negative or end precedes start
            OutOfRangeError: If an offset exceeds the document content
        """
        validate_span(start, end)
        start_node, start_offset = _seek(root, start, is_end=False)
        end_node, end_offset = _seek(root, end, is_end=True)
        if end == start:
            end_node, end_offset = start_node, start_offset
        return cls(start_node, start_offset, end_node, end_offset)

    @property
    def collapsed(self) -> bool:
        return self.start_container is self.end_container and self.start_offset == self.end_offset

    def to_offsets(self, root: Element) -> Anchor:
        """Character span of this range within ``root`` (does not normalize)."""
        start = boundary_offset(root, self.start_container, self.start_offset)
        end = boundary_offset(root, self.end_container, self.end_offset)
        return Anchor(start, max(start, end))

    def text(self, root: Element) -> str:
        return self.to_offsets(root).text(root.text_content())

    def normalize(self, root: Element | None = None) -> NormalizedRange:
        """
        Split text units at the span boundaries.

        Args:
            root: Document root, used to find the unit following a start point
                that sits at the end of its unit

        Returns:
            NormalizedRange whose start and end are whole units

        Raises:
            AlreadyNormalizedError: If this range was normalized before
            OutOfRangeError: If an offset exceeds its unit or container
        """
        if self.tainted:
            raise AlreadyNormalizedError()
        self.tainted = True

        start, start_offset = self._normalize_start()
        end, end_offset = self._normalize_end()

        if start_offset > len(start.data):
            raise OutOfRangeError(start_offset, len(start.data), context="range start")
        if end_offset > len(end.data):
            raise OutOfRangeError(end_offset, len(end.data), context="range end")

        ancestor = self.common_ancestor
        while ancestor is not None and not isinstance(ancestor, Element):
            ancestor = ancestor.parent
        if ancestor is None:
            raise ValueError("range is not attached to a document")

        if start is end and start_offset == end_offset:
            # Empty span: no unit is split, nothing will be wrapped
            return NormalizedRange(start, end, ancestor, collapsed_at=start_offset)

        if start_offset > 0:
            if len(start.data) > start_offset:
                nr_start = start.split(start_offset)
            else:
                nr_start = _next_text(root, start) or start.split(start_offset)
        else:
            nr_start = start

        if start is end:
            length = end_offset - start_offset
            if len(nr_start.data) > length:
                nr_start.split(length)
            nr_end = nr_start
        else:
            if len(end.data) > end_offset:
                end.split(end_offset)
            nr_end = end

        return NormalizedRange(nr_start, nr_end, ancestor)

    def _normalize_start(self) -> tuple[Text, int]:
        container = self.start_container
        if isinstance(container, Element):
            children = container.children
            node = children[self.start_offset] if self.start_offset < len(children) else None
            text = first_text_not_before(node)
            if text is None:
                raise OutOfRangeError(self.start_offset, len(children), context=f"<{container.tag}>")
            return text, 0
        assert isinstance(container, Text)
        return container, self.start_offset

    def _normalize_end(self) -> tuple[Text, int]:
        container = self.end_container
        if isinstance(container, Element):
            children = container.children
            if self.end_offset < len(children):
                node = children[self.end_offset]
                while isinstance(node, Element):
                    node = node.first_child
                if isinstance(node, Text):
                    return node, 0
            if self.end_offset:
                node = children[self.end_offset - 1] if self.end_offset <= len(children) else None
            else:
                node = container.previous_sibling
            text = last_text_up_to(node)
            if text is None:
                raise OutOfRangeError(self.end_offset, len(children), context=f"<{container.tag}>")
            return text, len(text.data)
        assert isinstance(container, Text)
        return container, self.end_offset


def _common_container(a: Node, b: Node) -> Node:
    if a is b:
        return a
    ancestor = common_ancestor(a, b)
    if ancestor is None:
        raise ValueError("range endpoints do not share a document")
    return ancestor


def _next_text(root: Element | None, node: Text) -> Text | None:
    """The text unit following ``node`` in document order."""
    if root is None:
        root = node.parent
        while root is not None and root.parent is not None:
            root = root.parent
        if root is None:
            return None
    found = False
    for text in root.iter_text():
        if found:
            return text
        if text is node:
            found = True
    return None


def clip_to_container(text_range: TextRange, container: Element) -> TextRange | None:
    """
    Restrict a raw range to the part inside ``container``.

    An endpoint outside the container moves to the container's first (start)
    or last (end) text unit.

    Returns:
        A new TextRange, or None if the range does not intersect the
        container or clipping leaves it collapsed
    """
    root = container
    while root.parent is not None:
        root = root.parent

    range_span = text_range.to_offsets(root)
    container_start = node_start_offset(root, container)
    container_end = container_start + len(container.text_content())
    if range_span.end <= container_start or range_span.start >= container_end:
        return None

    texts = [t for t in container.iter_text() if t.data]
    if not texts:
        return None

    if container.contains(text_range.start_container):
        start_container, start_offset = text_range.start_container, text_range.start_offset
    else:
        start_container, start_offset = texts[0], 0

    if container.contains(text_range.end_container):
        end_container, end_offset = text_range.end_container, text_range.end_offset
    else:
        end_container, end_offset = texts[-1], len(texts[-1].data)

    clipped = TextRange(start_container, start_offset, end_container, end_offset)
    if clipped.collapsed:
        return None
    return clipped
