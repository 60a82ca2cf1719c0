"""Minimal document tree with text units that can be split in place.

The tree mirrors the parts of the browser DOM that anchoring needs:
ordered children, parent links, sibling navigation and ``Text.split``.
Element ``.text``/``.tail`` strings from lxml become ``Text`` children so
that every run of characters is an addressable unit.
"""

from __future__ import annotations

from collections.abc import Iterator

from textanchor.errors import OutOfRangeError


class Node:
    """Base class for tree nodes."""

    def __init__(self) -> None:
        self.parent: Element | None = None

    @property
    def index(self) -> int:
        """Position of this node among its parent's children (-1 if detached)."""
        if self.parent is None:
            return -1
        for i, child in enumerate(self.parent.children):
            if child is self:
                return i
        return -1

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        i = self.index + 1
        siblings = self.parent.children
        return siblings[i] if i < len(siblings) else None

    @property
    def previous_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        i = self.index - 1
        return self.parent.children[i] if i >= 0 else None

    def ancestors(self) -> Iterator[Element]:
        """Yield parents from the nearest up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def detach(self) -> None:
        """Remove this node from its parent, if any."""
        if self.parent is not None:
            self.parent.remove(self)

    def text_content(self) -> str:
        raise NotImplementedError


class Text(Node):
    """A run of characters: the atomic content unit."""

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Text({self.data!r})"

    def text_content(self) -> str:
        return self.data

    def is_whitespace(self) -> bool:
        """True for empty or whitespace-only units."""
        return not self.data.strip()

    def split(self, offset: int) -> Text:
        """Split this unit at ``offset``.

        This unit keeps ``data[:offset]``; a new unit holding the remainder is
        inserted as the next sibling and returned.

        Raises:
            OutOfRangeError: If offset is outside [0, len(data)]
        """
        if offset < 0 or offset > len(self.data):
            raise OutOfRangeError(offset, len(self.data), context="Text.split")
        tail = Text(self.data[offset:])
        self.data = self.data[:offset]
        if self.parent is not None:
            self.parent.insert(self.index + 1, tail)
        return tail


class Comment(Node):
    """A markup comment. Kept so the document serializes unchanged; holds no text."""

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    def __repr__(self) -> str:
        return f"Comment({self.data!r})"

    def text_content(self) -> str:
        return ""


class ProcessingInstruction(Node):
    """A processing instruction such as ``<?xml-stylesheet ...?>``; holds no text."""

    def __init__(self, target: str, data: str = "") -> None:
        super().__init__()
        self.target = target
        self.data = data

    def __repr__(self) -> str:
        return f"ProcessingInstruction({self.target!r})"

    def text_content(self) -> str:
        return ""


class Element(Node):
    """A structural container with a tag, attributes and ordered children.

    ``doctype`` is only set on the root of a parsed full document.
    """

    doctype: str | None = None

    def __init__(
        self,
        tag: str,
        attrib: dict[str, str] | None = None,
        children: list[Node] | None = None,
    ) -> None:
        super().__init__()
        self.tag = tag
        self.attrib: dict[str, str] = dict(attrib or {})
        self.children: list[Node] = []
        for child in children or []:
            self.append(child)

    def __repr__(self) -> str:
        return f"<{self.tag} children={len(self.children)}>"

    @property
    def first_child(self) -> Node | None:
        return self.children[0] if self.children else None

    @property
    def last_child(self) -> Node | None:
        return self.children[-1] if self.children else None

    @property
    def classes(self) -> list[str]:
        return self.attrib.get("class", "").split()

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.attrib.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.attrib[key] = value

    # Mutation

    def append(self, node: Node) -> Node:
        return self.insert(len(self.children), node)

    def insert(self, position: int, node: Node) -> Node:
        node.detach()
        node.parent = self
        self.children.insert(position, node)
        return node

    def insert_before(self, node: Node, reference: Node | None) -> Node:
        """Insert ``node`` before ``reference`` (append when reference is None)."""
        if reference is None:
            return self.append(node)
        if reference.parent is not self:
            raise ValueError("reference node is not a child of this element")
        node.detach()
        return self.insert(reference.index, node)

    def remove(self, node: Node) -> Node:
        for i, child in enumerate(self.children):
            if child is node:
                del self.children[i]
                node.parent = None
                return node
        raise ValueError("node is not a child of this element")

    def replace_child(self, new: Node, old: Node) -> Node:
        """Put ``new`` where ``old`` is and detach ``old``."""
        if old.parent is not self:
            raise ValueError("node is not a child of this element")
        new.detach()
        position = old.index
        self.remove(old)
        self.insert(position, new)
        return old

    # Traversal

    def contains(self, node: Node | None) -> bool:
        """True if ``node`` is this element or one of its descendants."""
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def iter(self) -> Iterator[Node]:
        """Yield this element and all descendants in document order."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()
            else:
                yield child

    def iter_text(self) -> Iterator[Text]:
        for node in self.iter():
            if isinstance(node, Text):
                yield node

    def iter_elements(self) -> Iterator[Element]:
        for node in self.iter():
            if isinstance(node, Element):
                yield node

    def find_by_class(self, name: str) -> list[Element]:
        """Descendant elements (excluding self) carrying the class ``name``."""
        return [el for el in self.iter_elements() if el is not self and el.has_class(name)]

    def text_content(self) -> str:
        return "".join(t.data for t in self.iter_text())


def first_text_not_before(node: Node | None) -> Text | None:
    """First text unit at or after ``node`` in document order (siblings included)."""
    while node is not None:
        if isinstance(node, Text):
            return node
        if isinstance(node, Element) and node.children:
            found = first_text_not_before(node.first_child)
            if found is not None:
                return found
        node = node.next_sibling
    return None


def last_text_up_to(node: Node | None) -> Text | None:
    """Last text unit at or before ``node`` in document order (siblings included)."""
    while node is not None:
        if isinstance(node, Text):
            return node
        if isinstance(node, Element) and node.children:
            found = last_text_up_to(node.last_child)
            if found is not None:
                return found
        node = node.previous_sibling
    return None


def common_ancestor(a: Node, b: Node) -> Element | None:
    """Deepest element containing both nodes."""
    chain = {id(el) for el in ([a] if isinstance(a, Element) else [])}
    chain.update(id(el) for el in a.ancestors())
    candidates = ([b] if isinstance(b, Element) else []) + list(b.ancestors())
    for el in candidates:
        if id(el) in chain:
            return el
    return None
