"""Conversion between lxml trees and the textanchor document tree."""

from __future__ import annotations

from lxml import etree, html

from textanchor.dom.nodes import Comment, Element, ProcessingInstruction, Text


def get_tag_name(elem: etree._Element) -> str:
    """Get tag name without namespace prefix.

    Args:
        elem: lxml element

    Returns:
        Tag name without namespace (e.g., "p" not "{ns}p")
    """
    tag = elem.tag
    if isinstance(tag, str) and "}" in tag:
        return tag.split("}")[-1]
    return tag if isinstance(tag, str) else ""


def from_lxml(elem: etree._Element) -> Element:
    """Build a document tree from an lxml element.

    ``.text`` and each child's ``.tail`` become ``Text`` units. Comments and
    processing instructions become nodes without text, so they take no part
    in offsets but are written back out.
    """
    root = Element(get_tag_name(elem), {str(k): str(v) for k, v in elem.attrib.items()})
    if elem.text:
        root.append(Text(elem.text))

    for child in elem:
        if isinstance(child.tag, str):
            root.append(from_lxml(child))
        elif child.tag is etree.Comment:
            root.append(Comment(child.text or ""))
        elif child.tag is etree.ProcessingInstruction:
            root.append(ProcessingInstruction(child.target, child.text or ""))
        if child.tail:
            root.append(Text(child.tail))

    return root


def from_html(markup: str) -> Element:
    """Parse an HTML fragment or document.

    A full document keeps its DOCTYPE on the root. A fragment with exactly one
    top-level element is returned as that element; anything else is wrapped
    in a ``<div>``.
    """
    stripped = markup.strip()
    if stripped.lower().startswith(("<!doctype", "<html")):
        document = html.document_fromstring(markup)
        root = from_lxml(document)
        # libxml2 invents a DOCTYPE for documents without one
        if stripped.lower().startswith("<!doctype"):
            root.doctype = document.getroottree().docinfo.doctype or None
        return root

    fragments = html.fragments_fromstring(markup)
    if len(fragments) == 1 and not isinstance(fragments[0], str):
        single = fragments[0]
        if not (single.tail or "").strip():
            return from_lxml(single)
    return from_lxml(html.fragment_fromstring(markup, create_parent="div"))


def from_xml(markup: str | bytes) -> Element:
    """Parse a well-formed XML document."""
    if isinstance(markup, str):
        markup = markup.encode("utf-8")
    parser = etree.XMLParser(remove_comments=False, resolve_entities=False)
    return from_lxml(etree.fromstring(markup, parser=parser))


def to_lxml(root: Element) -> etree._Element:
    """Rebuild an lxml element from a document tree.

    Adjacent text units are concatenated back into ``.text``/``.tail``.
    """
    elem = etree.Element(root.tag, root.attrib)
    last: etree._Element | None = None

    for child in root.children:
        if isinstance(child, Text):
            if last is None:
                elem.text = (elem.text or "") + child.data
            else:
                last.tail = (last.tail or "") + child.data
            continue
        if isinstance(child, Element):
            last = to_lxml(child)
        elif isinstance(child, Comment):
            last = etree.Comment(child.data)
        elif isinstance(child, ProcessingInstruction):
            last = etree.ProcessingInstruction(child.target, child.data or None)
        else:
            continue
        elem.append(last)

    return elem


def to_html(root: Element) -> str:
    """Serialize a document tree to an HTML string, DOCTYPE included when the root has one."""
    if root.doctype:
        return html.tostring(to_lxml(root), encoding="unicode", doctype=root.doctype)
    return html.tostring(to_lxml(root), encoding="unicode")


def to_xml(root: Element) -> str:
    """Serialize a document tree to an XML string."""
    return etree.tostring(to_lxml(root), encoding="unicode")
