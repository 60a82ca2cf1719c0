"""Document tree used as the content accessor for anchoring."""

from textanchor.dom.nodes import (
    Comment,
    Element,
    Node,
    ProcessingInstruction,
    Text,
    common_ancestor,
    first_text_not_before,
    last_text_up_to,
)
from textanchor.dom.parser import from_html, from_lxml, from_xml, to_html, to_lxml, to_xml

__all__ = [
    "Comment",
    "Element",
    "Node",
    "ProcessingInstruction",
    "Text",
    "common_ancestor",
    "first_text_not_before",
    "last_text_up_to",
    "from_html",
    "from_lxml",
    "from_xml",
    "to_html",
    "to_lxml",
    "to_xml",
]
