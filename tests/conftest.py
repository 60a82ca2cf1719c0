"""
Pytest configuration and fixtures for textanchor tests
"""

import pytest

from textanchor.dom import Element, from_html
from textanchor.models import Annotation, Target
from textanchor.selectors import TextPositionSelector, TextQuoteSelector

FOX_HTML = "<p>The quick brown fox</p>"

ARTICLE_HTML = (
    "<article>"
    "<h1>Anchors</h1>"
    "<p>Selectors <em>survive</em> reloads and <b>light edits</b>.</p>"
    "<ul>\n<li>one</li>\n<li>two</li>\n</ul>"
    "</article>"
)


@pytest.fixture
def fox_root() -> Element:
    """Single paragraph: "The quick brown fox"."""
    return from_html(FOX_HTML)


@pytest.fixture
def article_root() -> Element:
    """Nested markup with inline elements and a whitespace-separated list."""
    return from_html(ARTICLE_HTML)


@pytest.fixture
def make_annotation():
    """Factory fixture to build annotations from selectors.

    Usage:
        def test_example(make_annotation):
            annotation = make_annotation(position=(4, 9), exact="quick")
    """

    def _create(
        position: tuple[int, int] | None = None,
        exact: str | None = None,
        prefix: str | None = None,
        suffix: str | None = None,
        annotation_id=None,
    ) -> Annotation:
        selectors: list = []
        if position is not None:
            selectors.append(TextPositionSelector(start=position[0], end=position[1]))
        if exact is not None:
            selectors.append(TextQuoteSelector(exact=exact, prefix=prefix, suffix=suffix))
        return Annotation(id=annotation_id, target=[Target(selector=selectors)])

    return _create
