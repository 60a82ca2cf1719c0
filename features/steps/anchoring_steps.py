"""
Step definitions for anchoring, resolution and highlighting scenarios.
"""

import asyncio

import yaml
from behave import given, then, when  # type: ignore[import-untyped]

from textanchor.dom import from_html, to_html
from textanchor.errors import AnchoringError
from textanchor.highlighter import Highlighter
from textanchor.models import Annotation
from textanchor.resolution import resolve_annotation
from textanchor.selection import capture


def _unescape(value: str) -> str:
    return value.replace('\\"', '"').replace("\\n", "\n")


# === Document Setup ===


@given('the document "{markup}"')  # type: ignore[misc]
def step_given_document(context, markup):
    """Parse an HTML document."""
    context.root = from_html(_unescape(markup))


@given("annotation:")  # type: ignore[misc]
def step_given_annotation(context):
    """Parse an annotation from YAML."""
    context.annotation = Annotation.from_dict(yaml.safe_load(context.text))


# === Actions ===


@when("I capture the span {start:d} to {end:d}")  # type: ignore[misc]
def step_when_capture(context, start, end):
    context.selectors = capture(context.root, (start, end))


@when("I resolve the annotation")  # type: ignore[misc]
def step_when_resolve(context):
    """Resolve the annotation, keeping any anchoring error for later steps."""
    try:
        context.anchor = asyncio.run(resolve_annotation(context.annotation, context.root))
        context.error = None
    except AnchoringError as e:
        context.anchor = None
        context.error = e


@when("I draw the annotation")  # type: ignore[misc]
def step_when_draw(context):
    context.highlighter = Highlighter(context.root)
    context.markers = asyncio.run(context.highlighter.draw(context.annotation))


@when("I undraw the annotation")  # type: ignore[misc]
def step_when_undraw(context):
    context.highlighter.undraw(context.annotation)


# === Assertions ===


@then("the position selector is {start:d} to {end:d}")  # type: ignore[misc]
def step_then_position(context, start, end):
    position = context.selectors[0]
    assert (position.start, position.end) == (start, end), f"Got {position.start}-{position.end}"


@then('the quote selector is "{exact}" with prefix "{prefix}" and suffix "{suffix}"')  # type: ignore[misc]
def step_then_quote(context, exact, prefix, suffix):
    quote = context.selectors[1]
    assert quote.exact == exact, f"Expected exact {exact!r}, got {quote.exact!r}"
    assert quote.prefix == prefix, f"Expected prefix {prefix!r}, got {quote.prefix!r}"
    assert quote.suffix == suffix, f"Expected suffix {suffix!r}, got {quote.suffix!r}"


@then("the annotation anchors at {start:d} to {end:d}")  # type: ignore[misc]
def step_then_anchor(context, start, end):
    assert context.error is None, f"Anchoring failed: {context.error}"
    assert context.anchor.as_tuple() == (start, end), f"Got {context.anchor.as_tuple()}"


@then('anchoring fails with "{message}"')  # type: ignore[misc]
def step_then_fails(context, message):
    assert context.error is not None, f"Expected failure, anchored at {context.anchor}"
    assert message in str(context.error), f"Got: {context.error}"


@then('the document is "{markup}"')  # type: ignore[misc]
def step_then_document(context, markup):
    expected = _unescape(markup)
    actual = to_html(context.root)
    assert actual == expected, f"Expected:\n{expected}\nGot:\n{actual}"


@then("{count:d} markers are drawn")  # type: ignore[misc]
def step_then_marker_count(context, count):
    assert len(context.markers) == count, f"Expected {count} markers, got {len(context.markers)}"
