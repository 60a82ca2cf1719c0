"""Tests for the highlighter: draw, undraw, redraw, draw_all and destroy."""

import asyncio
import gc
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from textanchor.dom import Text, to_html
from textanchor.errors import AnchoringError, OutOfRangeError
from textanchor.highlighter import Highlighter, HighlighterOptions, Marker, unwrap
from textanchor.identifiers import IdCounter

FOX_ORIGINAL = "<p>The quick brown fox</p>"


def _marked(root, highlight_class="annotator-hl") -> list[str]:
    return [el.text_content() for el in root.find_by_class(highlight_class)]


class TestDraw:
    """Tests for Highlighter.draw."""

    @pytest.mark.asyncio
    async def test_draw_wraps_span(self, fox_root, make_annotation) -> None:
        """A resolved span is wrapped in one marker carrying the annotation id."""
        annotation = make_annotation(position=(4, 9), exact="quick", annotation_id=42)

        markers = await Highlighter(fox_root).draw(annotation)

        assert len(markers) == 1
        assert to_html(fox_root) == (
            '<p>The <span class="annotator-hl" data-annotation-id="42">quick</span>'
            " brown fox</p>"
        )

    @pytest.mark.asyncio
    async def test_draw_records_local_state(self, fox_root, make_annotation) -> None:
        """Markers and the normalized range are kept on the annotation."""
        annotation = make_annotation(position=(4, 9), exact="quick")

        markers = await Highlighter(fox_root).draw(annotation)

        assert annotation.highlights == markers
        assert len(annotation.local.ranges) == 1
        assert annotation.local.ranges[0].text() == "quick"

    @pytest.mark.asyncio
    async def test_unsaved_annotation_has_no_id_attribute(self, fox_root, make_annotation) -> None:
        """Only persisted annotations stamp their id on markers."""
        annotation = make_annotation(exact="quick")

        markers = await Highlighter(fox_root).draw(annotation)

        assert markers[0].get("data-annotation-id") is None

    @pytest.mark.asyncio
    async def test_span_across_elements(self, article_root, make_annotation) -> None:
        """Each text unit of the span gets its own marker."""
        annotation = make_annotation(position=(12, 27), exact="tors survive re")

        markers = await Highlighter(article_root).draw(annotation)

        assert [m.text_content() for m in markers] == ["tors ", "survive", " re"]
        assert all(m.annotation is annotation for m in markers)
        assert article_root.text_content().startswith("AnchorsSelectors survive reloads")

    @pytest.mark.asyncio
    async def test_whitespace_units_are_skipped(self, article_root, make_annotation) -> None:
        """Whitespace-only units between list items are not wrapped."""
        annotation = make_annotation(position=(50, 57), exact="one\ntwo")

        markers = await Highlighter(article_root).draw(annotation)

        assert [m.text_content() for m in markers] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_draw_twice_does_not_duplicate(self, fox_root, make_annotation) -> None:
        """Drawing again replaces the markers already applied."""
        annotation = make_annotation(position=(4, 9), exact="quick")
        highlighter = Highlighter(fox_root)

        first = await highlighter.draw(annotation)
        second = await highlighter.draw(annotation)

        assert _marked(fox_root) == ["quick"]
        assert first[0].parent is None
        assert annotation.highlights == second

    @pytest.mark.asyncio
    async def test_edited_document_uses_quote(self, fox_root, make_annotation) -> None:
        """Text inserted before the span moves the marker with the quote."""
        fox_root.insert(0, Text("Well, "))
        annotation = make_annotation(position=(4, 9), exact="quick", prefix="The ", suffix=" brown fox")

        await Highlighter(fox_root).draw(annotation)

        assert _marked(fox_root) == ["quick"]

    @pytest.mark.asyncio
    async def test_unanchorable_annotation_raises(self, fox_root, make_annotation) -> None:
        """draw reports anchoring failures to the caller."""
        with pytest.raises(AnchoringError):
            await Highlighter(fox_root).draw(make_annotation(exact="wolf"))
        assert to_html(fox_root) == FOX_ORIGINAL

    @pytest.mark.asyncio
    async def test_stale_position_raises_out_of_range(self, fox_root, make_annotation) -> None:
        """A position-only annotation past the content fails on normalization."""
        with pytest.raises(OutOfRangeError):
            await Highlighter(fox_root).draw(make_annotation(position=(4, 100)))

    @pytest.mark.asyncio
    async def test_empty_quote_draws_nothing(self, fox_root, make_annotation) -> None:
        """An empty span adds no markers and leaves the text units whole."""
        annotation = make_annotation(exact="")

        markers = await Highlighter(fox_root).draw(annotation)

        assert markers == []
        assert annotation.highlights == []
        assert [t.data for t in fox_root.iter_text()] == ["The quick brown fox"]

    @pytest.mark.asyncio
    async def test_local_ids_are_minted_per_highlighter(self, fox_root, make_annotation) -> None:
        """Unsaved annotations get 0, 1, ... from the highlighter's counter."""
        highlighter = Highlighter(fox_root)
        first = make_annotation(exact="quick")
        second = make_annotation(exact="brown")
        saved = make_annotation(exact="fox", annotation_id="a1")

        for annotation in (first, second, saved):
            await highlighter.draw(annotation)

        assert (first.local_id, second.local_id, saved.local_id) == (0, 1, None)
        assert highlighter.ids.last == 1

    @pytest.mark.asyncio
    async def test_shared_counter(self, fox_root, article_root, make_annotation) -> None:
        """Highlighters may share an explicit counter."""
        counter = IdCounter(start=5)
        first = make_annotation(exact="quick")
        second = make_annotation(exact="survive")

        await Highlighter(fox_root, id_counter=counter).draw(first)
        await Highlighter(article_root, id_counter=counter).draw(second)

        assert (first.local_id, second.local_id) == (5, 6)

    @pytest.mark.asyncio
    async def test_on_drawn_hook(self, fox_root, make_annotation) -> None:
        """The on_drawn hook receives the annotation and its markers."""
        calls = []
        highlighter = Highlighter(fox_root, {"hooks": {"on_drawn": lambda a, m: calls.append((a, m))}})
        annotation = make_annotation(exact="quick")

        markers = await highlighter.draw(annotation)

        assert calls == [(annotation, markers)]

    @pytest.mark.asyncio
    async def test_custom_highlight_class(self, fox_root, make_annotation) -> None:
        """Markers use the configured class."""
        highlighter = Highlighter(fox_root, HighlighterOptions(highlight_class="annotator-hl-temp"))

        await highlighter.draw(make_annotation(exact="quick"))

        assert _marked(fox_root, "annotator-hl-temp") == ["quick"]


class TestUndraw:
    """Tests for Highlighter.undraw and redraw."""

    @pytest.mark.asyncio
    async def test_undraw_restores_markup(self, fox_root, make_annotation) -> None:
        """Removing markers leaves the original markup."""
        annotation = make_annotation(position=(4, 9), exact="quick")
        highlighter = Highlighter(fox_root)
        await highlighter.draw(annotation)

        highlighter.undraw(annotation)

        assert to_html(fox_root) == FOX_ORIGINAL
        assert annotation.local.highlights is None
        assert annotation.local.ranges == []

    @pytest.mark.asyncio
    async def test_undraw_is_repeatable(self, fox_root, make_annotation) -> None:
        """Undrawing twice, or before drawing, is a no-op."""
        annotation = make_annotation(exact="quick")
        highlighter = Highlighter(fox_root)

        highlighter.undraw(annotation)
        await highlighter.draw(annotation)
        highlighter.undraw(annotation)
        highlighter.undraw(annotation)

        assert to_html(fox_root) == FOX_ORIGINAL

    @pytest.mark.asyncio
    async def test_redraw_follows_new_selectors(self, fox_root, make_annotation) -> None:
        """Redraw replaces old markers with markers for the updated target."""
        annotation = make_annotation(exact="quick")
        highlighter = Highlighter(fox_root)
        old = await highlighter.draw(annotation)

        annotation.target = make_annotation(exact="brown").target
        new = await highlighter.redraw(annotation)

        assert all(m.parent is None for m in old)
        assert [m.text_content() for m in new] == ["brown"]
        assert _marked(fox_root) == ["brown"]

    def test_unwrap_detached_marker(self, make_annotation) -> None:
        """Unwrapping a marker that has no parent does nothing."""
        marker = Marker(make_annotation(exact="x"))

        unwrap(marker)

        assert marker.parent is None


class TestDrawAll:
    """Tests for Highlighter.draw_all."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chunk_size", [1, 3, 10])
    async def test_chunk_size_does_not_change_result(self, article_root, make_annotation, chunk_size) -> None:
        """The same markers are drawn whatever the chunking."""
        annotations = [
            make_annotation(position=(0, 7), exact="Anchors"),
            make_annotation(position=(17, 24), exact="survive"),
            make_annotation(position=(37, 48), exact="light edits"),
            make_annotation(exact="one"),
        ]
        highlighter = Highlighter(article_root, {"chunk_size": chunk_size, "chunk_delay": 0})

        markers = await highlighter.draw_all(annotations)

        assert [m.text_content() for m in markers] == ["Anchors", "survive", "light edits", "one"]

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, fox_root, make_annotation) -> None:
        """Failing annotations are reported to the hook and skipped."""
        failures = []
        highlighter = Highlighter(
            fox_root,
            {"chunk_delay": 0, "hooks": {"on_anchoring_failure": lambda a, e: failures.append((a, e))}},
        )
        wolf = make_annotation(exact="wolf")
        stale = make_annotation(position=(4, 100))
        quick = make_annotation(exact="quick")

        markers = await highlighter.draw_all([wolf, stale, quick])

        assert [m.text_content() for m in markers] == ["quick"]
        assert [(a, type(e)) for a, e in failures] == [(wolf, AnchoringError), (stale, OutOfRangeError)]
        assert wolf.local.highlights is None

    @pytest.mark.asyncio
    async def test_sleeps_between_chunks(self, fox_root, make_annotation, monkeypatch) -> None:
        """The pause is awaited between chunks but not after the last one."""
        sleep = AsyncMock()
        monkeypatch.setattr(asyncio, "sleep", sleep)
        highlighter = Highlighter(fox_root, {"chunk_size": 10, "chunk_delay": 10})

        await highlighter.draw_all([make_annotation(exact="wolf") for _ in range(25)])

        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.01)

    @pytest.mark.asyncio
    async def test_empty_batch(self, fox_root) -> None:
        """Nothing to draw returns no markers."""
        assert await Highlighter(fox_root).draw_all([]) == []


class TestDestroy:
    """Tests for Highlighter.destroy."""

    @pytest.mark.asyncio
    async def test_destroy_removes_all_markers(self, article_root, make_annotation) -> None:
        """Every marker under the root is unwrapped."""
        before = to_html(article_root)
        highlighter = Highlighter(article_root, {"chunk_delay": 0})
        await highlighter.draw_all(
            [make_annotation(exact="survive"), make_annotation(exact="light"), make_annotation(exact="two")]
        )

        highlighter.destroy()

        assert article_root.find_by_class("annotator-hl") == []
        assert to_html(article_root) == before

    @pytest.mark.asyncio
    async def test_destroy_clears_recorded_markers(self, fox_root, make_annotation) -> None:
        """Annotations no longer record markers that destroy removed."""
        annotation = make_annotation(exact="quick")
        highlighter = Highlighter(fox_root)
        await highlighter.draw(annotation)

        highlighter.destroy()

        assert annotation.local.highlights is None
        assert annotation.local.ranges == []
        assert to_html(fox_root) == FOX_ORIGINAL

    @pytest.mark.asyncio
    async def test_destroy_then_draw(self, fox_root, make_annotation) -> None:
        """An annotation can be drawn again after destroy."""
        annotation = make_annotation(exact="quick")
        highlighter = Highlighter(fox_root)
        await highlighter.draw(annotation)
        highlighter.destroy()

        markers = await highlighter.draw(annotation)

        assert annotation.highlights == markers
        assert _marked(fox_root) == ["quick"]


class TestMarkers:
    """Tests for Marker back-references."""

    @pytest.mark.asyncio
    async def test_marker_does_not_keep_annotation_alive(self, fox_root, make_annotation) -> None:
        """The back-reference is weak."""
        annotation = make_annotation(exact="quick")
        markers = await Highlighter(fox_root).draw(annotation)
        assert markers[0].annotation is annotation

        del annotation
        gc.collect()

        assert markers[0].annotation is None


class TestOptions:
    """Tests for HighlighterOptions validation."""

    @pytest.mark.parametrize(
        "options",
        [
            {"chunk_size": 0},
            {"chunk_delay": -1},
            {"highlight_class": "two classes"},
            {"highlight_class": ""},
            {"unknown": True},
            {"hooks": {"on_unknown": print}},
            {"hooks": {"on_drawn": "not callable"}},
        ],
    )
    def test_invalid_options(self, fox_root, options) -> None:
        """Invalid options are rejected when the highlighter is built."""
        with pytest.raises(ValidationError):
            Highlighter(fox_root, options)

    def test_defaults(self, fox_root) -> None:
        """Defaults come from configuration."""
        options = Highlighter(fox_root).options

        assert options.chunk_size >= 1
        assert options.hooks.on_drawn is None
