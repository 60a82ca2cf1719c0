"""Tests for quote capture and location."""

import pytest

from textanchor.errors import MalformedSelectorError, QuoteNotFoundError
from textanchor.matcher import capture_quote, locate_quote
from textanchor.models import Anchor
from textanchor.selectors import TextQuoteSelector

FOX = "The quick brown fox"


class TestCaptureQuote:
    """Tests for capture_quote."""

    def test_captures_exact_and_context(self) -> None:
        """Selecting "quick" keeps everything around it as context."""
        selector = capture_quote(FOX, 4, 9)

        assert selector == TextQuoteSelector(exact="quick", prefix="The ", suffix=" brown fox")

    def test_context_is_bounded(self) -> None:
        """Prefix and suffix are at most 32 characters."""
        content = "a" * 100 + "needle" + "b" * 100

        selector = capture_quote(content, 100, 106)

        assert selector.exact == "needle"
        assert selector.prefix == "a" * 32
        assert selector.suffix == "b" * 32

    def test_context_shrinks_at_document_edges(self) -> None:
        """Near the start and end the context is shorter."""
        selector = capture_quote(FOX, 0, 3)

        assert selector.prefix == ""
        assert selector.suffix == " quick brown fox"

    def test_negative_offset_raises(self) -> None:
        """Negative offsets are malformed."""
        with pytest.raises(MalformedSelectorError):
            capture_quote(FOX, -1, 3)


class TestLocateQuote:
    """Tests for locate_quote."""

    def test_first_occurrence_without_context(self) -> None:
        """Without context or hint the first occurrence wins."""
        anchor = locate_quote("a fox sees a fox", TextQuoteSelector(exact="fox"))

        assert anchor == Anchor(2, 5)

    def test_hint_selects_later_occurrence(self) -> None:
        """A hint at or before the intended occurrence selects it."""
        anchor = locate_quote("a fox sees a fox", TextQuoteSelector(exact="fox"), hint=6)

        assert anchor == Anchor(13, 16)

    def test_unique_quote_found_regardless_of_hint(self) -> None:
        """A quote occurring once is found from any hint before it."""
        for hint in (None, 0, 3, 4):
            assert locate_quote(FOX, TextQuoteSelector(exact="quick"), hint=hint) == Anchor(4, 9)

    def test_prefix_moves_cursor(self) -> None:
        """The prefix selects the occurrence that follows it."""
        content = "red fox, blue fox, green fox"
        selector = TextQuoteSelector(exact="fox", prefix="blue ")

        assert locate_quote(content, selector) == Anchor(14, 17)

    def test_suffix_used_when_prefix_missing(self) -> None:
        """A suffix moves the cursor back by the quote length."""
        content = "fox one, fox two, fox three"
        selector = TextQuoteSelector(exact="fox", suffix=" three")

        assert locate_quote(content, selector) == Anchor(18, 21)

    def test_suffix_used_when_prefix_not_found(self) -> None:
        """A prefix that no longer occurs falls back to the suffix."""
        content = "fox one, fox two, fox three"
        selector = TextQuoteSelector(exact="fox", prefix="gone ", suffix=" two")

        assert locate_quote(content, selector) == Anchor(9, 12)

    def test_survives_insertion_before_span(self) -> None:
        """Edits before the quote do not break quote resolution."""
        selector = capture_quote(FOX, 4, 9)
        edited = "Breaking news. " + FOX

        anchor = locate_quote(edited, selector)

        assert anchor.text(edited) == "quick"
        assert anchor == Anchor(19, 24)

    def test_survives_removal_before_span(self) -> None:
        """Removing text before the quote keeps it locatable."""
        original = "Intro paragraph. The quick brown fox"
        selector = capture_quote(original, 21, 26)

        edited = original.replace("Intro paragraph. ", "")

        assert locate_quote(edited, selector).text(edited) == "quick"

    def test_missing_quote_raises(self) -> None:
        """A quote absent from the document raises QuoteNotFoundError."""
        with pytest.raises(QuoteNotFoundError) as exc_info:
            locate_quote(FOX, TextQuoteSelector(exact="wolf"))
        assert exc_info.value.exact == "wolf"

    def test_missing_exact_raises(self) -> None:
        """Objects without exact text are malformed."""

        class NoExact:
            exact = None
            prefix = None
            suffix = None

        with pytest.raises(MalformedSelectorError):
            locate_quote(FOX, NoExact())


class TestCaptureThenLocate:
    """Capturing then locating on an unmodified document is lossless."""

    @pytest.mark.parametrize(
        "content",
        [
            "The quick brown fox",
            "a fox sees a fox",
            "aaaa bbbb aaaa",
            "abababab",
        ],
    )
    def test_every_span_round_trips(self, content: str) -> None:
        """All (start, end) spans resolve back to themselves."""
        for start in range(len(content) + 1):
            for end in range(start, len(content) + 1):
                selector = capture_quote(content, start, end)
                assert locate_quote(content, selector) == Anchor(start, end)
