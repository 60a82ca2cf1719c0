"""Exception taxonomy for selector resolution, normalization and drawing."""

from __future__ import annotations


class TextAnchorError(Exception):
    """Base class for all textanchor errors."""


class MalformedSelectorError(TextAnchorError, ValueError):
    """Raised when a selector is missing required fields or has invalid offsets."""

    def __init__(self, selector_type: str, detail: str) -> None:
        """Initialize the error.

        Args:
            selector_type: The selector kind (e.g. "TextQuoteSelector")
            detail: What is wrong with it
        """
        self.selector_type = selector_type
        self.detail = detail
        super().__init__(f"Malformed {selector_type}: {detail}")


class QuoteNotFoundError(TextAnchorError):
    """Raised when the exact quote does not occur at or after the search cursor."""

    def __init__(self, exact: str, cursor: int = 0) -> None:
        self.exact = exact
        self.cursor = cursor
        preview = exact if len(exact) <= 40 else exact[:37] + "..."
        super().__init__(f"Quote not found: {preview!r} (searched from {cursor})")


class PositionMismatchError(TextAnchorError):
    """Raised when a position span does not contain the expected quote."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"quote mismatch: expected {expected!r}, found {actual!r}")


class AnchoringError(TextAnchorError):
    """Raised when no selector of an annotation could be resolved."""

    def __init__(self, message: str = "unable to anchor", errors: list[Exception] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)


class OutOfRangeError(TextAnchorError, IndexError):
    """Raised when offsets exceed the available document content."""

    def __init__(self, offset: int, length: int, context: str = "") -> None:
        self.offset = offset
        self.length = length
        msg = f"Offset {offset} out of range for content of length {length}"
        if context:
            msg = f"{msg} in {context}"
        super().__init__(msg)


class AlreadyNormalizedError(TextAnchorError, RuntimeError):
    """Raised when a raw range is normalized a second time."""

    def __init__(self) -> None:
        super().__init__("A TextRange may only be normalized once")
