"""
Logging configuration for textanchor

Includes IndentLogger for tree-style tracing of nested drawing operations
(batch -> chunk -> annotation).
"""

import io
import logging
import sys
from contextlib import contextmanager

_TREE_CHARS = {
    "pipe": "│",
    "branch": "├──",
    "leaf": "└──",
}


class IndentLogger:
    """Logger wrapper that prefixes messages with the current tree indentation.

    Unlike a process-wide indent, the depth is tracked per wrapper so that two
    highlighters logging at once do not interleave their trees.
    """

    def __init__(self, base_logger: logging.Logger) -> None:
        self._logger = base_logger
        self._level = 0
        self._closing: set[int] = set()

    def debug(self, msg: str, *args, **kwargs) -> None:
        """Log debug message with indentation"""
        self._logger.debug(f"{self.indent}{msg}", *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        """Log info message with indentation"""
        self._logger.info(f"{self.indent}{msg}", *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        """Log warning message with indentation"""
        self._logger.warning(f"{self.indent}{msg}", *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        """Log error message with indentation"""
        self._logger.error(f"{self.indent}{msg}", *args, **kwargs)

    def child(self, name: str) -> "IndentLogger":
        """Wrap a child logger (e.g. "textanchor.highlighter")."""
        return IndentLogger(self._logger.getChild(name))

    @property
    def depth(self) -> int:
        return self._level

    @property
    def indent(self) -> str:
        """Get current indentation string"""
        if self._level == 0:
            return ""
        parts = [f"{_TREE_CHARS['pipe']}   "] * (self._level - 1)
        is_end = (self._level - 1) in self._closing
        parts.append(_TREE_CHARS["leaf"] if is_end else _TREE_CHARS["branch"])
        return "".join(parts)

    @contextmanager
    def indent_block(self, initial_message: str | None = None, closing_message: str | None = None):
        """
        Context manager for handling indentation blocks

        Args:
            initial_message: Optional message to log at block start
            closing_message: Optional message logged with an end corner
        """
        if initial_message:
            self.debug(initial_message)
        self._level += 1
        try:
            yield
            if closing_message:
                self._closing.add(self._level - 1)
                self.debug(closing_message)
        finally:
            self._closing.discard(self._level - 1)
            self._level -= 1


def setup_logging(level=logging.INFO):
    """
    Configure logging for textanchor

    Args:
        level: Logging level (default: INFO)

    Returns:
        IndentLogger: Configured logger with indentation support
    """
    base_logger = logging.getLogger("textanchor")
    base_logger.setLevel(level)

    # Remove existing handlers
    base_logger.handlers = []

    # UTF-8 console handler so tree characters survive cp1252 terminals
    stream = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)8s %(message)s"))
    base_logger.addHandler(handler)

    return IndentLogger(base_logger)


# Default logger with indentation support
logger = IndentLogger(logging.getLogger("textanchor"))
