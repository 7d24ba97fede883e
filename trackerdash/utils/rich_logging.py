"""Rich logging integration for trackerdash.

Provides the Rich console handler used for terminal output and a file
formatter that strips Rich markup.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

_MARKUP_PATTERN = re.compile(r"\[/?[^\]]+\]")


class CorrelationRichHandler(RichHandler):
    """RichHandler with correlation ID support.

    Function names are prefixed in pink and window/granularity values
    (``last_day``, ``minutes`` ...) are highlighted in bright cyan.
    """

    SELECTION_PATTERN = re.compile(
        r"\b(last_hour|last_five_hours|last_day|last_three_days|hours|minutes)\b"
    )

    def __init__(
        self,
        *args: Any,
        console: Console | None = None,
        show_colors: bool = True,
        **kwargs: Any,
    ) -> None:
        """Initialize RichHandler.

        Args:
            *args: Positional arguments for RichHandler
            console: Optional Rich Console instance
            show_colors: Whether to colorize selection values and function names
            **kwargs: Keyword arguments for RichHandler

        """
        if console is None:
            console = Console(stderr=True, markup=True)
        self.show_colors = show_colors
        kwargs.setdefault("markup", True)
        super().__init__(*args, console=console, **kwargs)

    def _colorize(self, message: str) -> str:
        return self.SELECTION_PATTERN.sub(
            lambda m: f"[bright_cyan]{m.group(0)}[/bright_cyan]", message
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record with correlation ID and colored function name."""
        try:
            if not hasattr(record, "correlation_id"):
                from trackerdash.utils.logging_config import correlation_id

                record.correlation_id = correlation_id.get() or "no-correlation-id"

            if self.show_colors:
                message = self._colorize(record.getMessage())
                func_name = getattr(record, "funcName", None)
                if func_name:
                    message = f"[#ff69b4]{func_name}[/#ff69b4] {message}"
                record.msg = message
                record.args = ()

            super().emit(record)
        except Exception:
            self.handleError(record)


def strip_rich_markup(text: str) -> str:
    """Strip Rich markup from text for file logging."""
    return _MARKUP_PATTERN.sub("", text)


class FileFormatter(logging.Formatter):
    """Formatter for file output that strips Rich markup."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, stripping Rich markup for file output."""
        return strip_rich_markup(super().format(record))


def create_rich_handler(
    console: Console | None = None,
    level: int | str = logging.INFO,
    show_path: bool = False,
    rich_tracebacks: bool = True,
    show_colors: bool = True,
) -> logging.Handler:
    """Create a RichHandler with correlation ID support.

    Args:
        console: Optional Rich Console instance
        level: Log level
        show_path: Whether to show file paths in log output
        rich_tracebacks: Whether to use rich tracebacks
        show_colors: Whether to colorize messages

    Returns:
        Configured RichHandler instance

    """
    return CorrelationRichHandler(
        console=console,
        level=level,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        show_colors=show_colors,
    )
