"""syntax highlighting for fenced code blocks."""

import html
import logging
from typing import Protocol

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)


class Highlighter(Protocol):
    """protocol for code highlighters."""

    def highlight(self, code: str, language: str) -> str:
        """highlights code in language, raising on an unknown language."""

    def highlight_auto(self, code: str) -> str:
        """highlights code with a detected language."""


class PygmentsHighlighter:
    """highlights code to HTML spans with Pygments."""

    def __init__(self) -> None:
        self._formatter = HtmlFormatter(nowrap=True)

    def highlight(self, code: str, language: str) -> str:
        """
        highlights code with the lexer registered for language.

        Raises:
            ClassNotFound: if no lexer is registered for language
        """
        lexer = get_lexer_by_name(language)
        return highlight(code, lexer, self._formatter)

    def highlight_auto(self, code: str) -> str:
        """highlights code with a guessed lexer, plain text if guessing fails."""
        try:
            lexer = guess_lexer(code)
        except ClassNotFound:
            lexer = TextLexer()
        return highlight(code, lexer, self._formatter)


class PlainHighlighter:
    """escapes code without highlighting it."""

    def highlight(self, code: str, language: str) -> str:  # pylint: disable=unused-argument
        """returns escaped code."""
        return html.escape(code)

    def highlight_auto(self, code: str) -> str:
        """returns escaped code."""
        return html.escape(code)


def highlight_code(code: str, language: str, highlighter: Highlighter) -> str:
    """
    highlights code, falling back to auto-detection on failure.

    Args:
        code: code block content
        language: language hint from the fence info, may be empty
        highlighter: highlighter to use

    Returns:
        highlighted HTML markup
    """
    if language:
        try:
            return highlighter.highlight(code, language)
        except ClassNotFound as e:
            logger.debug("highlighting as %s failed, detecting language: %s", language, e)
        except Exception as e:
            logger.warning("highlighter failed for %s, detecting language: %s", language, e)
    return highlighter.highlight_auto(code)
