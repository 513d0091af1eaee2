"""markdown to HTML rendering."""

import html as html_lib
import re
from typing import Any, Optional, cast

from markdown_it import MarkdownIt

from chatrender.core.models import Category, RenderOptions
from chatrender.render.highlight import Highlighter, PygmentsHighlighter, highlight_code
from chatrender.transforms.citations import citation_fragment_href, extract_citation_text

DIAGRAM_PATTERN = re.compile(r"""class=["']mermaid["']""")
MATH_TOKEN_PATTERN = re.compile(rf"%%{Category.MATH.value}_\d+%%")


def contains_diagram(html: str) -> bool:
    """checks whether rendered HTML holds a diagram container."""
    return DIAGRAM_PATTERN.search(html) is not None


class MarkdownRenderer:  # pylint: disable=too-few-public-methods
    """renders markdown to HTML with highlighted code and citation links."""

    def __init__(
        self,
        options: Optional[RenderOptions] = None,
        highlighter: Optional[Highlighter] = None,
    ) -> None:
        self.options = options or RenderOptions()
        self.highlighter = highlighter or PygmentsHighlighter()
        self._md = self._build()

    def _build(self) -> MarkdownIt:
        md = MarkdownIt(
            "commonmark",
            {"breaks": self.options.breaks, "html": self.options.allow_html},
        )
        md.enable("table")
        md.enable("strikethrough")

        # cast to Any since RendererProtocol doesn't expose renderToken/rules
        renderer: Any = md.renderer

        def render_code(tokens: Any, idx: int, _options: Any, _env: Any) -> str:
            token = tokens[idx]
            info = token.info.strip() if token.info else ""
            language = info.split()[0] if info else ""
            if language == "mermaid":
                return f'<div class="mermaid">{html_lib.escape(token.content)}</div>\n'
            if MATH_TOKEN_PATTERN.search(token.content):
                # highlighting would split the token, restored later as text
                highlighted = html_lib.escape(token.content)
            else:
                highlighted = highlight_code(token.content, language, self.highlighter)
            data_language = html_lib.escape(language or "plaintext")
            return f'<pre data-language="{data_language}"><code>{highlighted}</code></pre>\n'

        renderer.rules["fence"] = render_code
        renderer.rules["code_block"] = render_code

        # keeps list item markup as is, one item per line
        renderer.rules["list_item_open"] = lambda *_args: "<li>"
        renderer.rules["list_item_close"] = lambda *_args: "</li>\n"

        scheme = self.options.citation_scheme
        rewrite_citations = self.options.text_fragment_citations

        def render_link_open(tokens: Any, idx: int, options: Any, env: Any) -> str:
            token = tokens[idx]
            citation = extract_citation_text(token.attrGet("href") or "", scheme)
            if citation is not None and rewrite_citations:
                token.attrSet("href", citation_fragment_href(citation))
                token.attrSet("class", "citation")
                token.attrSet("data-citation", citation)
            return cast(str, renderer.renderToken(tokens, idx, options, env))

        renderer.rules["link_open"] = render_link_open

        return md

    def render(self, text: str) -> str:
        """
        renders markdown text to HTML.

        Args:
            text: markdown with code and links restored

        Returns:
            rendered HTML
        """
        return cast(str, self._md.render(text))
