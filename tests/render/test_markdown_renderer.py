"""tests for markdown rendering."""

from unittest.mock import MagicMock

from pygments.util import ClassNotFound

from chatrender.core.models import RenderOptions
from chatrender.render.highlight import PlainHighlighter, highlight_code
from chatrender.render.markdown import MarkdownRenderer, contains_diagram


def test_highlights_fenced_code_with_language() -> None:
    """highlights code with the fence language."""
    renderer = MarkdownRenderer()
    html = renderer.render("```python\ndef f():\n    pass\n```")
    assert '<pre data-language="python"><code>' in html
    assert '<span class="k">def</span>' in html


def test_unlabeled_fence_uses_plaintext_attribute() -> None:
    """marks fences without language as plaintext."""
    renderer = MarkdownRenderer(highlighter=PlainHighlighter())
    html = renderer.render("```\na < b\n```")
    assert html == '<pre data-language="plaintext"><code>a &lt; b\n</code></pre>\n'


def test_unknown_language_does_not_fail() -> None:
    """falls back to auto-detection for unknown languages."""
    renderer = MarkdownRenderer()
    html = renderer.render("```nosuchlanguage\nx = 1\n```")
    assert '<pre data-language="nosuchlanguage">' in html


def test_highlight_code_falls_back_to_auto() -> None:
    """uses auto highlighting when the language is unknown."""
    highlighter = MagicMock()
    highlighter.highlight.side_effect = ClassNotFound("no lexer")
    highlighter.highlight_auto.return_value = "auto"
    assert highlight_code("x", "bogus", highlighter) == "auto"
    highlighter.highlight_auto.assert_called_once_with("x")


def test_highlight_code_falls_back_on_highlighter_error() -> None:
    """uses auto highlighting when the highlighter itself raises."""
    highlighter = MagicMock()
    highlighter.highlight.side_effect = ValueError("boom")
    highlighter.highlight_auto.return_value = "auto"
    assert highlight_code("x", "python", highlighter) == "auto"
    highlighter.highlight_auto.assert_called_once_with("x")


def test_highlight_code_without_language_skips_lookup() -> None:
    """goes straight to auto highlighting when no language is given."""
    highlighter = MagicMock()
    highlighter.highlight_auto.return_value = "auto"
    assert highlight_code("x", "", highlighter) == "auto"
    highlighter.highlight.assert_not_called()


def test_mermaid_fence_becomes_diagram_container() -> None:
    """renders mermaid fences as escaped diagram source."""
    renderer = MarkdownRenderer()
    html = renderer.render("```mermaid\ngraph TD; A-->B\n```")
    assert html == '<div class="mermaid">graph TD; A--&gt;B\n</div>\n'
    assert contains_diagram(html)


def test_contains_diagram() -> None:
    """detects diagram containers with either quote style."""
    assert contains_diagram("<div class='mermaid'>x</div>")
    assert not contains_diagram("<div class=\"math\">x</div>")


def test_list_items_one_per_line() -> None:
    """renders list items followed by a newline."""
    renderer = MarkdownRenderer()
    html = renderer.render("- a\n- b")
    assert "<li>a</li>\n<li>b</li>\n" in html


def test_breaks_option() -> None:
    """turns single newlines into line breaks unless disabled."""
    assert "<br" in MarkdownRenderer().render("a\nb")
    assert "<br" not in MarkdownRenderer(RenderOptions(breaks=False)).render("a\nb")


def test_raw_html_escaped_by_default() -> None:
    """escapes raw HTML unless allowed."""
    html = MarkdownRenderer().render("<script>alert(1)</script>")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    allowed = MarkdownRenderer(RenderOptions(allow_html=True)).render("<b>x</b>")
    assert "<b>x</b>" in allowed


def test_citation_link_rewritten_to_text_fragment() -> None:
    """rewrites citation hrefs to scroll-to-text fragments."""
    html = MarkdownRenderer().render("[1](cite:some%20text)")
    assert 'href="#:~:text=some%20text"' in html
    assert 'class="citation"' in html
    assert 'data-citation="some text"' in html


def test_citation_fragment_keeps_literal_percent_text() -> None:
    """encodes decoded citation text once, so percent signs survive."""
    html = MarkdownRenderer().render("[1](cite:x%2541)")
    assert 'href="#:~:text=x%2541"' in html
    assert 'data-citation="x%41"' in html


def test_citation_rewrite_can_be_disabled() -> None:
    """keeps citation hrefs when text fragments are disabled."""
    options = RenderOptions(text_fragment_citations=False)
    html = MarkdownRenderer(options).render("[1](cite:x)")
    assert 'href="cite:x"' in html


def test_regular_links_unchanged() -> None:
    """leaves ordinary links alone."""
    html = MarkdownRenderer().render("[docs](https://example.com)")
    assert '<a href="https://example.com">docs</a>' in html


def test_renders_tables() -> None:
    """renders markdown tables."""
    html = MarkdownRenderer().render("| A | B |\n|---|---|\n| 1 | 2 |")
    assert "<table>" in html
