"""HTML rendering collaborators: markdown, highlighting, typesetting."""

from chatrender.render.highlight import PlainHighlighter, PygmentsHighlighter
from chatrender.render.markdown import MarkdownRenderer, contains_diagram
from chatrender.render.typeset import DiagramScheduler, render_math_in_element

__all__ = [
    "DiagramScheduler",
    "MarkdownRenderer",
    "PlainHighlighter",
    "PygmentsHighlighter",
    "contains_diagram",
    "render_math_in_element",
]
