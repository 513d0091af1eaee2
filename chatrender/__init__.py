"""Chat message to HTML renderer with math, citation and code protection."""

from chatrender.core.models import RenderOptions
from chatrender.core.pipeline import process_math_and_markdown
from chatrender.render.markdown import MarkdownRenderer
from chatrender.render.typeset import DiagramScheduler, render_math_in_element
from chatrender.transforms.latex import text_may_contain_math

__all__ = [
    "DiagramScheduler",
    "MarkdownRenderer",
    "RenderOptions",
    "process_math_and_markdown",
    "render_math_in_element",
    "text_may_contain_math",
]
