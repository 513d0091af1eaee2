"""fixed-order protection, rendering and restoration pipeline for a message."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from chatrender.core.models import ProtectedRegions, RenderOptions
from chatrender.render.markdown import MarkdownRenderer, contains_diagram
from chatrender.render.typeset import DiagramScheduler
from chatrender.transforms import placeholders
from chatrender.transforms.bold import fix_bold_formatting
from chatrender.transforms.citations import group_citations, normalize_citations
from chatrender.transforms.latex import (
    extract_math,
    normalize_math_environments,
    restore_math,
)
from chatrender.transforms.think import transform_think_blocks

logger = logging.getLogger(__name__)

StageFunc = Callable[[str, ProtectedRegions, RenderOptions], str]


@dataclass(frozen=True)
class Stage:
    """named text transform run at a fixed position in the pipeline."""

    name: str
    func: StageFunc

    def __call__(
        self, text: str, regions: ProtectedRegions, options: RenderOptions
    ) -> str:
        return self.func(text, regions, options)


def _text_only(func: Callable[[str], str]) -> StageFunc:
    """adapts a plain text transform to the stage signature."""
    return lambda text, _regions, _options: func(text)


def _with_regions(func: Callable[[str, ProtectedRegions], str]) -> StageFunc:
    """adapts an extraction or restoration function to the stage signature."""
    return lambda text, regions, _options: func(text, regions)


def _unescape_brackets(text: str) -> str:
    return re.sub(r"\\\[([a-zA-Z\d]+)\]", r"[\1]", text)


def _remove_horizontal_rules(text: str) -> str:
    return re.sub(r"^---\n$", "", text, flags=re.MULTILINE)


def _remove_stray_percents(text: str) -> str:
    # a "%" preceded by "%" closes a placeholder token
    return re.sub(r"(?<!%)%\n\s*", "", text)


def _fix_fullwidth_paren_math(text: str) -> str:
    return re.sub(r"（\\\((.+?)\\）", r"（\\(\1\\)）", text)


def _unwrap_display_math(html: str, options: RenderOptions) -> str:
    container = re.escape(f'<div class="{options.math_container_class}">')
    return re.sub(rf"<p>\s*({container}[\s\S]*?</div>)\s*</p>", r"\1", html)


PRE_RENDER_STAGES: tuple[Stage, ...] = (
    # code first: nothing after this may see code contents
    Stage("extract_code_blocks", _with_regions(placeholders.extract_code_blocks)),
    Stage("extract_inline_code", _with_regions(placeholders.extract_inline_code)),
    # image attributes may contain "$"
    Stage("extract_images", _with_regions(placeholders.extract_images)),
    # citation links stay visible for normalize_citations
    Stage(
        "extract_links",
        lambda text, regions, options: placeholders.extract_links(
            text, regions, options.citation_scheme
        ),
    ),
    Stage("unescape_brackets", _text_only(_unescape_brackets)),
    Stage("normalize_math_environments", _text_only(normalize_math_environments)),
    Stage("remove_horizontal_rules", _text_only(_remove_horizontal_rules)),
    Stage("transform_think_blocks", _text_only(transform_think_blocks)),
    Stage("remove_stray_percents", _text_only(_remove_stray_percents)),
    Stage("fix_fullwidth_paren_math", _text_only(_fix_fullwidth_paren_math)),
    Stage(
        "extract_math",
        lambda text, regions, options: extract_math(
            text, regions, options.math_container_class
        ),
    ),
    Stage("fix_bold_formatting", _text_only(fix_bold_formatting)),
    Stage(
        "normalize_citations",
        lambda text, _regions, options: normalize_citations(
            text, options.citation_scheme
        ),
    ),
    Stage(
        "group_citations",
        lambda text, _regions, options: group_citations(
            text, options.citation_scheme, options.citation_separator
        ),
    ),
    # the renderer must see real link and fence syntax
    Stage("restore_links", _with_regions(placeholders.restore_links)),
    Stage("restore_inline_code", _with_regions(placeholders.restore_inline_code)),
    Stage("restore_code_blocks", _with_regions(placeholders.restore_code_blocks)),
)

POST_RENDER_STAGES: tuple[Stage, ...] = (
    Stage("restore_math", _with_regions(restore_math)),
    Stage("restore_images", _with_regions(placeholders.restore_images)),
    Stage("unwrap_display_math", lambda html, _regions, options: _unwrap_display_math(html, options)),
)


def stage_names() -> list[str]:
    """returns stage names in execution order, with the render step."""
    return (
        [stage.name for stage in PRE_RENDER_STAGES]
        + ["render_markdown"]
        + [stage.name for stage in POST_RENDER_STAGES]
    )


def prepare_markdown(
    text: str, regions: ProtectedRegions, options: Optional[RenderOptions] = None
) -> str:
    """
    runs the stages before markdown rendering.

    Args:
        text: raw message text
        regions: accumulator for this run; math and images stay protected
        options: render options

    Returns:
        markdown ready for the renderer
    """
    options = options or RenderOptions()
    for stage in PRE_RENDER_STAGES:
        text = stage(text, regions, options)
    return text


def finish_html(
    html: str, regions: ProtectedRegions, options: Optional[RenderOptions] = None
) -> str:
    """runs the stages after markdown rendering."""
    options = options or RenderOptions()
    for stage in POST_RENDER_STAGES:
        html = stage(html, regions, options)
    return html


def process_math_and_markdown(
    text: str,
    options: Optional[RenderOptions] = None,
    renderer: Optional[MarkdownRenderer] = None,
    diagram_scheduler: Optional[DiagramScheduler] = None,
) -> str:
    """
    renders a chat message containing markdown, math, citations and code.

    Args:
        text: raw message text
        options: render options (defaults used when omitted)
        renderer: markdown renderer; built from options when omitted
        diagram_scheduler: scheduler notified when the HTML holds diagrams

    Returns:
        rendered HTML
    """
    options = options or (renderer.options if renderer else RenderOptions())
    renderer = renderer or MarkdownRenderer(options)
    regions = ProtectedRegions()

    markdown = prepare_markdown(text, regions, options)
    logger.debug("protected %d region(s) before rendering", len(regions))

    html = renderer.render(markdown)

    if diagram_scheduler is not None and contains_diagram(html):
        diagram_scheduler.schedule()

    return finish_html(html, regions, options)
