"""LaTeX normalization and protection utilities for markdown processing."""

import functools
import html
import logging
import re

from chatrender.core.models import Category, ProtectedRegions
from chatrender.transforms.placeholders import extract, restore

logger = logging.getLogger(__name__)

DISPLAY_CONTAINER_CLASS = "math-display-container"

# restored into a math span that encloses them
NESTED_CATEGORIES = (Category.LINK, Category.INLINE_CODE, Category.CODE_BLOCK)

# \(..\) written with doubled backslashes, \(..\), \[..\], $$..$$,
# single-line $..$ between unescaped dollars, then bare parentheses holding a
# LaTeX command
MATH_PATTERN = re.compile(
    r"(\\\\\([\s\S]+?\\\\\))"
    r"|(\\\([\s\S]+?\\\))"
    r"|(\\\[[\s\S]+?\\\])"
    r"|(\$\$[\s\S]+?\$\$)"
    r"|((?<!\\)\$(?!\$)[^\n]*?(?<!\\)\$)"
    r"|((?<![\]\\\w])\((?=[^()\n]*\\[A-Za-z])[^()\n]+\))"
)
MATH_HINT_PATTERN = re.compile(r"\\\(|\\\[|\$\$|\\begin\{|\\boxed\{")
UNESCAPED_DOLLAR_PATTERN = re.compile(r"(?<!\\)\$")

MATHDS_MAP = {
    "A": "𝔸", "B": "𝔹", "C": "ℂ", "D": "𝔻", "E": "𝔼",
    "F": "𝔽", "G": "𝔾", "H": "ℍ", "I": "𝕀", "J": "𝕁",
    "K": "𝕂", "L": "𝕃", "M": "𝕄", "N": "ℕ", "O": "𝕆",
    "P": "ℙ", "Q": "ℚ", "R": "ℝ", "S": "𝕊", "T": "𝕋",
    "U": "𝕌", "V": "𝕍", "W": "𝕎", "X": "𝕏", "Y": "𝕐",
    "Z": "ℤ",
    "0": "𝟘", "1": "𝟙", "2": "𝟚", "3": "𝟛", "4": "𝟜",
    "5": "𝟝", "6": "𝟞", "7": "𝟟", "8": "𝟠", "9": "𝟡",
}  # fmt: skip


def text_may_contain_math(text: str) -> bool:
    """
    checks whether text may hold math worth handing to the typesetter.

    Any two unescaped dollar signs count as math, so prices such as
    "$5 and $10" are reported too; a single unescaped dollar never is.

    Args:
        text: message text

    Returns:
        True if text contains a math delimiter or environment
    """
    if not text:
        return False
    if MATH_HINT_PATTERN.search(text):
        return True
    return len(UNESCAPED_DOLLAR_PATTERN.findall(text)) >= 2


def normalize_math_environments(text: str) -> str:
    """
    rewrites LaTeX environments and commands into forms the typesetter handles.

    Args:
        text: text with code, links and images already protected

    Returns:
        normalized text
    """
    text = re.sub(
        r"\\mathds\{([A-Z0-9])\}",
        lambda m: MATHDS_MAP.get(m.group(1), m.group(0)),
        text,
    )

    # line-anchored environments become display math
    text = re.sub(
        r"^\s*\\begin\{align\*\}", r"\\[\n\\begin{align*}", text, flags=re.MULTILINE
    )
    text = re.sub(
        r"\\end\{align\*\}\s*$", r"\\end{align*}\n\\]", text, flags=re.MULTILINE
    )

    text = re.sub(r"\\label\{eq:.*?\}", "", text)

    text = re.sub(
        r"^\s*\\begin\{equation\}", r"\\[\n\\begin{equation}", text, flags=re.MULTILINE
    )
    text = re.sub(
        r"\\end\{equation\}\s*$", r"\\end{equation}\n\\]", text, flags=re.MULTILINE
    )

    text = re.sub(
        r"(\\\[\s*)?\$*\\boxed\{([\s\S]+)\}\$*(\s*\\\])?",
        lambda m: "\\[\\boxed{" + m.group(2) + "}\\]",
        text,
    )

    return re.sub(r"\\textsc\{([^}]+)\}", lambda m: m.group(1).upper(), text)


def process_math_span(
    span: str, container_class: str = DISPLAY_CONTAINER_CLASS
) -> str:
    """
    applies fixups scoped to a single math span.

    Args:
        span: matched math span including its delimiters
        container_class: CSS class of the display math container

    Returns:
        processed span, wrapped in a container div for display math
    """
    span = re.sub(r"\\div\b", " ÷ ", span)
    span = re.sub(r"\\\[\s*(.+?)\s*\\+\]", lambda m: f"\\[ {m.group(1)} \\]", span)
    span = re.sub(r"\\\(\s*(.+?)\s*\\）", lambda m: f"\\( {m.group(1)} \\)", span)
    span = re.sub(r"\\\(\s*(.+?)\s*\\，", lambda m: f"\\( {m.group(1)} \\)，", span)
    span = span.replace("<", "&lt;").replace(">", "&gt;")
    # %% belongs to placeholder tokens of earlier regions
    span = re.sub(r"(?<!%)%(?!%)\s", "", span)

    span = re.sub(r"\\bm\{([^{}]+)\}", r"\\boldsymbol{\1}", span)
    span = re.sub(r"\\bm(?![A-Za-z])\s*(\\[A-Za-z]+|[A-Za-z0-9])", r"\\boldsymbol{\1}", span)

    # avoids needing the mathtools package
    span = re.sub(r"\\coloneqq\b", r"\\mathrel{:=}", span)

    if span.startswith("(") and span.endswith(")"):
        logger.warning("inline math should use \\(...\\), got: %s", span)

    if span.startswith("\\[") or span.startswith("$$"):
        span = f'<div class="{container_class}">{span}</div>'

    return span


def extract_math(
    text: str,
    regions: ProtectedRegions,
    container_class: str = DISPLAY_CONTAINER_CLASS,
) -> str:
    """
    replaces math spans with placeholders, storing their processed form.

    Code and links protected earlier that fall inside a span are put back,
    escaped, into the stored span: math is only restored after rendering.

    Args:
        text: normalized text
        regions: accumulator for this run
        container_class: CSS class of the display math container

    Returns:
        text with math spans replaced by placeholder tokens
    """
    escape = functools.partial(html.escape, quote=False)

    def transform(span: str) -> str:
        span = process_math_span(span, container_class)
        for category in NESTED_CATEGORIES:
            span = restore(span, category, regions, transform=escape)
        return span

    return extract(text, MATH_PATTERN, Category.MATH, regions, transform=transform)


def restore_math(rendered: str, regions: ProtectedRegions) -> str:
    """restores processed math spans into rendered HTML."""
    return restore(rendered, Category.MATH, regions)
