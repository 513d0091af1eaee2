"""text transforms applied to a message before and after markdown rendering."""

from chatrender.transforms.bold import fix_bold_formatting
from chatrender.transforms.citations import group_citations, normalize_citations
from chatrender.transforms.latex import (
    extract_math,
    normalize_math_environments,
    restore_math,
    text_may_contain_math,
)
from chatrender.transforms.think import transform_think_blocks

__all__ = [
    "extract_math",
    "fix_bold_formatting",
    "group_citations",
    "normalize_citations",
    "normalize_math_environments",
    "restore_math",
    "text_may_contain_math",
    "transform_think_blocks",
]
