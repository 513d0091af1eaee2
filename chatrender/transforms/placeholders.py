"""placeholder protection for regions that must survive the pipeline unchanged."""

import logging
import re
from typing import Callable, Optional, Union

from chatrender.core.models import Category, ProtectedRegions

logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
INLINE_CODE_PATTERN = re.compile(r"`[^`\n]+`")
IMAGE_TAG_PATTERN = re.compile(r'<span class="image-tag".*?</span>')

_TOKEN_PATTERNS = {
    category: re.compile(rf"%%{category.value}_(\d+)%%") for category in Category
}


def link_pattern(excluded_scheme: str = "cite") -> re.Pattern[str]:
    """returns the Markdown link pattern, skipping links in excluded_scheme."""
    return re.compile(
        rf"\[([^\]]+)\]\((?!{re.escape(excluded_scheme)}:)([^)]+)\)"
    )


def extract(
    text: str,
    pattern: Union[str, re.Pattern[str]],
    category: Category,
    regions: ProtectedRegions,
    transform: Optional[Callable[[str], str]] = None,
) -> str:
    """
    replaces every match of pattern with an indexed placeholder token.

    Args:
        text: text to protect
        pattern: category-specific pattern
        category: region category, used as the token tag
        regions: accumulator for this run; matches are appended in order
        transform: optional function applied to a match before it is stored

    Returns:
        text with matches replaced by tokens
    """
    store = regions.store(category)

    def replacer(match: re.Match[str]) -> str:
        original = match.group(0)
        store.append(transform(original) if transform else original)
        return category.token(len(store) - 1)

    return re.sub(pattern, replacer, text)


def restore(
    text: str,
    category: Category,
    regions: ProtectedRegions,
    transform: Optional[Callable[[str], str]] = None,
) -> str:
    """
    replaces placeholder tokens of a category with their stored text.

    Tokens whose index is outside the store are left in place.

    Args:
        text: text containing tokens
        category: region category to restore
        regions: accumulator the tokens were created with
        transform: optional function applied to stored text before insertion

    Returns:
        text with tokens restored
    """
    store = regions.store(category)
    if not store:
        return text

    def replacer(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(store):
            logger.debug("no stored region for placeholder %s", match.group(0))
            return match.group(0)
        return transform(store[index]) if transform else store[index]

    return _TOKEN_PATTERNS[category].sub(replacer, text)


def extract_code_blocks(text: str, regions: ProtectedRegions) -> str:
    """protects fenced code blocks."""
    return extract(text, CODE_BLOCK_PATTERN, Category.CODE_BLOCK, regions)


def extract_inline_code(text: str, regions: ProtectedRegions) -> str:
    """protects single-line inline code spans."""
    return extract(text, INLINE_CODE_PATTERN, Category.INLINE_CODE, regions)


def extract_images(text: str, regions: ProtectedRegions) -> str:
    """protects embedded image tags so attributes are never read as math."""
    return extract(text, IMAGE_TAG_PATTERN, Category.IMAGE, regions)


def extract_links(
    text: str, regions: ProtectedRegions, excluded_scheme: str = "cite"
) -> str:
    """protects Markdown links other than citation links."""
    return extract(text, link_pattern(excluded_scheme), Category.LINK, regions)


def restore_code_blocks(text: str, regions: ProtectedRegions) -> str:
    """restores fenced code blocks."""
    return restore(text, Category.CODE_BLOCK, regions)


def restore_inline_code(text: str, regions: ProtectedRegions) -> str:
    """restores inline code spans."""
    return restore(text, Category.INLINE_CODE, regions)


def restore_images(text: str, regions: ProtectedRegions) -> str:
    """restores image tags."""
    return restore(text, Category.IMAGE, regions)


def restore_links(text: str, regions: ProtectedRegions) -> str:
    """restores Markdown links."""
    return restore(text, Category.LINK, regions)
