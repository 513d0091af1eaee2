"""tests for pipeline data models."""

from chatrender.core.models import (
    Category,
    CitationMarker,
    ProtectedRegion,
    ProtectedRegions,
    RenderOptions,
)


def test_category_token_format() -> None:
    """tokens use only uppercase letters, digits and underscores."""
    assert Category.CODE_BLOCK.token(0) == "%%CODE_BLOCK_0%%"
    assert Category.MATH.token(12) == "%%MATH_12%%"


def test_protected_regions_start_empty() -> None:
    """fresh accumulator has an empty store per category."""
    regions = ProtectedRegions()
    assert len(regions) == 0
    assert all(regions.store(category) == [] for category in Category)


def test_protected_regions_lists_regions() -> None:
    """lists stored regions with category and index."""
    regions = ProtectedRegions()
    regions.store(Category.LINK).extend(["[a](b)", "[c](d)"])
    assert len(regions) == 2
    assert regions.regions() == [
        ProtectedRegion(Category.LINK, 0, "[a](b)"),
        ProtectedRegion(Category.LINK, 1, "[c](d)"),
    ]


def test_separate_runs_do_not_share_stores() -> None:
    """each accumulator owns its own stores."""
    first = ProtectedRegions()
    first.store(Category.MATH).append("$x$")
    assert ProtectedRegions().store(Category.MATH) == []


def test_citation_marker_render() -> None:
    """renders marker in link syntax."""
    assert CitationMarker(3, "a%20b").render() == "[3](cite:a%20b)"


def test_render_options_defaults() -> None:
    """uses safe defaults."""
    options = RenderOptions()
    assert options.citation_scheme == "cite"
    assert options.citation_separator == "｜"
    assert options.math_container_class == "math-display-container"
    assert options.breaks is True
    assert options.allow_html is False
