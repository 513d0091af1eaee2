"""Data models for the message rendering pipeline."""

from dataclasses import dataclass, field
from enum import Enum


class Category(Enum):
    """kind of protected region; the value is the placeholder tag."""

    CODE_BLOCK = "CODE_BLOCK"
    INLINE_CODE = "INLINE_CODE"
    LINK = "LINK"
    IMAGE = "IMAGE"
    MATH = "MATH"

    def token(self, index: int) -> str:
        """returns the placeholder token for the region at index."""
        return f"%%{self.value}_{index}%%"


@dataclass
class ProtectedRegion:
    """A substring shielded from the pipeline until restoration."""

    category: Category
    index: int
    original_text: str


@dataclass
class ProtectedRegions:
    """
    Per-run accumulator of protected regions, one store per category.

    A fresh instance is created for every message; extraction appends to it
    and restoration only reads from it.
    """

    stores: dict[Category, list[str]] = field(
        default_factory=lambda: {category: [] for category in Category}
    )

    def store(self, category: Category) -> list[str]:
        """returns the mutable store for a category."""
        return self.stores.setdefault(category, [])

    def regions(self) -> list[ProtectedRegion]:
        """returns every stored region in category then index order."""
        return [
            ProtectedRegion(category, index, text)
            for category, texts in self.stores.items()
            for index, text in enumerate(texts)
        ]

    def __len__(self) -> int:
        return sum(len(texts) for texts in self.stores.values())


@dataclass
class CitationMarker:
    """Numbered reference link of the form [number](scheme:payload)."""

    number: int
    raw_payload: str
    scheme: str = "cite"

    def render(self) -> str:
        """returns the marker in Markdown link syntax."""
        return f"[{self.number}]({self.scheme}:{self.raw_payload})"


@dataclass
class RenderOptions:
    """options controlling how a message is rendered."""

    citation_scheme: str = "cite"
    citation_separator: str = "｜"
    math_container_class: str = "math-display-container"
    breaks: bool = True
    allow_html: bool = False
    text_fragment_citations: bool = True
