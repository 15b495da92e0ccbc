"""Query specification consumed by the explorer's query engine."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SortField = Literal["title", "author", "price", "rating", "date"]
SortOrder = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = ("title", "author", "price", "rating", "date")


class PriceRange(BaseModel):
    """Inclusive price bounds. ``None`` means the bound is unset; ``0`` is a real bound."""

    min: Optional[float] = None
    max: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_active(self) -> bool:
        return self.min is not None or self.max is not None


class QuerySpec(BaseModel):
    term: str = ""
    genre: Optional[str] = None
    price_range: Optional[PriceRange] = Field(None, alias="priceRange")
    rating: Optional[float] = None
    # Kept as plain strings so unknown values fall back instead of failing.
    sort_by: str = Field("title", alias="sortBy")
    sort_order: str = Field("asc", alias="sortOrder")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def normalized_term(self) -> str:
        return self.term.strip().lower()


# Structured filter keys accepted by ExplorerController.set_filters().
FILTER_FIELDS: tuple[str, ...] = ("genre", "price_range", "rating", "sort_by", "sort_order")
