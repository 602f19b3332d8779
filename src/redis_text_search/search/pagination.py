"""Pagination of matched ids and hydration of one page through a finder."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from redis_text_search.adapters.finders import WINDOW_OPTION, Finder


logger = logging.getLogger(__name__)


class Pager(BaseModel):
    """Page window over ``total`` candidates.

    Page numbers and sizes below 1 are clamped to 1.
    """

    model_config = ConfigDict(frozen=True)

    page: int = 1
    per_page: int = 30
    total: int = Field(default=0, ge=0)

    @classmethod
    def create(cls, page: int | None, per_page: int, total: int) -> Pager:
        return cls(page=max(int(page or 1), 1), per_page=max(int(per_page), 1), total=total)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page)

    @property
    def previous_page(self) -> int | None:
        return self.page - 1 if self.page > 1 else None

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.page < self.total_pages else None

    @property
    def out_of_bounds(self) -> bool:
        return self.page > self.total_pages

    def window(self, candidates: Sequence[Any]) -> list[Any]:
        return list(candidates[self.offset : self.offset + self.per_page])


class SearchPage(BaseModel):
    """One page of hydrated search results plus its pagination metadata."""

    model_config = ConfigDict(frozen=True)

    items: list[Any] = Field(default_factory=list)
    pager: Pager

    @property
    def page(self) -> int:
        return self.pager.page

    @property
    def per_page(self) -> int:
        return self.pager.per_page

    @property
    def total(self) -> int:
        return self.pager.total

    @property
    def offset(self) -> int:
        return self.pager.offset

    @property
    def total_pages(self) -> int:
        return self.pager.total_pages

    @property
    def previous_page(self) -> int | None:
        return self.pager.previous_page

    @property
    def next_page(self) -> int | None:
        return self.pager.next_page

    @property
    def out_of_bounds(self) -> bool:
        return self.pager.out_of_bounds

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def paginate(
    candidates: Sequence[str],
    finder: Finder,
    *,
    page: int | None,
    per_page: int,
    options: Mapping[str, Any] | None = None,
) -> SearchPage:
    """Hydrate one page of ``candidates``.

    The finder receives only the page's ids. Where the window sits is passed
    as ``options["window"] = {"offset": ..., "limit": ...}`` so it is never
    mistaken for a query offset. An empty window skips the finder.
    """
    pager = Pager.create(page, per_page, len(candidates))
    window = pager.window(candidates)
    if not window:
        return SearchPage(items=[], pager=pager)

    finder_options = {**(options or {}), WINDOW_OPTION: {"offset": pager.offset, "limit": pager.per_page}}
    logger.debug("Hydrating page %d (%d of %d ids)", pager.page, len(window), pager.total)
    return SearchPage(items=list(finder(window, finder_options)), pager=pager)
