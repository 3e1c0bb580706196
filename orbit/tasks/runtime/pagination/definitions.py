"""Pagination request and plan structures.

This module defines the data structures passed between the planner, the
paginated fetcher and caller-supplied page-fetch functions.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from ...core.exceptions import InvalidRequestError
from ...models.page import Page


@dataclass(frozen=True)
class PageRequest:
    """Request for a single page.

    Attributes:
        page_size: Number of items to ask for (always >= 1)
        cursor: Cursor returned by the previous page (None for the first)
        page_index: Zero-based index of this page in the fetch
    """

    page_size: int
    cursor: str | None = None
    page_index: int = 0


PageFetcher = Callable[[PageRequest], Awaitable[Page[Any]]]


@dataclass(frozen=True)
class FetchPlan:
    """Sizing decisions made before the first request.

    Attributes:
        page_size: Page size to request
        max_pages: Number of pages that may be requested
        item_limit: Caller's item cap (None = unbounded)
        page_ceiling: Page budget before adaptive sizing shrank it
    """

    page_size: int
    max_pages: int
    item_limit: int | None = None
    page_ceiling: int | None = None

    def budget_for(self, served_page_size: int | None) -> int:
        """Page budget once upstream reports the page size it actually serves.

        Upstream may serve smaller pages than requested. The budget then
        grows to what the item limit needs, never past ``page_ceiling``.
        """
        if self.item_limit is None or not served_page_size or served_page_size >= self.page_size:
            return self.max_pages
        ceiling = self.page_ceiling or self.max_pages
        needed = math.ceil(self.item_limit / served_page_size)
        return max(self.max_pages, min(ceiling, needed))

    def request_size(self, fetched: int) -> int:
        """Page size for the next request given ``fetched`` items so far.

        Never returns zero or a negative number: upstream APIs read those as
        "no limit". A non-positive remainder falls back to a full page.
        """
        if self.item_limit is None:
            return self.page_size
        remaining = self.item_limit - fetched
        if remaining <= 0:
            return self.page_size
        return min(self.page_size, remaining)


def require_positive_int(name: str, value: Any, *, optional: bool = True) -> None:
    """Reject non-integer or non-positive limits.

    Raises:
        InvalidRequestError: If ``value`` is not a positive int (bools rejected)
    """
    if value is None and optional:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidRequestError(
            f"{name} must be a positive integer, got {value!r}", field=name, value=value
        )
