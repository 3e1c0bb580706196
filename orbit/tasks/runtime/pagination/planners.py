"""Fetch planning: page size and page budget.

This module provides the FetchPlanner class that decides, before any request
is issued, how large pages should be and how many of them may be fetched.
"""

from __future__ import annotations

import math

from ...core.config import PaginationLimits
from .definitions import FetchPlan, require_positive_int
from .telemetry import log_fetch_plan


class FetchPlanner:
    """Plans page sizing for a paginated fetch.

    A small item limit shrinks the page budget so callers wanting a handful
    of items never trigger more requests than those items need.
    """

    def __init__(self, limits: PaginationLimits | None = None) -> None:
        self._limits = limits or PaginationLimits()

    @property
    def limits(self) -> PaginationLimits:
        return self._limits

    def plan(
        self,
        *,
        item_limit: int | None = None,
        max_pages: int | None = None,
        page_size: int | None = None,
        resource: str = "unknown",
    ) -> FetchPlan:
        """Plan a fetch.

        Args:
            item_limit: Maximum items the caller wants (None = all)
            max_pages: Page budget requested by the caller
            page_size: Page size requested by the caller

        Returns:
            FetchPlan

        Raises:
            InvalidRequestError: If any argument is not a positive integer
        """
        require_positive_int("item_limit", item_limit)
        require_positive_int("max_pages", max_pages)
        require_positive_int("page_size", page_size)

        limits = self._limits
        effective_page_size = min(page_size or limits.default_page_size, limits.max_page_size)
        budget = min(max_pages or limits.default_max_pages, limits.absolute_max_pages)

        ceiling = budget
        if item_limit is not None:
            # Limit fits in one page -> budget of 1
            needed = math.ceil(item_limit / effective_page_size)
            budget = max(1, min(budget, needed))

        plan = FetchPlan(
            page_size=effective_page_size,
            max_pages=budget,
            item_limit=item_limit,
            page_ceiling=ceiling,
        )
        log_fetch_plan(resource=resource, plan=plan, requested_max_pages=max_pages)
        return plan
