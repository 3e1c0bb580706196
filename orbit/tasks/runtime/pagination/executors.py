"""Paginated fetch execution.

This module provides the PaginatedFetcher class that drives a caller-supplied
page-fetch function through a cursor chain, stops on the first applicable
bound and classifies why it stopped.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from time import perf_counter
from typing import Any

from ...core.config import PaginationLimits
from ...core.enums import TruncationReason
from ...models.page import Page
from ...models.results import ListResult, TruncationInfo
from ..retry import RetryExecutor
from .definitions import FetchPlan, PageFetcher, PageRequest
from .planners import FetchPlanner
from .telemetry import (
    log_cursor_stalled,
    log_page_error,
    log_page_fetched,
    log_page_oversized,
    log_pagination_complete,
)


@dataclass(frozen=True)
class _Stop:
    reason: TruncationReason | None
    resumable: bool = True


def served_page_size(page: Page[Any]) -> int | None:
    """Page size upstream actually serves.

    The server-reported size wins. Without one, a page that came back with a
    cursor was a full page, so its item count is the served size.
    """
    if page.page_size:
        return page.page_size
    if page.next_cursor is not None and page.items:
        return len(page.items)
    return None


class PaginatedFetcher:
    """Fetches pages until data, item limit or page budget runs out.

    Stop conditions are checked after every page, before the next request is
    issued, in this order:

    1. item limit reached -> ``max_items`` (unless exactly the limit was
       collected and upstream reliably signalled end of data)
    2. empty page -> complete
    3. no next cursor -> complete; for sources whose end-of-data signal is
       unreliable a non-empty cursorless page is ``page_size_limit``
    4. page budget spent with a cursor outstanding -> ``max_pages``; the
       budget is re-derived from the page size upstream serves
    5. cursor did not advance -> ``max_pages``

    A page holding more than ``max_page_size`` items is cut to that size and
    the result is reported as ``page_size_limit`` if nothing else stopped it.
    The result is built once, from the collected pages, after the loop ends.
    """

    def __init__(
        self,
        limits: PaginationLimits | None = None,
        retry: RetryExecutor | None = None,
    ) -> None:
        """Initialize paginated fetcher.

        Args:
            limits: Pagination bounds used for planning
            retry: Retry executor wrapping each page call
        """
        self._planner = FetchPlanner(limits)
        self._retry = retry or RetryExecutor()

    @property
    def limits(self) -> PaginationLimits:
        return self._planner.limits

    async def fetch_all(
        self,
        fetch_page: PageFetcher,
        *,
        item_limit: int | None = None,
        max_pages: int | None = None,
        page_size: int | None = None,
        resource: str = "unknown",
        deadline: float | None = None,
        cursor: str | None = None,
    ) -> ListResult[Any]:
        """Fetch pages and return a ListResult.

        Args:
            fetch_page: Async function taking a PageRequest and returning a Page
            item_limit: Maximum number of items to return (None = all)
            max_pages: Page budget (None = configured default)
            page_size: Page size (None = configured default)
            resource: Label used in log records
            deadline: Event-loop time after which retries stop
            cursor: Cursor to resume from (a previous result's ``next_cursor``)

        Returns:
            ListResult with truncation set when fetching stopped early and
            ``next_cursor`` set when the listing can be resumed

        Raises:
            InvalidRequestError: Invalid limits, raised before any request
            ProviderError: Upstream failure after retries
        """
        plan = self._planner.plan(
            item_limit=item_limit, max_pages=max_pages, page_size=page_size, resource=resource
        )

        start = perf_counter()
        pages: list[Page[Any]] = []
        seen_cursors: set[str] = {cursor} if cursor else set()
        fetched = 0
        oversized = False
        max_page_items = self.limits.max_page_size

        while True:
            request = PageRequest(
                page_size=plan.request_size(fetched), cursor=cursor, page_index=len(pages)
            )
            page_start = perf_counter()
            page = await self._fetch_page(fetch_page, request, resource, deadline)
            if len(page.items) > max_page_items:
                log_page_oversized(
                    resource=resource,
                    page_index=request.page_index,
                    page_items=len(page.items),
                    max_page_items=max_page_items,
                )
                page = page.model_copy(update={"items": page.items[:max_page_items]})
                oversized = True
            pages.append(page)
            fetched += len(page.items)
            log_page_fetched(
                resource=resource,
                page_index=request.page_index,
                page_items=len(page.items),
                total_items=fetched,
                has_cursor=page.next_cursor is not None,
                latency_ms=(perf_counter() - page_start) * 1000.0,
            )

            stop = self._check_stop(plan, page, fetched, len(pages), seen_cursors, resource)
            if stop is not None:
                break

            cursor = page.next_cursor
            seen_cursors.add(cursor)

        if oversized:
            stop = _Stop(stop.reason or TruncationReason.PAGE_SIZE_LIMIT, resumable=False)
        result = self._build_result(plan, pages, stop)
        log_pagination_complete(
            resource=resource,
            pages_fetched=len(pages),
            result=result,
            total_latency_ms=(perf_counter() - start) * 1000.0,
        )
        return result

    async def _fetch_page(
        self,
        fetch_page: PageFetcher,
        request: PageRequest,
        resource: str,
        deadline: float | None,
    ) -> Page[Any]:
        try:
            page = await self._retry.execute(
                partial(fetch_page, request),
                deadline=deadline,
                operation=f"{resource}:page",
            )
        except Exception as e:
            log_page_error(
                resource=resource,
                page_index=request.page_index,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

        if not isinstance(page, Page):
            raise TypeError(f"page fetch for {resource} returned {type(page).__name__}, not Page")
        return page

    def _check_stop(
        self,
        plan: FetchPlan,
        page: Page[Any],
        fetched: int,
        pages_fetched: int,
        seen_cursors: set[str],
        resource: str,
    ) -> _Stop | None:
        next_cursor = page.next_cursor

        if plan.item_limit is not None and fetched >= plan.item_limit:
            exhausted = next_cursor is None and page.end_of_data_reliable
            if fetched == plan.item_limit and exhausted:
                return _Stop(None)
            return _Stop(TruncationReason.MAX_ITEMS)

        if not page.items:
            return _Stop(None)

        if next_cursor is None:
            if page.end_of_data_reliable:
                return _Stop(None)
            return _Stop(TruncationReason.PAGE_SIZE_LIMIT)

        stalled = next_cursor in seen_cursors
        if pages_fetched >= plan.budget_for(served_page_size(page)):
            return _Stop(TruncationReason.MAX_PAGES, resumable=not stalled)

        if stalled:
            log_cursor_stalled(resource=resource, cursor=next_cursor, page_index=pages_fetched - 1)
            return _Stop(TruncationReason.MAX_PAGES, resumable=False)

        return None

    def _build_result(
        self,
        plan: FetchPlan,
        pages: list[Page[Any]],
        stop: _Stop,
    ) -> ListResult[Any]:
        items = [item for page in pages for item in page.items]
        fetched = len(items)
        if plan.item_limit is not None:
            items = items[: plan.item_limit]

        if stop.reason is None:
            return ListResult(items=tuple(items))

        truncation = TruncationInfo(
            reason=stop.reason,
            returned_count=len(items),
            page_size=served_page_size(pages[0]) or plan.page_size,
            limit=plan.item_limit,
        )
        # Offered only when no fetched item was dropped
        next_cursor = None
        if stop.resumable and len(items) == fetched:
            next_cursor = pages[-1].next_cursor
        return ListResult(items=tuple(items), truncation=truncation, next_cursor=next_cursor)
