"""Structured logging for pagination operations.

This module provides telemetry hooks for paginated fetches, emitting
structured logs for observability.
"""

from __future__ import annotations

import logging

from ...models.results import ListResult
from .definitions import FetchPlan

logger = logging.getLogger(__name__)


def log_fetch_plan(*, resource: str, plan: FetchPlan, requested_max_pages: int | None) -> None:
    """Log the sizing decision made before the first request."""
    logger.debug(
        "fetch_plan_created",
        extra={
            "resource": resource,
            "page_size": plan.page_size,
            "max_pages": plan.max_pages,
            "requested_max_pages": requested_max_pages,
            "item_limit": plan.item_limit,
        },
    )


def log_page_fetched(
    *,
    resource: str,
    page_index: int,
    page_items: int,
    total_items: int,
    has_cursor: bool,
    latency_ms: float | None = None,
) -> None:
    """Log completion of a single page.

    Args:
        resource: Resource being listed
        page_index: Zero-based index of the page
        page_items: Items on this page
        total_items: Items collected so far, this page included
        has_cursor: Whether the page returned a next cursor
        latency_ms: Latency in milliseconds, retries included
    """
    logger.debug(
        "page_fetched",
        extra={
            "resource": resource,
            "page_index": page_index,
            "page_items": page_items,
            "total_items": total_items,
            "has_cursor": has_cursor,
            "latency_ms": latency_ms,
        },
    )


def log_pagination_complete(
    *,
    resource: str,
    pages_fetched: int,
    result: ListResult,
    total_latency_ms: float | None = None,
) -> None:
    """Log the outcome of a paginated fetch."""
    truncation = result.truncation
    payload = {
        "resource": resource,
        "pages_fetched": pages_fetched,
        "returned_count": result.count,
        "truncated": truncation is not None,
        "reason": truncation.reason.value if truncation else None,
        "total_latency_ms": total_latency_ms,
    }
    if truncation is not None:
        logger.info("pagination_truncated", extra=payload)
    else:
        logger.debug("pagination_complete", extra=payload)


def log_cursor_stalled(*, resource: str, cursor: str, page_index: int) -> None:
    """Log an upstream cursor that did not advance."""
    logger.warning(
        "pagination_cursor_stalled",
        extra={"resource": resource, "cursor": cursor, "page_index": page_index},
    )


def log_page_error(
    *,
    resource: str,
    page_index: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a page that failed after retries."""
    logger.error(
        "page_error",
        extra={
            "resource": resource,
            "page_index": page_index,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_page_oversized(
    *,
    resource: str,
    page_index: int,
    page_items: int,
    max_page_items: int,
) -> None:
    """Log a page carrying more items than any request asks for."""
    logger.warning(
        "page_oversized",
        extra={
            "resource": resource,
            "page_index": page_index,
            "page_items": page_items,
            "max_page_items": max_page_items,
        },
    )
