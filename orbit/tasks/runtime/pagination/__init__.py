"""Cursor pagination with truncation tracking.

This module provides the paginated fetch layer every list accessor funnels
through: it drives cursor chains, bounds memory and request count, and
reports why a list stopped short.

Architecture:
    The pagination layer consists of:
    - definitions.py: Request/plan structures (PageRequest, FetchPlan)
    - planners.py: Adaptive sizing decided before the first request
    - executors.py: PaginatedFetcher (fetches pages, classifies the stop)
    - aggregation.py: TruncationAggregator (merges several results)
    - telemetry.py: Structured logging

Usage:
    Accessors build a page-fetch closure mapping a PageRequest to one HTTP
    call and hand it to PaginatedFetcher.fetch_all(). Results from several
    sub-scopes are combined with TruncationAggregator.merge().
"""

from __future__ import annotations

from .aggregation import TruncationAggregator
from .definitions import FetchPlan, PageFetcher, PageRequest, require_positive_int
from .executors import PaginatedFetcher
from .planners import FetchPlanner

__all__ = [
    "FetchPlan",
    "FetchPlanner",
    "PageFetcher",
    "PageRequest",
    "PaginatedFetcher",
    "TruncationAggregator",
    "require_positive_int",
]
