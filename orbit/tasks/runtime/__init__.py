"""Runtime components: retry, pagination, caching and REST transport."""

from .cache import CacheStats, TTLCache
from .pagination import (
    FetchPlan,
    FetchPlanner,
    PageRequest,
    PaginatedFetcher,
    TruncationAggregator,
)
from .retry import RetryExecutor, RetryState, is_retryable

__all__ = [
    "CacheStats",
    "FetchPlan",
    "FetchPlanner",
    "PageRequest",
    "PaginatedFetcher",
    "RetryExecutor",
    "RetryState",
    "TTLCache",
    "TruncationAggregator",
    "is_retryable",
]
