"""Orbit Tasks - Async client for a task-management REST API with truncation-aware listing."""

from .api import ResourceCaches, TaskAPI
from .core import (
    CacheTTLs,
    ClientConfig,
    InvalidRequestError,
    OrbitError,
    PaginationLimits,
    ProviderError,
    RateLimitError,
    Resource,
    ResponseFormatError,
    RetryPolicy,
    TruncationReason,
)
from .models import ListResult, Page, PageMeta, TruncationInfo
from .runtime import (
    PageRequest,
    PaginatedFetcher,
    RetryExecutor,
    TruncationAggregator,
    TTLCache,
)

__version__ = "0.1.0"

__all__ = [
    # API
    "TaskAPI",
    "ResourceCaches",
    # Config
    "ClientConfig",
    "RetryPolicy",
    "PaginationLimits",
    "CacheTTLs",
    # Enums
    "Resource",
    "TruncationReason",
    # Exceptions
    "OrbitError",
    "ProviderError",
    "RateLimitError",
    "ResponseFormatError",
    "InvalidRequestError",
    # Models
    "ListResult",
    "TruncationInfo",
    "Page",
    "PageMeta",
    # Runtime
    "PageRequest",
    "PaginatedFetcher",
    "RetryExecutor",
    "TruncationAggregator",
    "TTLCache",
]
