"""Core components."""

from .config import CacheTTLs, ClientConfig, PaginationLimits, RetryPolicy
from .enums import Resource, TruncationReason
from .exceptions import (
    InvalidRequestError,
    OrbitError,
    ProviderError,
    RateLimitError,
    ResponseFormatError,
)

__all__ = [
    "CacheTTLs",
    "ClientConfig",
    "PaginationLimits",
    "RetryPolicy",
    "Resource",
    "TruncationReason",
    "OrbitError",
    "ProviderError",
    "RateLimitError",
    "ResponseFormatError",
    "InvalidRequestError",
]
