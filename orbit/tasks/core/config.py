"""Client configuration and shared defaults.

This module centralizes the retry, pagination and cache constants so that
the runtime components receive them at construction time instead of
hardcoding them. All durations are in seconds.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_BASE_URL = "https://api.usemotion.com/v1"
DEFAULT_TIMEOUT = 30.0

# Retry
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_BACKOFF = 1.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_JITTER_FACTOR = 0.1
DEFAULT_MAX_BACKOFF = 30.0

# Pagination
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
DEFAULT_MAX_PAGES = 5
# Hard ceiling regardless of what callers ask for (infinite loop protection)
ABSOLUTE_MAX_PAGES = 50
DEFAULT_ITEM_LIMIT = 50
MAX_ITEM_LIMIT = 500
MAX_SEARCH_RESULTS = 100

# Cache TTLs
WORKSPACE_TTL = 600.0
USER_TTL = 600.0
PROJECT_TTL = 300.0
DEFAULT_CACHE_SIZE = 1000

API_KEY_ENV = "ORBIT_API_KEY"
BASE_URL_ENV = "ORBIT_BASE_URL"


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for upstream calls.

    Attributes:
        max_attempts: Total attempts including the first one
        initial_backoff: Backoff before the second attempt
        multiplier: Exponential growth factor per attempt
        jitter_factor: Jitter is drawn from [0, backoff * jitter_factor)
        max_backoff: Upper bound for a computed delay
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF
    multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    jitter_factor: float = DEFAULT_JITTER_FACTOR
    max_backoff: float = DEFAULT_MAX_BACKOFF

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy max_attempts must be >= 1")
        if self.initial_backoff < 0 or self.max_backoff < 0:
            raise ValueError("RetryPolicy backoff values cannot be negative")
        if self.multiplier < 1:
            raise ValueError("RetryPolicy multiplier must be >= 1")
        if not 0 <= self.jitter_factor <= 1:
            raise ValueError("RetryPolicy jitter_factor must be within [0, 1]")


@dataclass(frozen=True)
class PaginationLimits:
    """Page size, page count and item limit bounds.

    Attributes:
        default_page_size: Page size requested when the caller gives none
        max_page_size: Largest page size ever requested
        default_max_pages: Page budget when the caller gives none
        absolute_max_pages: Ceiling on any page budget
        default_item_limit: Item limit accessors apply when none is given
        max_item_limit: Largest item limit accessors accept
    """

    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE
    default_max_pages: int = DEFAULT_MAX_PAGES
    absolute_max_pages: int = ABSOLUTE_MAX_PAGES
    default_item_limit: int = DEFAULT_ITEM_LIMIT
    max_item_limit: int = MAX_ITEM_LIMIT

    def __post_init__(self) -> None:
        if self.default_page_size < 1 or self.max_page_size < 1:
            raise ValueError("PaginationLimits page sizes must be >= 1")
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        if self.default_max_pages < 1 or self.absolute_max_pages < 1:
            raise ValueError("PaginationLimits page counts must be >= 1")
        if self.default_item_limit < 1 or self.max_item_limit < self.default_item_limit:
            raise ValueError("PaginationLimits item limits are inconsistent")


@dataclass(frozen=True)
class CacheTTLs:
    """Per-resource cache lifetimes.

    Reference data (workspaces, users) changes rarely and lives longer than
    project lists, which every project mutation invalidates.
    """

    workspaces: float = WORKSPACE_TTL
    users: float = USER_TTL
    projects: float = PROJECT_TTL

    def __post_init__(self) -> None:
        for name in ("workspaces", "users", "projects"):
            if getattr(self, name) <= 0:
                raise ValueError(f"CacheTTLs.{name} must be positive")


@dataclass(frozen=True)
class ClientConfig:
    """Everything needed to build a TaskAPI."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    pagination: PaginationLimits = field(default_factory=PaginationLimits)
    ttls: CacheTTLs = field(default_factory=CacheTTLs)
    cache_size: int = DEFAULT_CACHE_SIZE

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("api_key is required")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides) -> ClientConfig:
        """Build config from ``ORBIT_API_KEY`` and ``ORBIT_BASE_URL``.

        Raises:
            ValueError: If the API key variable is missing or empty
        """
        env = os.environ if environ is None else environ
        api_key = env.get(API_KEY_ENV, "")
        if not api_key:
            raise ValueError(f"{API_KEY_ENV} environment variable is required")
        base_url = env.get(BASE_URL_ENV) or DEFAULT_BASE_URL
        return cls(api_key=api_key, base_url=base_url, **overrides)
