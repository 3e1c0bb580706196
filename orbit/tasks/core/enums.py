"""Core enumerations shared by the pagination, caching and REST layers.

Architecture:
    String enums allow easy serialization and direct comparison with the
    values the upstream API and callers use.

Key Types:
    - TruncationReason: Why a list result stopped short of the full data set
    - Resource: Upstream list endpoints and their cache key prefixes
"""

from enum import Enum


class TruncationReason(str, Enum):
    """Why a paginated fetch stopped before upstream data was exhausted."""

    PAGE_SIZE_LIMIT = "page_size_limit"  # short/cursorless page from an unreliable source
    MAX_ITEMS = "max_items"  # caller's item cap was hit first
    MAX_PAGES = "max_pages"  # page-count safety cap was hit first

    def __str__(self) -> str:
        return self.value


class Resource(str, Enum):
    """Upstream list resources.

    The value doubles as the URL path segment and as the cache key prefix.
    """

    WORKSPACES = "workspaces"
    USERS = "users"
    PROJECTS = "projects"
    TASKS = "tasks"
    COMMENTS = "comments"
    CUSTOM_FIELDS = "custom-fields"
    RECURRING_TASKS = "recurring-tasks"
    SCHEDULES = "schedules"
    STATUSES = "statuses"

    @property
    def path(self) -> str:
        """REST path for the list endpoint."""
        return f"/{self.value}"

    def __str__(self) -> str:
        return self.value
