"""High-level resource accessors."""

from .client import ResourceCaches, TaskAPI, project_cache_key, user_cache_key

__all__ = [
    "ResourceCaches",
    "TaskAPI",
    "project_cache_key",
    "user_cache_key",
]
