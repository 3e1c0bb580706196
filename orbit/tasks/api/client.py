"""TaskAPI facade over the task-management REST API.

The TaskAPI offers list_* accessors for every upstream resource, single
project and task reads, and the mutations. Project mutations invalidate
cached lists. Every call funnels through the same runtime: RetryExecutor per
request, PaginatedFetcher for lists, TruncationAggregator for multi-source
results and one TTLCache per cached resource category.

Architecture:
    This module implements the Facade pattern over the runtime layer.
    TaskAPI handles:
    - Building page-fetch closures (one HTTP call each, unwrapped once)
    - Applying default and maximum item limits
    - Caching reference collections without truncation metadata
    - Invalidating cached lists after mutations
    - Transport lifecycle management

Design Decisions:
    - Caches are owned instances injected at construction, never globals
    - Cached collections are fetched in full and the caller's limit is
      applied on every call, so truncation always reflects the current limit
    - A collection fetch that stopped early is never cached
    - Task lists are never cached; they are fetched with the caller's limit
      so small limits stay cheap
    - Cross-workspace fetches run concurrently and merge in workspace order

See Also:
    - PaginatedFetcher: Cursor chain driver
    - TruncationAggregator: First-truncation-wins merging
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any

from ..core.config import MAX_SEARCH_RESULTS, ClientConfig
from ..core.enums import Resource
from ..core.exceptions import InvalidRequestError
from ..models.page import Page
from ..models.results import ListResult
from ..runtime.cache import TTLCache
from ..runtime.pagination import (
    PageFetcher,
    PageRequest,
    PaginatedFetcher,
    TruncationAggregator,
    require_positive_int,
)
from ..runtime.rest import RESTTransport, parse_page
from ..runtime.retry import RetryExecutor

logger = logging.getLogger(__name__)

SEARCH_SCOPES = ("tasks", "projects", "both")


@dataclass(frozen=True)
class ResourceCaches:
    """One cache per cached resource category."""

    workspaces: TTLCache[list[Any]]
    users: TTLCache[list[Any]]
    projects: TTLCache[list[Any]]

    @classmethod
    def from_config(cls, config: ClientConfig) -> ResourceCaches:
        ttls = config.ttls
        size = config.cache_size
        return cls(
            workspaces=TTLCache(ttls.workspaces, max_size=size, name="workspaces"),
            users=TTLCache(ttls.users, max_size=size, name="users"),
            projects=TTLCache(ttls.projects, max_size=size, name="projects"),
        )

    def clear(self) -> None:
        self.workspaces.invalidate()
        self.users.invalidate()
        self.projects.invalidate()


def project_cache_key(workspace_id: str) -> str:
    return f"projects:workspace:{workspace_id}"


def user_cache_key(workspace_id: str | None) -> str:
    return f"users:workspace:{workspace_id}" if workspace_id else "users:all"


def _matches_text(needle: str, item: Any) -> bool:
    """Case-insensitive substring match on name or description."""
    if not isinstance(item, dict):
        return False
    return needle in (item.get("name") or "").lower() or needle in (
        item.get("description") or ""
    ).lower()


class TaskAPI:
    """High-level accessors for workspaces, projects, tasks and friends.

    Example:
        >>> async with TaskAPI(ClientConfig.from_env()) as api:
        ...     result = await api.list_tasks("ws_1", limit=20)
        ...     if result.truncation:
        ...         print("more tasks exist:", result.truncation.reason)
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: RESTTransport | None = None,
        retry: RetryExecutor | None = None,
        fetcher: PaginatedFetcher | None = None,
        caches: ResourceCaches | None = None,
        aggregator: TruncationAggregator | None = None,
    ) -> None:
        """Initialize the TaskAPI.

        Args:
            config: Client configuration
            transport: Optional transport (built from config if omitted)
            retry: Optional retry executor (built from config.retry if omitted)
            fetcher: Optional paginated fetcher sharing ``retry``
            caches: Optional cache set (built from config.ttls if omitted)
            aggregator: Optional truncation aggregator
        """
        self._config = config
        self._owns_transport = transport is None
        self._transport = transport or RESTTransport(
            config.base_url, api_key=config.api_key, timeout=config.timeout
        )
        self._retry = retry or RetryExecutor(config.retry)
        self._fetcher = fetcher or PaginatedFetcher(config.pagination, self._retry)
        self._caches = caches if caches is not None else ResourceCaches.from_config(config)
        self._aggregator = aggregator or TruncationAggregator()
        self._closed = False

    @property
    def caches(self) -> ResourceCaches:
        return self._caches

    # ----------------------
    # Helpers
    # ----------------------
    def _resolve_limit(self, limit: int | None) -> int:
        """Apply the default limit and reject values above the maximum."""
        limits = self._config.pagination
        if limit is None:
            return limits.default_item_limit
        require_positive_int("limit", limit, optional=False)
        if limit > limits.max_item_limit:
            raise InvalidRequestError(
                f"limit must be <= {limits.max_item_limit}, got {limit}",
                field="limit",
                value=limit,
            )
        return limit

    def _page_fetcher(self, resource: Resource, params: dict[str, Any] | None = None) -> PageFetcher:
        """Build a page-fetch closure performing one GET per page."""

        async def fetch_page(request: PageRequest) -> Page[Any]:
            query = dict(params or {})
            if request.cursor:
                query["cursor"] = request.cursor
            payload = await self._transport.get(resource.path, params=query or None)
            return parse_page(payload, resource)

        return fetch_page

    async def _fetch_collection(
        self, resource: Resource, params: dict[str, Any] | None = None
    ) -> ListResult[Any]:
        """Fetch a whole collection in the largest pages allowed."""
        limits = self._config.pagination
        return await self._fetcher.fetch_all(
            self._page_fetcher(resource, params),
            max_pages=limits.absolute_max_pages,
            page_size=limits.max_page_size,
            resource=str(resource),
        )

    async def _cached_collection(
        self,
        cache: TTLCache[list[Any]],
        key: str,
        resource: Resource,
        params: dict[str, Any] | None = None,
    ) -> ListResult[Any]:
        """Serve a collection from ``cache`` or fetch it.

        Only a complete fetch is stored. A truncated one is returned with its
        truncation notice and fetched again on the next call.
        """
        cached = cache.get(key)
        if cached is not None:
            return ListResult.complete(cached)

        result = await self._fetch_collection(resource, params)
        if result.truncation is None:
            cache.set(key, list(result.items))
        else:
            logger.warning(
                "cached_collection_incomplete",
                extra={
                    "resource": str(resource),
                    "key": key,
                    "reason": result.truncation.reason.value,
                    "returned_count": result.truncation.returned_count,
                },
            )
        return result

    async def _send(self, method: str, path: str, body: Any = None) -> Any:
        """Run one single-object request through the retry executor."""
        if method == "GET":
            call = partial(self._transport.get, path)
        elif method == "POST":
            call = partial(self._transport.post, path, json_body=body)
        elif method == "PATCH":
            call = partial(self._transport.patch, path, json_body=body)
        else:
            call = partial(self._transport.delete, path)
        return await self._retry.execute(call, operation=f"{method} {path}")

    # ----------------------
    # Cached reference data
    # ----------------------
    async def list_workspaces(self) -> list[Any]:
        """All workspaces visible to the API key (cached).

        An incomplete fetch is logged as ``cached_collection_incomplete`` and
        not cached.
        """
        result = await self._cached_collection(
            self._caches.workspaces, "workspaces", Resource.WORKSPACES
        )
        return list(result.items)

    async def list_users(self, workspace_id: str | None = None) -> list[Any]:
        """Users, optionally restricted to one workspace (cached)."""
        params = {"workspaceId": workspace_id} if workspace_id else None
        result = await self._cached_collection(
            self._caches.users, user_cache_key(workspace_id), Resource.USERS, params
        )
        return list(result.items)

    async def list_projects(self, workspace_id: str, limit: int | None = None) -> ListResult[Any]:
        """Projects of a workspace.

        The full collection is cached; ``limit`` and the truncation notice
        are applied per call. A collection that could not be fetched in full
        is reported as truncated and is not cached.
        """
        item_limit = self._resolve_limit(limit)
        projects = await self._cached_projects(workspace_id)
        return self._aggregator.limit(projects, item_limit)

    async def _cached_projects(self, workspace_id: str) -> ListResult[Any]:
        return await self._cached_collection(
            self._caches.projects,
            project_cache_key(workspace_id),
            Resource.PROJECTS,
            {"workspaceId": workspace_id},
        )

    async def get_project(self, project_id: str) -> Any:
        """One project by id."""
        return await self._send("GET", f"{Resource.PROJECTS.path}/{project_id}")

    # ----------------------
    # Paginated lists
    # ----------------------
    async def list_tasks(
        self,
        workspace_id: str,
        project_id: str | None = None,
        limit: int | None = None,
        *,
        name: str | None = None,
        cursor: str | None = None,
    ) -> ListResult[Any]:
        """Tasks of a workspace, optionally of one project or matching ``name``.

        Pass a previous result's ``next_cursor`` as ``cursor`` to continue
        where it stopped.
        """
        item_limit = self._resolve_limit(limit)
        params: dict[str, Any] = {"workspaceId": workspace_id}
        if project_id:
            params["projectId"] = project_id
        if name:
            params["name"] = name
        return await self._fetcher.fetch_all(
            self._page_fetcher(Resource.TASKS, params),
            item_limit=item_limit,
            resource=str(Resource.TASKS),
            cursor=cursor,
        )

    async def get_task(self, task_id: str) -> Any:
        """One task by id."""
        return await self._send("GET", f"{Resource.TASKS.path}/{task_id}")

    async def list_tasks_all_workspaces(self, limit: int | None = None) -> ListResult[Any]:
        """Tasks across every workspace, merged in workspace order."""
        item_limit = self._resolve_limit(limit)
        workspaces = await self.list_workspaces()
        results = await asyncio.gather(
            *(self.list_tasks(ws["id"], limit=item_limit) for ws in workspaces)
        )
        return self._aggregator.merge(list(results), item_limit)

    async def search(
        self,
        query: str,
        workspace_id: str,
        *,
        scope: str = "both",
        limit: int | None = None,
    ) -> ListResult[Any]:
        """Search tasks and/or projects by name or description.

        Matching is a case-insensitive substring test done locally, since
        upstream filters tasks by name only. Tasks are scanned up to the
        maximum item limit; a scan that stopped early leaves the result
        truncated. Task matches come first, then project matches; the
        combined list is capped at ``limit``.
        """
        if not query:
            raise InvalidRequestError("query is required", field="query", value=query)
        if scope not in SEARCH_SCOPES:
            raise InvalidRequestError(
                f"scope must be one of {SEARCH_SCOPES}", field="scope", value=scope
            )
        item_limit = self._resolve_limit(MAX_SEARCH_RESULTS if limit is None else limit)
        matches = partial(_matches_text, query.lower())

        results: list[ListResult[Any]] = []
        if scope in ("tasks", "both"):
            limits = self._config.pagination
            tasks = await self._fetcher.fetch_all(
                self._page_fetcher(Resource.TASKS, {"workspaceId": workspace_id}),
                item_limit=limits.max_item_limit,
                page_size=limits.max_page_size,
                max_pages=limits.absolute_max_pages,
                resource=str(Resource.TASKS),
            )
            results.append(self._aggregator.filter(tasks, matches))
        if scope in ("projects", "both"):
            projects = await self._cached_projects(workspace_id)
            results.append(self._aggregator.filter(projects, matches))
        return self._aggregator.merge(results, item_limit)

    async def list_comments(
        self, task_id: str, limit: int | None = None, *, cursor: str | None = None
    ) -> ListResult[Any]:
        """Comments on a task, resumable from a previous ``next_cursor``."""
        return await self._fetcher.fetch_all(
            self._page_fetcher(Resource.COMMENTS, {"taskId": task_id}),
            item_limit=self._resolve_limit(limit),
            resource=str(Resource.COMMENTS),
            cursor=cursor,
        )

    async def create_comment(self, task_id: str, content: str) -> Any:
        """Add a comment to a task."""
        if not content:
            raise InvalidRequestError("content is required", field="content", value=content)
        return await self._send(
            "POST", Resource.COMMENTS.path, {"taskId": task_id, "content": content}
        )

    async def list_recurring_tasks(
        self, workspace_id: str, limit: int | None = None
    ) -> ListResult[Any]:
        """Recurring task definitions of a workspace."""
        return await self._fetcher.fetch_all(
            self._page_fetcher(Resource.RECURRING_TASKS, {"workspaceId": workspace_id}),
            item_limit=self._resolve_limit(limit),
            resource=str(Resource.RECURRING_TASKS),
        )

    async def list_custom_fields(self, workspace_id: str) -> ListResult[Any]:
        """Custom field definitions of a workspace."""
        return await self._fetcher.fetch_all(
            self._page_fetcher(Resource.CUSTOM_FIELDS, {"workspaceId": workspace_id}),
            resource=str(Resource.CUSTOM_FIELDS),
        )

    async def list_schedules(self) -> ListResult[Any]:
        """Schedules of the API key's user."""
        return await self._fetcher.fetch_all(
            self._page_fetcher(Resource.SCHEDULES), resource=str(Resource.SCHEDULES)
        )

    async def list_statuses(self, workspace_id: str) -> ListResult[Any]:
        """Task statuses available in a workspace."""
        return await self._fetcher.fetch_all(
            self._page_fetcher(Resource.STATUSES, {"workspaceId": workspace_id}),
            resource=str(Resource.STATUSES),
        )

    # ----------------------
    # Mutations
    # ----------------------
    async def create_project(self, data: dict[str, Any]) -> Any:
        """Create a project; drops the workspace's cached project list."""
        workspace_id = data.get("workspaceId")
        if not workspace_id:
            raise InvalidRequestError("workspaceId is required to create a project", field="workspaceId")
        project = await self._send("POST", Resource.PROJECTS.path, data)
        self._caches.projects.invalidate(project_cache_key(workspace_id))
        return project

    async def update_project(self, project_id: str, updates: dict[str, Any]) -> Any:
        """Update a project; drops its workspace's cached project list."""
        project = await self._send("PATCH", f"{Resource.PROJECTS.path}/{project_id}", updates)
        workspace_id = project.get("workspaceId") if isinstance(project, dict) else None
        if workspace_id:
            self._caches.projects.invalidate(project_cache_key(workspace_id))
        else:
            self._caches.projects.invalidate("projects:")
        return project

    async def delete_project(self, project_id: str) -> None:
        """Delete a project; drops every cached project list."""
        await self._send("DELETE", f"{Resource.PROJECTS.path}/{project_id}")
        self._caches.projects.invalidate("projects:")

    async def create_task(self, data: dict[str, Any]) -> Any:
        """Create a task."""
        if not data.get("workspaceId"):
            raise InvalidRequestError("workspaceId is required to create a task", field="workspaceId")
        return await self._send("POST", Resource.TASKS.path, data)

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> Any:
        """Update a task."""
        return await self._send("PATCH", f"{Resource.TASKS.path}/{task_id}", updates)

    async def delete_task(self, task_id: str) -> None:
        """Delete a task."""
        await self._send("DELETE", f"{Resource.TASKS.path}/{task_id}")

    async def create_recurring_task(self, data: dict[str, Any]) -> Any:
        """Create a recurring task definition."""
        if not data.get("workspaceId"):
            raise InvalidRequestError(
                "workspaceId is required to create a recurring task", field="workspaceId"
            )
        return await self._send("POST", Resource.RECURRING_TASKS.path, data)

    async def delete_recurring_task(self, recurring_task_id: str) -> None:
        await self._send("DELETE", f"{Resource.RECURRING_TASKS.path}/{recurring_task_id}")

    async def create_custom_field(self, workspace_id: str, data: dict[str, Any]) -> Any:
        """Create a custom field in a workspace."""
        body = {**data, "workspaceId": workspace_id}
        return await self._send("POST", Resource.CUSTOM_FIELDS.path, body)

    async def delete_custom_field(self, field_id: str) -> None:
        await self._send("DELETE", f"{Resource.CUSTOM_FIELDS.path}/{field_id}")

    # ----------------------
    # Lifecycle
    # ----------------------
    async def close(self) -> None:
        """Close the transport if this instance created it."""
        if self._closed:
            return
        if self._owns_transport:
            await self._transport.close()
        self._closed = True

    async def __aenter__(self) -> TaskAPI:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
