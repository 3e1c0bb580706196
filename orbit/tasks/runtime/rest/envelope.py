"""Response envelope unwrapping.

Upstream list endpoints answer in one of two shapes:

    {"meta": {"nextCursor": ..., "pageSize": ...}, "<key>": [...]}   # wrapped
    [...]                                                            # bare

The shape is resolved exactly once, at the page-fetch boundary, into a
tagged variant (Wrapped or Bare) that is then turned into a Page. The
paginated fetcher never inspects raw payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ...core.enums import Resource
from ...core.exceptions import ResponseFormatError
from ...models.page import Page, PageMeta

# Key holding the item array in wrapped responses
RESOURCE_KEYS: dict[Resource, str] = {
    Resource.WORKSPACES: "workspaces",
    Resource.USERS: "users",
    Resource.PROJECTS: "projects",
    Resource.TASKS: "tasks",
    Resource.COMMENTS: "comments",
    Resource.CUSTOM_FIELDS: "customFields",
    Resource.RECURRING_TASKS: "tasks",  # recurring tasks come back under "tasks"
    Resource.SCHEDULES: "schedules",
    Resource.STATUSES: "statuses",
}


@dataclass(frozen=True)
class Wrapped:
    """Object response carrying items under a resource key, maybe with meta."""

    items: list[Any]
    meta: PageMeta | None = None


@dataclass(frozen=True)
class Bare:
    """Plain array response; the whole collection in one response."""

    items: list[Any]


Unwrapped = Wrapped | Bare


def unwrap(payload: Any, resource: Resource) -> Unwrapped:
    """Resolve a raw payload into Wrapped or Bare.

    Raises:
        ResponseFormatError: If the payload matches neither shape
    """
    if isinstance(payload, list):
        return Bare(items=payload)

    key = RESOURCE_KEYS[resource]
    if not isinstance(payload, dict):
        raise ResponseFormatError(
            f"Expected object or array for {resource}, got {type(payload).__name__}"
        )

    items = payload.get(key)
    if not isinstance(items, list):
        raise ResponseFormatError(
            f"Expected array under '{key}' in {resource} response, "
            f"got keys {sorted(payload)}"
        )

    raw_meta = payload.get("meta")
    if raw_meta is None:
        return Wrapped(items=items)
    if not isinstance(raw_meta, dict):
        raise ResponseFormatError(f"Expected object for meta in {resource} response")
    try:
        meta = PageMeta.model_validate(raw_meta)
    except ValidationError as e:
        raise ResponseFormatError(f"Invalid pagination meta in {resource} response: {e}") from e
    return Wrapped(items=items, meta=meta)


def to_page(unwrapped: Unwrapped) -> Page[Any]:
    """Convert an unwrapped response into a Page.

    A wrapped response without meta cannot say whether more data exists, so
    its end-of-data signal is marked unreliable.
    """
    if isinstance(unwrapped, Bare):
        return Page(items=tuple(unwrapped.items))
    if unwrapped.meta is None:
        return Page(items=tuple(unwrapped.items), end_of_data_reliable=False)
    return Page(
        items=tuple(unwrapped.items),
        next_cursor=unwrapped.meta.next_cursor,
        page_size=unwrapped.meta.page_size,
    )


def parse_page(payload: Any, resource: Resource) -> Page[Any]:
    """unwrap() followed by to_page()."""
    return to_page(unwrap(payload, resource))
