"""List result and truncation models.

A ListResult is constructed exactly once, by the paginated fetcher or by the
truncation aggregator, and handed to the caller as an immutable value.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import TruncationReason

T = TypeVar("T")


class TruncationInfo(BaseModel):
    """Why and where a list result was cut short.

    ``returned_count`` is the number of items actually handed to the caller,
    computed after all slicing and aggregation has finished.
    """

    reason: TruncationReason
    returned_count: int = Field(..., ge=0)
    page_size: int = Field(..., ge=1)
    limit: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(frozen=True)


class ListResult(BaseModel, Generic[T]):
    """Items of a list operation plus optional truncation notice.

    ``truncation`` is None when the full result set was retrieved.
    ``next_cursor`` is set only when the listing can be resumed from
    exactly where it stopped, with no item skipped.
    """

    items: tuple[T, ...] = ()
    truncation: TruncationInfo | None = None
    next_cursor: str | None = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_truncated(self) -> bool:
        return self.truncation is not None

    @property
    def count(self) -> int:
        return len(self.items)

    @classmethod
    def complete(cls, items: Iterable[T]) -> ListResult[T]:
        """Result for a fully retrieved collection."""
        return cls(items=tuple(items))
