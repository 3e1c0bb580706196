"""Single-page models returned by page-fetch functions."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class PageMeta(BaseModel):
    """Pagination metadata of a wrapped upstream response."""

    next_cursor: str | None = Field(default=None, alias="nextCursor")
    page_size: int | None = Field(default=None, alias="pageSize", ge=1)

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("next_cursor", mode="before")
    @classmethod
    def blank_cursor_is_none(cls, v: object) -> object:
        """Treat empty cursors as absent."""
        if v == "":
            return None
        return v


class Page(BaseModel, Generic[T]):
    """One page of items as seen by the paginated fetcher.

    Attributes:
        items: Items on this page
        next_cursor: Cursor for the following page (None at end of data)
        page_size: Page size reported by the server, if any
        end_of_data_reliable: Whether a missing cursor authoritatively
            means the data set is exhausted
    """

    items: tuple[T, ...] = ()
    next_cursor: str | None = None
    page_size: int | None = Field(default=None, ge=1)
    end_of_data_reliable: bool = True

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("next_cursor", mode="before")
    @classmethod
    def blank_cursor_is_none(cls, v: object) -> object:
        if v == "":
            return None
        return v
