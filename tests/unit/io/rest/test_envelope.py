"""Unit tests for response envelope unwrapping."""

from __future__ import annotations

import pytest

from orbit.tasks.core import Resource, ResponseFormatError
from orbit.tasks.runtime.rest import Bare, Wrapped, parse_page, to_page, unwrap


class TestUnwrap:
    """Test unwrap() shape resolution."""

    def test_bare_array(self):
        unwrapped = unwrap([{"id": "w1"}], Resource.WORKSPACES)
        assert isinstance(unwrapped, Bare)
        assert unwrapped.items == [{"id": "w1"}]

    def test_wrapped_with_meta(self):
        payload = {"meta": {"nextCursor": "abc", "pageSize": 50}, "tasks": [{"id": "t1"}]}
        unwrapped = unwrap(payload, Resource.TASKS)
        assert isinstance(unwrapped, Wrapped)
        assert unwrapped.items == [{"id": "t1"}]
        assert unwrapped.meta.next_cursor == "abc"
        assert unwrapped.meta.page_size == 50

    def test_wrapped_without_meta(self):
        unwrapped = unwrap({"projects": []}, Resource.PROJECTS)
        assert isinstance(unwrapped, Wrapped)
        assert unwrapped.meta is None

    def test_resource_specific_keys(self):
        assert unwrap({"customFields": [1]}, Resource.CUSTOM_FIELDS).items == [1]
        assert unwrap({"tasks": [2]}, Resource.RECURRING_TASKS).items == [2]

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "tasks",
            42,
            {"items": []},
            {"tasks": {"id": "t1"}},
            {"tasks": [], "meta": "cursor"},
            {"tasks": [], "meta": {"pageSize": 0}},
        ],
    )
    def test_malformed(self, payload):
        with pytest.raises(ResponseFormatError):
            unwrap(payload, Resource.TASKS)


class TestToPage:
    """Test to_page() end-of-data signalling."""

    def test_bare_is_reliable_end(self):
        page = to_page(Bare(items=[1, 2]))
        assert page.items == (1, 2)
        assert page.next_cursor is None
        assert page.end_of_data_reliable

    def test_wrapped_without_meta_is_unreliable(self):
        page = to_page(Wrapped(items=[1]))
        assert not page.end_of_data_reliable

    def test_parse_page_with_cursor(self):
        page = parse_page(
            {"meta": {"nextCursor": "c2", "pageSize": 2}, "comments": [1, 2]},
            Resource.COMMENTS,
        )
        assert page.items == (1, 2)
        assert page.next_cursor == "c2"
        assert page.page_size == 2
        assert page.end_of_data_reliable

    def test_parse_page_last_page(self):
        page = parse_page({"meta": {"nextCursor": None}, "tasks": [1]}, Resource.TASKS)
        assert page.next_cursor is None
        assert page.end_of_data_reliable
