"""Precise unit tests for RESTTransport.

Tests focus on HTTPClient delegation and response hooks.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from orbit.tasks.runtime.rest import HTTPClient, RESTTransport


class TestRESTTransport:
    """Test RESTTransport wrapper."""

    def test_init(self):
        transport = RESTTransport(base_url="https://api.example.com", api_key="secret")
        assert transport._http.base_url == "https://api.example.com"
        assert transport._http._headers["X-API-Key"] == "secret"

    def test_init_with_http_client(self):
        http = HTTPClient(base_url="https://other.example.com")
        transport = RESTTransport(base_url="https://api.example.com", http=http)
        assert transport._http is http

    def test_add_response_hook(self):
        transport = RESTTransport(base_url="https://api.example.com")
        hook = MagicMock()

        transport.add_response_hook(hook)

        assert hook in transport._http._response_hooks

    @pytest.mark.asyncio
    async def test_get_delegates_to_http_client(self):
        transport = RESTTransport(base_url="https://api.example.com")
        transport._http.get = AsyncMock(return_value={"tasks": []})

        result = await transport.get("/tasks", params={"workspaceId": "ws1"})

        assert result == {"tasks": []}
        transport._http.get.assert_called_once_with(
            "/tasks", params={"workspaceId": "ws1"}, headers=None
        )

    @pytest.mark.asyncio
    async def test_post_delegates_to_http_client(self):
        transport = RESTTransport(base_url="https://api.example.com")
        transport._http.post = AsyncMock(return_value={"id": "t1"})

        result = await transport.post("/tasks", json_body={"name": "x"})

        assert result == {"id": "t1"}
        transport._http.post.assert_called_once_with("/tasks", json={"name": "x"}, headers=None)

    @pytest.mark.asyncio
    async def test_patch_delegates_to_http_client(self):
        transport = RESTTransport(base_url="https://api.example.com")
        transport._http.patch = AsyncMock(return_value={"id": "t1"})

        await transport.patch("/tasks/t1", json_body={"name": "y"})

        transport._http.patch.assert_called_once_with(
            "/tasks/t1", json={"name": "y"}, headers=None
        )

    @pytest.mark.asyncio
    async def test_delete_delegates_to_http_client(self):
        transport = RESTTransport(base_url="https://api.example.com")
        transport._http.delete = AsyncMock(return_value=None)

        assert await transport.delete("/tasks/t1") is None
        transport._http.delete.assert_called_once_with("/tasks/t1", headers=None)

    @pytest.mark.asyncio
    async def test_close_delegates_to_http_client(self):
        transport = RESTTransport(base_url="https://api.example.com")
        transport._http.close = AsyncMock()

        await transport.close()

        transport._http.close.assert_awaited_once()
