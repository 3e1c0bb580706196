"""Integration tests against the live task API."""

import os

import pytest

from orbit.tasks import ClientConfig, TaskAPI

pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_ORBIT_NETWORK_TESTS") != "1" or not os.environ.get("ORBIT_API_KEY"),
    reason="Requires network access and ORBIT_API_KEY",
)


class TestListIntegration:
    """Read-only listing against the real API."""

    @pytest.mark.asyncio
    async def test_workspaces_and_tasks(self):
        async with TaskAPI(ClientConfig.from_env()) as api:
            workspaces = await api.list_workspaces()
            assert isinstance(workspaces, list)
            if not workspaces:
                pytest.skip("API key sees no workspaces")

            result = await api.list_tasks(workspaces[0]["id"], limit=3)
            assert result.count <= 3
            if result.truncation is not None:
                assert result.truncation.returned_count == result.count

    @pytest.mark.asyncio
    async def test_projects_limit(self):
        async with TaskAPI(ClientConfig.from_env()) as api:
            workspaces = await api.list_workspaces()
            if not workspaces:
                pytest.skip("API key sees no workspaces")

            result = await api.list_projects(workspaces[0]["id"], limit=1)
            assert result.count <= 1
