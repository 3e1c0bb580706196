"""REST transport used by resource accessors."""

from __future__ import annotations

from typing import Any

from .http_client import HTTPClient, ResponseHook


class RESTTransport:
    """Thin delegation layer over HTTPClient."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float = 30.0,
        http: HTTPClient | None = None,
    ) -> None:
        self._http = http or HTTPClient(base_url=base_url, timeout=timeout, api_key=api_key)

    def add_response_hook(self, hook: ResponseHook) -> None:
        self._http.add_response_hook(hook)

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self._http.get(path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self._http.post(path, json=json_body, headers=headers)

    async def patch(
        self,
        path: str,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self._http.patch(path, json=json_body, headers=headers)

    async def delete(self, path: str, headers: dict[str, str] | None = None) -> Any:
        return await self._http.delete(path, headers=headers)

    async def close(self) -> None:
        await self._http.close()
