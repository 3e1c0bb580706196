"""HTTP client helper."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp

from ...core.exceptions import ProviderError, RateLimitError, ResponseFormatError

logger = logging.getLogger(__name__)

ResponseHook = Callable[[aiohttp.ClientResponse], Awaitable[None] | None]


def parse_retry_after(value: str | None) -> int | None:
    """Parse an integer-seconds Retry-After header; other forms yield None."""
    if value is None:
        return None
    value = value.strip()
    if not value.isdigit():
        return None
    return int(value)


class HTTPClient:
    """Async HTTP client wrapper.

    Converts error statuses into ProviderError (RateLimitError for 429)
    carrying the status and Retry-After value. Transport-level failures
    (aiohttp.ClientError) propagate unchanged.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        api_key: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._headers = {"Content-Type": "application/json"}
        if api_key:
            self._headers["X-API-Key"] = api_key
        self._session: aiohttp.ClientSession | None = None
        self._response_hooks: list[ResponseHook] = []

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self._headers)
        return self._session

    def add_response_hook(self, hook: ResponseHook) -> None:
        """Register a callable invoked with every response (sync or async)."""
        self._response_hooks.append(hook)

    def _build_url(self, url: str) -> str:
        # If base_url is set and url is relative, combine them
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url}{url}"
        return url

    async def _run_hooks(self, response: aiohttp.ClientResponse) -> None:
        for hook in self._response_hooks:
            try:
                result = hook(response)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(
                    "response_hook_failed",
                    extra={"hook": getattr(hook, "__name__", repr(hook)), "error_message": str(e)},
                )

    async def _error_from_response(self, response: aiohttp.ClientResponse) -> ProviderError:
        message = response.reason or f"HTTP {response.status}"
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            body = None
        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])

        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        logger.debug(
            "upstream_error_response",
            extra={
                "url": str(response.url),
                "status": response.status,
                "retry_after": retry_after,
                "api_message": message,
            },
        )
        if response.status == 429:
            return RateLimitError(message, retry_after=retry_after)
        return ProviderError(message, status_code=response.status, retry_after=retry_after)

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None for 204).

        Raises:
            ProviderError: Upstream returned status >= 400
            ResponseFormatError: Body could not be decoded as JSON
        """
        url = self._build_url(url)
        async with self.session.request(
            method, url, params=params, json=json, headers=headers
        ) as response:
            await self._run_hooks(response)
            if response.status >= 400:
                raise await self._error_from_response(response)
            if response.status == 204:
                return None
            try:
                return await response.json(content_type=None)
            except (aiohttp.ContentTypeError, ValueError) as e:
                raise ResponseFormatError(
                    f"Invalid JSON from {method} {url}", status_code=response.status
                ) from e

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET request."""
        return await self.request("GET", url, params=params, headers=headers)

    async def post(
        self, url: str, json: Any = None, headers: dict[str, str] | None = None
    ) -> Any:
        """POST request."""
        return await self.request("POST", url, json=json, headers=headers)

    async def patch(
        self, url: str, json: Any = None, headers: dict[str, str] | None = None
    ) -> Any:
        """PATCH request."""
        return await self.request("PATCH", url, json=json, headers=headers)

    async def delete(self, url: str, headers: dict[str, str] | None = None) -> Any:
        """DELETE request."""
        return await self.request("DELETE", url, headers=headers)

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
