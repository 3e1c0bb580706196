"""Custom exception hierarchy."""

from __future__ import annotations


class OrbitError(Exception):
    """Base exception for all library errors."""

    pass


class ProviderError(OrbitError):
    """Error returned by the upstream task API.

    Carries the HTTP status and, when the response sent one, the integer
    ``Retry-After`` value in seconds.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after

    @property
    def is_retryable(self) -> bool:
        """True for rate limiting (429) and server-side (5xx) failures."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class RateLimitError(ProviderError):
    """Provider rate limit exceeded."""

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message, status_code=429, retry_after=retry_after)


class ResponseFormatError(ProviderError):
    """Upstream response body did not have the expected shape.

    Never retried: repeating the request would return the same body.
    """

    @property
    def is_retryable(self) -> bool:
        return False


class InvalidRequestError(OrbitError, ValueError):
    """Caller supplied an invalid limit, page size or page count.

    Raised synchronously, before any network call is made.
    """

    def __init__(self, message: str, field: str | None = None, value: object = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
