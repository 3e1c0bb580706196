"""REST runtime abstractions."""

from .envelope import RESOURCE_KEYS, Bare, Wrapped, parse_page, to_page, unwrap
from .http_client import HTTPClient, parse_retry_after
from .transport import RESTTransport

__all__ = [
    "HTTPClient",
    "RESTTransport",
    "RESOURCE_KEYS",
    "Bare",
    "Wrapped",
    "parse_page",
    "parse_retry_after",
    "to_page",
    "unwrap",
]
