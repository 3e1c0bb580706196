"""Data models for list retrieval.

Architecture:
    This module exports the Pydantic v2 models that form the data contract
    between the runtime layer and callers. All models are immutable
    (frozen=True) so a result cannot be altered after construction.

Model Categories:
    - Results: ListResult, TruncationInfo
    - Pages: Page, PageMeta
"""

from .page import Page, PageMeta
from .results import ListResult, TruncationInfo

__all__ = [
    "ListResult",
    "Page",
    "PageMeta",
    "TruncationInfo",
]
