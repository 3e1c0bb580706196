"""Merging of independently fetched list results.

A logical list operation sometimes issues several paginated fetches, one per
workspace or one per entity category, and must report one combined result.
TruncationAggregator combines them in caller-defined order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from ...core.enums import TruncationReason
from ...models.results import ListResult, TruncationInfo
from .definitions import require_positive_int


class TruncationAggregator:
    """Combines ListResults with a first-truncation-wins policy."""

    def merge(
        self,
        results: Sequence[ListResult[Any]],
        final_limit: int | None = None,
        *,
        page_size: int | None = None,
    ) -> ListResult[Any]:
        """Concatenate results and derive one truncation notice.

        The first input carrying a truncation decides the reason; later ones
        are dropped. When ``final_limit`` cuts the combined list before the
        end of that first truncated input (or no input was truncated at all),
        the reason becomes ``max_items``. ``returned_count`` is computed after
        concatenation and slicing.

        Args:
            results: Results in merge order
            final_limit: Maximum combined items (None = no cap)
            page_size: Page size reported when no input carries one

        Returns:
            Combined ListResult

        Raises:
            InvalidRequestError: If final_limit or page_size is not a positive int
        """
        require_positive_int("final_limit", final_limit)
        require_positive_int("page_size", page_size)

        items: list[Any] = []
        first: TruncationInfo | None = None
        first_end: int | None = None
        for result in results:
            items.extend(result.items)
            if first is None and result.truncation is not None:
                first = result.truncation
                first_end = len(items)

        reason = first.reason if first is not None else None
        limit = first.limit if first is not None else None

        if final_limit is not None and len(items) > final_limit:
            if first_end is None or final_limit < first_end:
                reason = TruncationReason.MAX_ITEMS
                limit = final_limit
            items = items[:final_limit]

        if reason is None:
            return ListResult(items=tuple(items))

        if first is not None:
            reported_page_size = first.page_size
        else:
            reported_page_size = page_size or final_limit

        truncation = TruncationInfo(
            reason=reason,
            returned_count=len(items),
            page_size=reported_page_size,
            limit=limit,
        )
        return ListResult(items=tuple(items), truncation=truncation)

    def limit(
        self,
        result: ListResult[Any],
        item_limit: int | None,
        *,
        page_size: int | None = None,
    ) -> ListResult[Any]:
        """Apply the current caller's limit to a collection.

        Used for cached collections: truncation is derived fresh from
        ``item_limit`` on every call instead of being stored with the items.
        A collection that was itself cut short keeps its reason unless the
        limit cuts it further.
        """
        return self.merge([result], item_limit, page_size=page_size)

    def filter(
        self, result: ListResult[Any], predicate: Callable[[Any], bool]
    ) -> ListResult[Any]:
        """Keep the items matching ``predicate``.

        A truncated input stays truncated since matches may exist past the
        point where it stopped. ``returned_count`` counts the kept items.
        """
        items = tuple(item for item in result.items if predicate(item))
        if result.truncation is None:
            return ListResult(items=items)
        truncation = result.truncation.model_copy(update={"returned_count": len(items)})
        return ListResult(items=items, truncation=truncation)
