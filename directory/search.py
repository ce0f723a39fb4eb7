from __future__ import annotations

from typing import Any, Optional, Sequence

from directory.categories import DEFAULT_SERVICE_CATEGORIES
from directory.exceptions import DirectoryError, StoreError, UnexpectedError
from directory.filters import ORDER_BY_RATING, Query, apply_filters
from directory.pagination import page_window
from directory.schemas import (
    DEFAULT_ITEMS_PER_PAGE,
    ErrorBody,
    PaginationMeta,
    PaginationParams,
    SearchFilters,
    SearchResult,
    ServiceCategory,
    total_pages_for,
)
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


class SearchService:
    """Keyword + filter search over places.

    ``search`` never raises: any failure is folded into the ``error`` field of
    an otherwise empty result so page handlers can render it directly.
    """

    def __init__(
        self,
        store: Any,
        categories: Optional[Sequence[ServiceCategory]] = None,
        resource: str = "places",
    ) -> None:
        self.store = store
        self.categories = list(DEFAULT_SERVICE_CATEGORIES if categories is None else categories)
        self.resource = resource

    def base_query(self) -> Query:
        return Query(self.resource)

    def build_query(
        self, filters: Optional[SearchFilters], categories: Optional[Sequence[ServiceCategory]] = None
    ) -> Query:
        return apply_filters(self.base_query(), filters, self.categories if categories is None else categories)

    def search(
        self,
        filters: Optional[SearchFilters] = None,
        page: int = 1,
        items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
        categories: Optional[Sequence[ServiceCategory]] = None,
    ) -> SearchResult:
        params = PaginationParams(page=page, items_per_page=items_per_page)
        try:
            query = self.build_query(filters, categories)
            start, end = page_window(params.page, params.items_per_page)
            rows, count = self.store.fetch(
                query, order=ORDER_BY_RATING, start=start, end=end, with_count=True
            )
        except StoreError as exc:
            logger.warning("search_failed", extra={"filters": filters, "page": params.page, "error": exc.message})
            return _empty_result(params.page, exc)
        except Exception:
            logger.exception("search_failed", extra={"filters": filters, "page": params.page})
            return _empty_result(params.page, UnexpectedError())

        total_items = count or 0
        return SearchResult(
            data=rows or [],
            error=None,
            count=total_items,
            pagination=PaginationMeta(
                current_page=params.page,
                total_pages=total_pages_for(total_items, params.items_per_page),
                total_items=total_items,
            ),
        )


def _empty_result(page: int, error: DirectoryError) -> SearchResult:
    return SearchResult(
        data=None,
        error=ErrorBody(message=error.message),
        count=0,
        pagination=PaginationMeta(current_page=page, total_pages=0, total_items=0),
    )
