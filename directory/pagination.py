"""Offset pagination over a directory store.

``paginate`` issues two requests against the same immutable query: a count
and an ordered window. Either failing raises (``CountError``/``DataError``);
unlike :class:`directory.search.SearchService`, nothing is swallowed here.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode

from directory.exceptions import CountError, DataError, StoreError
from directory.filters import ORDER_BY_RATING, Query
from directory.schemas import (
    DEFAULT_ITEMS_PER_PAGE,
    PaginationLinks,
    PaginationParams,
    PaginationResult,
)
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)

ParamsLike = Union[str, Mapping[str, Any], Iterable[Tuple[str, Any]], None]


def page_window(page: int, items_per_page: int = DEFAULT_ITEMS_PER_PAGE) -> Tuple[int, int]:
    """Inclusive ``(from, to)`` row offsets for a 1-based page."""
    start = (max(1, page) - 1) * items_per_page
    return start, start + items_per_page - 1


def paginate(store: Any, query: Query, params: Optional[PaginationParams] = None) -> PaginationResult[Dict[str, Any]]:
    params = params or PaginationParams()
    page = params.page
    items_per_page = params.items_per_page
    start, end = page_window(page, items_per_page)

    try:
        count = store.count(query)
    except StoreError as exc:
        logger.warning("pagination_count_failed", extra={"query": query, "error": exc.message})
        raise CountError(f"Error getting count: {exc.message}") from exc

    try:
        rows, _ = store.fetch(query, order=ORDER_BY_RATING, start=start, end=end)
    except StoreError as exc:
        logger.warning("pagination_data_failed", extra={"query": query, "error": exc.message})
        raise DataError(f"Error getting data: {exc.message}") from exc

    return PaginationResult[Dict[str, Any]].build(rows or [], page, items_per_page, count or 0)


def _param_pairs(existing_params: ParamsLike) -> List[Tuple[str, str]]:
    if existing_params is None:
        return []
    if isinstance(existing_params, str):
        return parse_qsl(existing_params.lstrip("?"), keep_blank_values=True)
    if hasattr(existing_params, "multi_items"):
        items = existing_params.multi_items()
    elif isinstance(existing_params, Mapping):
        items = existing_params.items()
    else:
        items = existing_params
    return [(str(key), str(value)) for key, value in items]


def _with_page(pairs: List[Tuple[str, str]], page: int) -> List[Tuple[str, str]]:
    # First "page" entry keeps its position, any repeats are dropped.
    updated: List[Tuple[str, str]] = []
    replaced = False
    for key, value in pairs:
        if key != "page":
            updated.append((key, value))
        elif not replaced:
            updated.append((key, str(page)))
            replaced = True
    if not replaced:
        updated.append(("page", str(page)))
    return updated


def _page_url(base_url: str, pairs: List[Tuple[str, str]], page: int) -> str:
    return f"{base_url}?{urlencode(_with_page(pairs, page))}"


def generate_pagination_links(
    base_url: str, current_page: int, total_pages: int, existing_params: ParamsLike = None
) -> PaginationLinks:
    pairs = _param_pairs(existing_params)
    prev = _page_url(base_url, pairs, current_page - 1) if current_page > 1 else None
    next_ = _page_url(base_url, pairs, current_page + 1) if current_page < total_pages else None
    return PaginationLinks(prev=prev, next=next_, current=_page_url(base_url, pairs, current_page))
