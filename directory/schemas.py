from __future__ import annotations

import math
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from telemetry.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_ITEMS_PER_PAGE = 12


class SearchFilters(BaseModel):
    search_query: Optional[str] = None
    service_filter: Optional[str] = None
    state_filter: Optional[str] = None
    city_filter: Optional[str] = None

    @field_validator("search_query", "service_filter", "state_filter", "city_filter", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value)
        return value if value.strip() else None


class ServiceCategory(BaseModel):
    id: str
    name: str
    search_terms: List[str] = Field(default_factory=list)

    def terms(self) -> List[str]:
        """Canonical name first, then synonyms in configured order."""
        return [self.name, *self.search_terms]


class PaginationParams(BaseModel):
    page: int = 1
    items_per_page: int = DEFAULT_ITEMS_PER_PAGE

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value: Any) -> int:
        try:
            page = int(value or 1)
        except (TypeError, ValueError, OverflowError):
            return 1
        return max(1, page)

    @field_validator("items_per_page", mode="before")
    @classmethod
    def _default_size(cls, value: Any) -> int:
        try:
            size = int(value or DEFAULT_ITEMS_PER_PAGE)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_ITEMS_PER_PAGE
        return size if size > 0 else DEFAULT_ITEMS_PER_PAGE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.items_per_page


def total_pages_for(total_items: int, items_per_page: int) -> int:
    if total_items <= 0:
        return 0
    return math.ceil(total_items / items_per_page)


class PaginationResult(BaseModel, Generic[T]):
    data: List[T] = Field(default_factory=list)
    total_pages: int
    current_page: int
    has_next_page: bool
    has_previous_page: bool
    total_items: int

    @classmethod
    def build(cls, data: List[T], page: int, items_per_page: int, total_items: int) -> "PaginationResult[T]":
        total_pages = total_pages_for(total_items, items_per_page)
        return cls(
            data=data,
            total_pages=total_pages,
            current_page=page,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
            total_items=total_items,
        )


class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total_items: int


class PaginationLinks(BaseModel):
    prev: Optional[str] = None
    next: Optional[str] = None
    current: str


class ErrorBody(BaseModel):
    message: str


class SearchResult(BaseModel):
    data: Optional[List[Dict[str, Any]]] = None
    error: Optional[ErrorBody] = None
    count: int = 0
    pagination: PaginationMeta


class Place(BaseModel):
    id: int
    title: str
    search_entry_id: Optional[int] = None
    position: Optional[int] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    category: Optional[str] = None
    phone_number: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    cid: Optional[str] = None
    created_at: Optional[str] = None
    slug: Optional[str] = None
    location: Optional[str] = None
    city: Union[str, List[str], None] = None
    province_state: Optional[str] = None
    query_id: Optional[int] = None
    query_text: Optional[str] = None

    model_config = {"extra": "allow"}


def validate_places(rows: Any) -> List[Dict[str, Any]]:
    """Coerce raw place rows, logging and dropping the ones that don't validate."""
    cleaned: List[Dict[str, Any]] = []
    for row in rows or []:
        try:
            cleaned.append(Place.model_validate(row).model_dump())
        except ValidationError as exc:
            logger.warning("place_validation_failed", extra={"error": str(exc)[:200]})
    return cleaned
