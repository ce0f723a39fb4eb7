"""Store-agnostic filter composition.

Filters are described as an ordered tuple of predicate descriptors attached to
an immutable :class:`Query`. Stores interpret the descriptors against their own
query API (see ``storage/``); nothing here talks to a database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

from directory.categories import find_category
from directory.schemas import SearchFilters, ServiceCategory

TITLE_FIELD = "title"
CATEGORY_FIELD = "category"
STATE_FIELD = "province_state"
CITY_FIELD = "city"


@dataclass(frozen=True)
class Equals:
    field: str
    value: str


@dataclass(frozen=True)
class ILike:
    field: str
    pattern: str


@dataclass(frozen=True)
class Contains:
    field: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class Or:
    conditions: Tuple[ILike, ...]


Predicate = Union[Equals, ILike, Contains, Or]


@dataclass(frozen=True)
class Order:
    field: str
    descending: bool = False


ORDER_BY_RATING = Order("rating", descending=True)


@dataclass(frozen=True)
class Query:
    resource: str
    predicates: Tuple[Predicate, ...] = ()

    def where(self, *predicates: Predicate) -> "Query":
        return Query(self.resource, self.predicates + tuple(predicates))


def _present(value: Optional[str]) -> bool:
    return value is not None and value != ""


def contains_pattern(term: str) -> str:
    return f"%{term}%"


def apply_search_query(query: Query, text: Optional[str]) -> Query:
    if not _present(text):
        return query
    return query.where(ILike(TITLE_FIELD, contains_pattern(text)))


def apply_service_filter(
    query: Query, category_id: Optional[str], categories: Iterable[ServiceCategory]
) -> Query:
    if not _present(category_id):
        return query
    category = find_category(categories, category_id)
    if category is None:
        return query
    conditions = tuple(ILike(CATEGORY_FIELD, contains_pattern(term)) for term in category.terms())
    return query.where(Or(conditions))


def apply_location_filters(query: Query, state: Optional[str], city: Optional[str]) -> Query:
    # A city is only meaningful inside a state; city alone never filters.
    if _present(state):
        query = query.where(Equals(STATE_FIELD, state))
        if _present(city):
            query = query.where(Contains(CITY_FIELD, (city,)))
    return query


def apply_filters(
    query: Query, filters: Optional[SearchFilters], categories: Sequence[ServiceCategory] = ()
) -> Query:
    """Apply search, service and location filters, always in that order."""
    if filters is None:
        return query
    query = apply_search_query(query, filters.search_query)
    query = apply_service_filter(query, filters.service_filter, categories)
    return apply_location_filters(query, filters.state_filter, filters.city_filter)


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a SQL LIKE pattern into a case-insensitive full-match regex."""
    parts = []
    escaped = False
    for char in pattern:
        if escaped:
            parts.append(re.escape(char))
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    if escaped:
        parts.append(re.escape("\\"))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)
