from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from directory.filters import Contains, Equals, ILike, Or, Order, Predicate, Query, like_to_regex


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def matches(row: Dict[str, Any], predicate: Predicate) -> bool:
    """Evaluate one predicate the way PostgREST would against a single row."""
    if isinstance(predicate, Or):
        return any(matches(row, condition) for condition in predicate.conditions)
    value = row.get(predicate.field)
    if isinstance(predicate, Equals):
        return value is not None and str(value) == predicate.value
    if isinstance(predicate, ILike):
        return value is not None and like_to_regex(predicate.pattern).fullmatch(str(value)) is not None
    if isinstance(predicate, Contains):
        present = _as_list(value)
        return all(item in present for item in predicate.values)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def _sort_rows(rows: List[Dict[str, Any]], order: Order) -> List[Dict[str, Any]]:
    # Postgres puts NULLs first for DESC and last for ASC.
    def key(row: Dict[str, Any]) -> Tuple[bool, Any]:
        value = row.get(order.field)
        return value is None, 0 if value is None else value

    return sorted(rows, key=key, reverse=order.descending)


class InMemoryStore:
    """Demo-mode store used when Supabase is unavailable."""

    def __init__(
        self,
        places: Optional[Iterable[Dict[str, Any]]] = None,
        directory: Optional[Iterable[Dict[str, Any]]] = None,
        *,
        places_table: str = "places",
        directory_table: str = "directory",
    ) -> None:
        self.places_table = places_table
        self.directory_table = directory_table
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            places_table: [dict(row) for row in places or []],
            directory_table: [dict(row) for row in directory or []],
        }

    @classmethod
    def from_json(cls, path: Union[str, Path], **kwargs: Any) -> "InMemoryStore":
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        if isinstance(payload, list):
            return cls(places=payload, **kwargs)
        return cls(places=payload.get("places"), directory=payload.get("directory"), **kwargs)

    def _rows(self, query: Query) -> List[Dict[str, Any]]:
        rows = self.tables.get(query.resource, [])
        return [row for row in rows if all(matches(row, predicate) for predicate in query.predicates)]

    def count(self, query: Query) -> int:
        return len(self._rows(query))

    def fetch(
        self,
        query: Query,
        *,
        order: Optional[Order] = None,
        start: int = 0,
        end: Optional[int] = None,
        with_count: bool = False,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        rows = self._rows(query)
        total = len(rows) if with_count else None
        if order is not None:
            rows = _sort_rows(rows, order)
        if end is not None:
            rows = rows[start : end + 1]
        return [dict(row) for row in rows], total

    def get_place(self, place_id: int) -> Optional[Dict[str, Any]]:
        for row in self.tables[self.places_table]:
            if row.get("id") == place_id:
                return dict(row)
        return None

    def list_directory(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self.tables[self.directory_table]]

    def list_locations(self, state: Optional[str] = None) -> List[str]:
        places = self.tables[self.places_table]
        if state is None:
            return sorted({row["province_state"] for row in places if row.get("province_state")})
        cities = set()
        for row in places:
            if row.get("province_state") == state:
                cities.update(city for city in _as_list(row.get("city")) if city)
        return sorted(cities)
