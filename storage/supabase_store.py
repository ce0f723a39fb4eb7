from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from postgrest import APIError

from directory.config import Settings
from directory.exceptions import StoreError
from directory.filters import Contains, Equals, ILike, Or, Order, Predicate, Query
from telemetry.logging_utils import get_logger
from supabase import Client, create_client

logger = get_logger(__name__)

# Characters PostgREST treats as syntax inside an or=(...) list.
_RESERVED_OR_CHARS = set(',()"\\')


def _or_value(value: str) -> str:
    if not any(char in _RESERVED_OR_CHARS for char in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def or_clause(condition: Or) -> str:
    """Render an ``Or`` of ILIKE conditions as a PostgREST ``or`` filter string."""
    return ",".join(f"{item.field}.ilike.{_or_value(item.pattern)}" for item in condition.conditions)


def _error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


class SupabaseStore:
    def __init__(
        self,
        client: Client,
        *,
        places_table: str = "places",
        directory_table: str = "directory",
    ) -> None:
        self.client = client
        self.places_table = places_table
        self.directory_table = directory_table

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseStore":
        if not settings.supabase_enabled:
            raise RuntimeError("Supabase is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY in .env")
        return cls(
            create_client(settings.supabase_url, settings.supabase_key),
            places_table=settings.places_table,
            directory_table=settings.directory_table,
        )

    def _table(self, name: str):
        return self.client.table(name)

    def _execute(self, resource: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except (APIError, httpx.HTTPError) as exc:
            message = _error_message(exc)
            logger.warning("store_query_failed", extra={"resource": resource, "error": message})
            raise StoreError(message) from exc

    @staticmethod
    def _apply(builder: Any, predicates: Tuple[Predicate, ...]) -> Any:
        for predicate in predicates:
            if isinstance(predicate, Equals):
                builder = builder.eq(predicate.field, predicate.value)
            elif isinstance(predicate, ILike):
                builder = builder.ilike(predicate.field, predicate.pattern)
            elif isinstance(predicate, Contains):
                builder = builder.contains(predicate.field, list(predicate.values))
            elif isinstance(predicate, Or):
                builder = builder.or_(or_clause(predicate))
            else:
                raise TypeError(f"Unsupported predicate: {predicate!r}")
        return builder

    def count(self, query: Query) -> int:
        builder = self._apply(self._table(query.resource).select("*", count="exact", head=True), query.predicates)
        resp = self._execute(query.resource, lambda: builder.execute())
        return resp.count or 0

    def fetch(
        self,
        query: Query,
        *,
        order: Optional[Order] = None,
        start: int = 0,
        end: Optional[int] = None,
        with_count: bool = False,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        table = self._table(query.resource)
        select = table.select("*", count="exact") if with_count else table.select("*")
        builder = self._apply(select, query.predicates)
        if order is not None:
            builder = builder.order(order.field, desc=order.descending)
        if end is not None:
            builder = builder.range(start, end)
        resp = self._execute(query.resource, lambda: builder.execute())
        return resp.data or [], resp.count

    def get_place(self, place_id: int) -> Optional[Dict[str, Any]]:
        resp = self._execute(
            self.places_table,
            lambda: self._table(self.places_table).select("*").eq("id", place_id).maybe_single().execute(),
        )
        if resp is None:
            return None
        return resp.data

    def list_directory(self) -> List[Dict[str, Any]]:
        resp = self._execute(self.directory_table, lambda: self._table(self.directory_table).select("*").execute())
        return resp.data or []

    def list_locations(self, state: Optional[str] = None) -> List[str]:
        """Distinct states, or distinct cities within ``state``."""
        if state is None:
            resp = self._execute(
                self.places_table,
                lambda: self._table(self.places_table).select("province_state").execute(),
            )
            return _distinct(row.get("province_state") for row in resp.data or [])
        resp = self._execute(
            self.places_table,
            lambda: self._table(self.places_table).select("city").eq("province_state", state).execute(),
        )
        cities: List[Any] = []
        for row in resp.data or []:
            value = row.get("city")
            cities.extend(value if isinstance(value, list) else [value])
        return _distinct(cities)


def _distinct(values: Any) -> List[str]:
    return sorted({value for value in values if value})
