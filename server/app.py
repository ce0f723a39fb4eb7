from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from directory.categories import DEFAULT_SERVICE_CATEGORIES
from directory.config import Settings
from directory.exceptions import QueryError, StoreError
from directory.filters import Query, apply_filters
from directory.pagination import generate_pagination_links, paginate
from directory.schemas import PaginationParams, SearchFilters, ServiceCategory, validate_places
from directory.search import SearchService
from directory.slugs import extract_id_from_slug, place_slug
from storage.memory_store import InMemoryStore
from storage.supabase_store import SupabaseStore
from telemetry.logging_utils import configure_logging, get_logger

logger = get_logger(__name__)


def build_store(settings: Settings) -> Any:
    if settings.supabase_enabled:
        return SupabaseStore.from_settings(settings)
    logger.warning("supabase_not_configured", extra={"fallback": "memory", "demo_data": settings.demo_data_path})
    kwargs = {"places_table": settings.places_table, "directory_table": settings.directory_table}
    if settings.demo_data_path:
        return InMemoryStore.from_json(settings.demo_data_path, **kwargs)
    return InMemoryStore(**kwargs)


def create_app(
    store: Any = None,
    settings: Optional[Settings] = None,
    categories: Optional[Sequence[ServiceCategory]] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    store = store if store is not None else build_store(settings)
    categories = list(DEFAULT_SERVICE_CATEGORIES if categories is None else categories)

    app = FastAPI()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.store = store
    app.state.categories = categories
    app.state.search_service = SearchService(store, categories, resource=settings.places_table)

    @app.get("/api/directory")
    def list_directory(store: Any = Depends(get_store)):
        try:
            rows = store.list_directory()
        except StoreError as exc:
            return _error_response(exc.message)
        return rows

    @app.get("/api/categories")
    def list_categories(categories: List[ServiceCategory] = Depends(get_categories)):
        return [category.model_dump() for category in categories]

    @app.get("/api/places")
    def search_places(
        request: Request,
        search: Optional[str] = None,
        service: Optional[str] = None,
        state: Optional[str] = None,
        city: Optional[str] = None,
        page: Optional[str] = None,
        searcher: SearchService = Depends(get_search_service),
    ):
        filters = SearchFilters(search_query=search, service_filter=service, state_filter=state, city_filter=city)
        params = PaginationParams(page=page, items_per_page=request.app.state.settings.items_per_page)
        result = searcher.search(filters, page=params.page, items_per_page=params.items_per_page)
        payload = result.model_dump()
        if result.data is not None:
            payload["data"] = _public_places(result.data)
        payload["links"] = generate_pagination_links(
            request.url.path,
            result.pagination.current_page,
            result.pagination.total_pages,
            request.query_params,
        ).model_dump()
        return payload

    @app.get("/api/places/{slug}")
    def get_place(slug: str, store: Any = Depends(get_store)):
        place_id = extract_id_from_slug(slug)
        if place_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Place not found.")
        try:
            place = store.get_place(place_id)
        except StoreError as exc:
            return _error_response(exc.message)
        if not place:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Place not found.")
        return {"place": _public_place(place)}

    @app.get("/api/states")
    def list_states(store: Any = Depends(get_store)):
        try:
            return {"states": store.list_locations()}
        except StoreError as exc:
            return _error_response(exc.message)

    @app.get("/api/states/{state}/cities")
    def list_cities(state: str, store: Any = Depends(get_store)):
        try:
            return {"state": state, "cities": store.list_locations(state)}
        except StoreError as exc:
            return _error_response(exc.message)

    @app.get("/api/states/{state}/places")
    def browse_state(request: Request, state: str, service: Optional[str] = None, page: Optional[str] = None):
        return _browse(request, SearchFilters(state_filter=state, service_filter=service), page)

    @app.get("/api/states/{state}/cities/{city}/places")
    def browse_city(
        request: Request, state: str, city: str, service: Optional[str] = None, page: Optional[str] = None
    ):
        return _browse(request, SearchFilters(state_filter=state, city_filter=city, service_filter=service), page)

    return app


def get_store(request: Request) -> Any:
    return request.app.state.store


def get_categories(request: Request) -> List[ServiceCategory]:
    return request.app.state.categories


def get_search_service(request: Request) -> SearchService:
    return request.app.state.search_service


def _browse(request: Request, filters: SearchFilters, page: Optional[str]):
    state = request.app.state
    query = apply_filters(Query(state.settings.places_table), filters, state.categories)
    params = PaginationParams(page=page, items_per_page=state.settings.items_per_page)
    try:
        result = paginate(state.store, query, params)
    except QueryError as exc:
        return _error_response(exc.message)
    payload = result.model_dump()
    payload["data"] = _public_places(result.data)
    payload["links"] = generate_pagination_links(
        request.url.path, result.current_page, result.total_pages, request.query_params
    ).model_dump()
    return payload


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": message})


def _public_place(place: Dict[str, Any]) -> Dict[str, Any]:
    return {**place, "slug": place_slug(place)}


def _public_places(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [_public_place(row) for row in validate_places(rows)]


def run() -> None:
    import uvicorn

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)


app = create_app()


if __name__ == "__main__":
    run()
