import pytest
from fastapi.testclient import TestClient

from conftest import BrokenStore
from directory.config import Settings
from server.app import create_app


@pytest.fixture()
def client(memory_store):
    app = create_app(store=memory_store, settings=Settings(items_per_page=3))
    with TestClient(app) as test_client:
        yield test_client


def _client_for(store):
    return TestClient(create_app(store=store, settings=Settings(items_per_page=3)))


def test_directory_endpoint_returns_rows(client):
    resp = client.get("/api/directory")
    assert resp.status_code == 200
    assert [row["slug"] for row in resp.json()] == ["tennessee", "texas"]


def test_directory_endpoint_reports_errors():
    resp = _client_for(BrokenStore()).get("/api/directory")
    assert resp.status_code == 500
    assert resp.json() == {"error": 'relation "places" does not exist'}


def test_search_returns_results_with_slugs_and_links(client):
    resp = client.get("/api/places", params={"search": "masonry"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["error"] is None
    assert body["count"] == 2
    assert [place["slug"] for place in body["data"]] == ["lone-star-masonry-5", "test-masonry-1"]
    assert body["links"] == {"prev": None, "next": None, "current": "/api/places?search=masonry&page=1"}


def test_search_pages_through_results(client):
    body = client.get("/api/places", params={"state": "Tennessee", "page": "2"}).json()
    assert body["pagination"] == {"current_page": 2, "total_pages": 2, "total_items": 5}
    assert [place["id"] for place in body["data"]] == [2, 7]
    assert body["links"]["prev"] == "/api/places?state=Tennessee&page=1"
    assert body["links"]["next"] is None


def test_search_with_service_and_city(client):
    body = client.get(
        "/api/places",
        params={"service": "masonry-contractors", "state": "Tennessee", "city": "Nashville"},
    ).json()
    assert [place["id"] for place in body["data"]] == [1]


def test_search_never_fails_the_request():
    resp = _client_for(BrokenStore(fail_fetch=True, crash=True)).get("/api/places", params={"page": "2"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"] is None
    assert body["error"] == {"message": "An unexpected error occurred"}
    assert body["pagination"] == {"current_page": 2, "total_pages": 0, "total_items": 0}
    assert body["links"]["next"] is None


def test_place_detail_by_slug(client):
    resp = client.get("/api/places/brick-stone-works-3")
    assert resp.status_code == 200
    place = resp.json()["place"]
    assert place["title"] == "Brick & Stone Works"
    assert place["slug"] == "brick-stone-works-3"


def test_place_detail_not_found(client):
    assert client.get("/api/places/no-id-here").status_code == 404
    assert client.get("/api/places/missing-place-999").status_code == 404


def test_states_and_cities(client):
    assert client.get("/api/states").json() == {"states": ["Tennessee", "Texas"]}
    assert client.get("/api/states/Texas/cities").json() == {"state": "Texas", "cities": ["Austin"]}


def test_browse_state_is_paginated(client):
    body = client.get("/api/states/Tennessee/places", params={"page": "2"}).json()
    assert body["total_items"] == 5
    assert body["total_pages"] == 2
    assert body["current_page"] == 2
    assert body["has_previous_page"] is True
    assert body["has_next_page"] is False
    assert body["links"]["prev"] == "/api/states/Tennessee/places?page=1"


def test_browse_city_with_service(client):
    body = client.get(
        "/api/states/Tennessee/cities/Nashville/places", params={"service": "fireplace-stores"}
    ).json()
    assert [place["title"] for place in body["data"]] == ["Hearth & Home Fireplaces"]


def test_browse_reports_count_errors():
    resp = _client_for(BrokenStore(fail_count=True)).get("/api/states/Texas/places")
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Error getting count: ")


def test_categories(client):
    ids = [category["id"] for category in client.get("/api/categories").json()]
    assert "masonry-contractors" in ids
