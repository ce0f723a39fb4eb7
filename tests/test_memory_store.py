from directory.filters import ORDER_BY_RATING, Contains, Equals, ILike, Or, Order, Query
from storage.memory_store import InMemoryStore, matches

from conftest import FIXTURES_DIR


def test_matches_scalar_and_list_city_columns():
    assert matches({"city": ["Nashville", "Franklin"]}, Contains("city", ("Franklin",)))
    assert matches({"city": "Memphis"}, Contains("city", ("Memphis",)))
    assert not matches({"city": None}, Contains("city", ("Memphis",)))


def test_matches_ilike_and_or():
    row = {"category": "Brick Mason", "province_state": "Tennessee"}
    assert matches(row, ILike("category", "%mason%"))
    assert not matches(row, ILike("category", "%roof%"))
    assert matches(row, Or((ILike("category", "%roof%"), ILike("category", "%brick%"))))
    assert not matches({"category": None}, ILike("category", "%%"))
    assert matches(row, Equals("province_state", "Tennessee"))


def test_descending_order_puts_unrated_first(memory_store):
    rows, count = memory_store.fetch(Query("places"), order=ORDER_BY_RATING)
    assert count is None
    assert [row["id"] for row in rows] == [5, 3, 1, 6, 2, 7, 4]


def test_ascending_order_puts_unrated_last(memory_store):
    rows, _ = memory_store.fetch(Query("places"), order=Order("rating"))
    assert [row["id"] for row in rows][-1] == 5


def test_fetch_window_and_count(memory_store):
    query = Query("places").where(Equals("province_state", "Tennessee"))
    rows, count = memory_store.fetch(query, order=ORDER_BY_RATING, start=1, end=2, with_count=True)
    assert count == 5
    assert [row["id"] for row in rows] == [1, 6]
    assert memory_store.count(query) == 5


def test_fetch_returns_copies(memory_store):
    rows, _ = memory_store.fetch(Query("places"))
    rows[0]["title"] = "changed"
    assert memory_store.get_place(rows[0]["id"])["title"] != "changed"


def test_unknown_resource_is_empty(memory_store):
    assert memory_store.count(Query("reviews")) == 0


def test_from_json_loads_places_and_directory():
    store = InMemoryStore.from_json(FIXTURES_DIR / "places_subset.json")
    assert store.get_place(4)["title"] == "Sweeps Luck"
    assert store.get_place(404) is None
    assert [row["name"] for row in store.list_directory()] == ["Tennessee", "Texas"]


def test_list_locations(memory_store):
    assert memory_store.list_locations() == ["Tennessee", "Texas"]
    assert memory_store.list_locations("Tennessee") == ["Franklin", "Memphis", "Nashville"]
    assert memory_store.list_locations("Ohio") == []
