import json
from pathlib import Path

import pytest

from directory.exceptions import StoreError
from storage.memory_store import InMemoryStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str):
    with open(FIXTURES_DIR / name, "r", encoding="utf-8") as f:
        return json.load(f)


class RecordingStore(InMemoryStore):
    """Memory store that remembers every query it was asked to run."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.count_calls = []
        self.fetch_calls = []

    def count(self, query):
        self.count_calls.append(query)
        return super().count(query)

    def fetch(self, query, **kwargs):
        self.fetch_calls.append((query, kwargs))
        return super().fetch(query, **kwargs)


class BrokenStore(InMemoryStore):
    """Store whose calls fail, either as reported store errors or as crashes."""

    def __init__(self, *, fail_count=False, fail_fetch=False, crash=False, **kwargs):
        super().__init__(**kwargs)
        self.fail_count = fail_count
        self.fail_fetch = fail_fetch
        self.crash = crash

    def _fail(self):
        if self.crash:
            raise RuntimeError("connection reset by peer")
        raise StoreError("relation \"places\" does not exist")

    def count(self, query):
        if self.fail_count:
            self._fail()
        return super().count(query)

    def fetch(self, query, **kwargs):
        if self.fail_fetch:
            self._fail()
        return super().fetch(query, **kwargs)

    def list_directory(self):
        self._fail()


@pytest.fixture()
def places_payload():
    return load_fixture("places_subset.json")


@pytest.fixture()
def memory_store(places_payload):
    return InMemoryStore(places=places_payload["places"], directory=places_payload["directory"])


@pytest.fixture()
def recording_store(places_payload):
    return RecordingStore(places=places_payload["places"], directory=places_payload["directory"])
