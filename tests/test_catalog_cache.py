import sqlite3

import pytest
from conftest import FakeClock, program_document

from community_sport_api.app.services.catalog_cache import CatalogCache


class _CountingStore:
    def __init__(self, programs=(), faqs=()):
        self.documents = {"programs": list(programs), "faqs": list(faqs)}
        self.list_calls = {"programs": 0, "faqs": 0}
        self.get_calls = 0
        self.fail = False

    async def list_all(self, collection):
        if self.fail:
            raise sqlite3.OperationalError("database is locked")
        self.list_calls[collection] += 1
        return [dict(doc) for doc in self.documents[collection]]

    async def get(self, collection, document_id):
        self.get_calls += 1
        for doc in self.documents[collection]:
            if doc["id"] == document_id:
                return dict(doc)
        return None


def _store():
    return _CountingStore(
        programs=[
            {"id": "p1", **program_document(title="Netball Night")},
            {"id": "p2", **program_document(title="Aqua Fit", cost=12)},
        ],
        faqs=[
            {"id": "f2", "question": "Second?", "answer": "Yes", "position": 2},
            {"id": "f1", "question": "First?", "answer": "Yes", "position": 1},
        ],
    )


@pytest.mark.asyncio
async def test_programs_are_served_from_cache_until_the_window_ends():
    store, clock = _store(), FakeClock()
    cache = CatalogCache(store, ttl_seconds=300, clock=clock)

    first = await cache.get_programs()
    clock.advance(299)
    second = await cache.get_programs()

    assert [p.id for p in first] == ["p1", "p2"]
    assert second is first
    assert store.list_calls["programs"] == 1

    clock.advance(1)
    await cache.get_programs()
    assert store.list_calls["programs"] == 2


@pytest.mark.asyncio
async def test_clear_cache_drops_both_lists():
    store, clock = _store(), FakeClock()
    cache = CatalogCache(store, clock=clock)
    await cache.get_programs()
    await cache.get_faqs()

    cache.clear_cache()
    await cache.get_programs()
    await cache.get_faqs()

    assert store.list_calls == {"programs": 2, "faqs": 2}


@pytest.mark.asyncio
async def test_new_documents_appear_after_clear():
    store = _store()
    cache = CatalogCache(store, clock=FakeClock())
    await cache.get_programs()
    store.documents["programs"].append({"id": "p3", **program_document(title="Walking Group")})

    assert len(await cache.get_programs()) == 2
    cache.clear_cache()
    assert len(await cache.get_programs()) == 3


@pytest.mark.asyncio
async def test_get_program_uses_fresh_cache():
    store = _store()
    cache = CatalogCache(store, clock=FakeClock())
    await cache.get_programs()

    program = await cache.get_program("p2")

    assert program.title == "Aqua Fit"
    assert store.get_calls == 0


@pytest.mark.asyncio
async def test_get_program_without_cache_reads_store_and_does_not_fill_cache():
    store = _store()
    cache = CatalogCache(store, clock=FakeClock())

    program = await cache.get_program("p1")

    assert program.title == "Netball Night"
    assert store.get_calls == 1
    assert store.list_calls["programs"] == 0
    await cache.get_program("p1")
    assert store.get_calls == 2


@pytest.mark.asyncio
async def test_get_program_missing_returns_none():
    cache = CatalogCache(_store(), clock=FakeClock())
    assert await cache.get_program("nope") is None


@pytest.mark.asyncio
async def test_faqs_are_sorted_by_position():
    cache = CatalogCache(_store(), clock=FakeClock())
    faqs = await cache.get_faqs()
    assert [faq.id for faq in faqs] == ["f1", "f2"]


@pytest.mark.asyncio
async def test_failed_fetch_propagates_and_keeps_cache_empty():
    store = _store()
    cache = CatalogCache(store, clock=FakeClock())
    store.fail = True

    with pytest.raises(sqlite3.OperationalError):
        await cache.get_programs()

    store.fail = False
    assert len(await cache.get_programs()) == 2
    assert store.list_calls["programs"] == 1
