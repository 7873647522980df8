"""Tests for the cached index snapshot."""

import asyncio

import pytest

from src.core.errors import IndexLoadError
from src.core.services.index_service import IndexService
from src.infrastructure.lexical import ForwardIndex

from tests.helpers import MemoryIndexStore, build_blob

CHUNKS = {
    "lead#000": ("Leadership", "I lead with empowerment"),
    "teach#000": ("Teaching", "Mentoring students in robotics"),
}


@pytest.mark.asyncio
async def test_loads_once_and_caches():
    store = MemoryIndexStore(blob=build_blob(CHUNKS))
    service = IndexService(index_store=store, index_factory=ForwardIndex)

    first, second = await asyncio.gather(service.get(), service.get())

    assert first is second
    assert store.load_calls == 1
    assert service.is_loaded
    assert first.search("robotics") == ["teach#000"]


@pytest.mark.asyncio
async def test_cache_disabled_reloads_every_time():
    store = MemoryIndexStore(blob=build_blob(CHUNKS))
    service = IndexService(index_store=store, index_factory=ForwardIndex, cache=False)

    await service.get()
    await service.get()

    assert store.load_calls == 2


@pytest.mark.asyncio
async def test_refresh_swaps_snapshot_and_keeps_old_one_intact():
    store = MemoryIndexStore(blob=build_blob(CHUNKS))
    service = IndexService(index_store=store, index_factory=ForwardIndex)
    old = await service.get()

    store.blob = build_blob({"new#000": ("New", "Fresh content about quantum")})
    new = await service.refresh()

    assert (await service.get()) is new
    assert new.search("quantum") == ["new#000"]
    assert old.search("robotics") == ["teach#000"]
    assert old.get_record("new#000") is None


@pytest.mark.asyncio
async def test_invalidate_forces_reload():
    store = MemoryIndexStore(blob=build_blob(CHUNKS))
    service = IndexService(index_store=store, index_factory=ForwardIndex)
    await service.get()

    service.invalidate()
    assert not service.is_loaded
    await service.get()

    assert store.load_calls == 2


@pytest.mark.asyncio
async def test_rebuilds_from_store_without_serialized_index():
    store = MemoryIndexStore(blob=build_blob(CHUNKS, serialize=False))
    service = IndexService(index_store=store, index_factory=ForwardIndex)

    loaded = await service.get()

    assert loaded.search("empowerment") == ["lead#000"]
    # Titles are indexed during the rebuild as well
    assert loaded.search("leadership") == ["lead#000"]


@pytest.mark.asyncio
async def test_malformed_serialized_index_raises():
    blob = build_blob(CHUNKS)
    blob.index = {"tokenize": "unknown"}
    service = IndexService(index_store=MemoryIndexStore(blob=blob), index_factory=ForwardIndex)

    with pytest.raises(IndexLoadError):
        await service.get()


@pytest.mark.asyncio
async def test_store_error_propagates_and_nothing_is_cached():
    store = MemoryIndexStore(error=IndexLoadError("storage down"))
    service = IndexService(index_store=store, index_factory=ForwardIndex)

    with pytest.raises(IndexLoadError):
        await service.get()
    assert not service.is_loaded


class TestGetRecord:
    @pytest.mark.asyncio
    async def test_record_fields(self):
        service = IndexService(
            index_store=MemoryIndexStore(blob=build_blob(CHUNKS)), index_factory=ForwardIndex
        )
        loaded = await service.get()

        record = loaded.get_record("lead#000")

        assert record.title == "Leadership"
        assert record.text == "I lead with empowerment"
        assert record.source_id == "lead"
        assert record.section_id == "content"
        assert record.url == "/docs/lead"

    @pytest.mark.asyncio
    async def test_missing_store_text_falls_back_to_preview(self):
        blob = build_blob(CHUNKS)
        del blob.store["lead#000"]
        service = IndexService(index_store=MemoryIndexStore(blob=blob), index_factory=ForwardIndex)
        loaded = await service.get()

        assert loaded.get_record("lead#000").text == "I lead with empowerment"

    @pytest.mark.asyncio
    async def test_unknown_id_is_none(self):
        service = IndexService(
            index_store=MemoryIndexStore(blob=build_blob(CHUNKS)), index_factory=ForwardIndex
        )
        loaded = await service.get()

        assert loaded.get_record("gone#000") is None
