"""Tests for in-memory backend specifics."""

import pytest

from entity_graph.backends import InMemoryLinkService, InMemoryStore, in_memory_stores
from entity_graph.entities import ENTITY_TYPES, Invoice
from entity_graph.models import Link


@pytest.mark.asyncio
async def test_store_copies_on_the_way_in_and_out() -> None:
    """Test mutating a caller's object never changes the stored entity."""
    store = InMemoryStore(Invoice)
    invoice = Invoice(number="INV-001", amount=1.0)
    await store.create(invoice)

    invoice.number = "CHANGED"
    fetched = await store.get(invoice.id)
    fetched.amount = 500.0

    stored = await store.get(invoice.id)
    assert stored.number == "INV-001"
    assert stored.amount == 1.0


@pytest.mark.asyncio
async def test_list_keeps_insertion_order() -> None:
    """Test listing follows creation order."""
    store = InMemoryStore(Invoice)
    numbers = [f"INV-{i:03d}" for i in range(5)]
    for number in numbers:
        await store.create(Invoice(number=number))
    assert [invoice.number for invoice in await store.list()] == numbers


@pytest.mark.asyncio
async def test_link_metadata_is_copied() -> None:
    """Test link metadata returned to callers is detached from storage."""
    service = InMemoryLinkService()
    link = await service.create(Link(source_id="a", target_id="b", relation="has_tag", metadata={"tags": ["x"]}))

    found = await service.find_by_source("a")
    found[0].metadata["tags"].append("y")

    assert (await service.get(link.id)).metadata == {"tags": ["x"]}


@pytest.mark.asyncio
async def test_delete_drops_empty_index_entries() -> None:
    """Test index buckets disappear with their last link."""
    service = InMemoryLinkService()
    link = await service.create(Link(source_id="a", target_id="b", relation="has_tag"))
    await service.delete(link.id)
    assert service._by_source == {}
    assert service._by_target == {}


def test_in_memory_stores_cover_every_type() -> None:
    """Test the helper builds one store per entity type."""
    stores = in_memory_stores(ENTITY_TYPES)
    assert set(stores) == set(ENTITY_TYPES)
    assert all(store.entity_type == name for name, store in stores.items())
