"""Shared fixtures: every backend-facing test runs against both backends."""

import fakeredis
import pytest

from entity_graph.backend import LinkService, Store
from entity_graph.backends import InMemoryLinkService, InMemoryStore, RedisLinkService, RedisStore
from entity_graph.entities import Invoice, Order
from entity_graph.registry import EntityRegistry

BACKENDS = ["memory", "redis"]


def fake_redis() -> fakeredis.FakeAsyncRedis:
    """A Redis client bound to its own in-process server."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture(params=BACKENDS)
def backend_name(request: pytest.FixtureRequest) -> str:
    return request.param


@pytest.fixture
def invoice_store(backend_name: str) -> Store[Invoice]:
    if backend_name == "memory":
        return InMemoryStore(Invoice)
    return RedisStore(fake_redis(), Invoice, prefix="test")


@pytest.fixture
def order_store(backend_name: str) -> Store[Order]:
    if backend_name == "memory":
        return InMemoryStore(Order)
    return RedisStore(fake_redis(), Order, prefix="test")


@pytest.fixture
def link_service(backend_name: str) -> LinkService:
    if backend_name == "memory":
        return InMemoryLinkService()
    return RedisLinkService(fake_redis(), prefix="test")


@pytest.fixture
def registry(backend_name: str) -> EntityRegistry:
    if backend_name == "memory":
        return EntityRegistry.in_memory()
    return EntityRegistry.redis(fake_redis(), prefix="test")


@pytest.fixture
def redis_client() -> fakeredis.FakeAsyncRedis:
    return fake_redis()
