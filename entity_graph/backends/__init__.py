"""Backend implementations."""

from entity_graph.backends.memory import InMemoryLinkService, InMemoryStore, in_memory_stores
from entity_graph.backends.redis import RedisLinkService, RedisStore, redis_stores

__all__ = [
    "InMemoryLinkService",
    "InMemoryStore",
    "RedisLinkService",
    "RedisStore",
    "in_memory_stores",
    "redis_stores",
]
