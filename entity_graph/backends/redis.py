"""Redis backend: persistent key-value stores and link service.

Layout under a configurable key prefix:

- ``{prefix}:{entity_type}``: hash of entity id to serialized entity
- ``{prefix}:links``: hash of link id to serialized link
- ``{prefix}:links:source:{entity_id}`` / ``{prefix}:links:target:{entity_id}``: sets of link ids

Nothing here takes a lock. Multi-key and check-then-write steps run as
WATCH/MULTI transactions, which redis-py retries when a watched key changes.
"""

import copy
import json
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.asyncio.client import Pipeline
from redis.exceptions import RedisError

from entity_graph.backend import E, LinkService, Store
from entity_graph.errors import BackendError, ConflictError, NotFoundError
from entity_graph.models import Entity, Link

logger = structlog.get_logger()

DEFAULT_PREFIX = "entity_graph"


def _decode(raw: str | bytes) -> dict[str, Any]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)


class RedisStore(Store[E]):
    """Store keeping one entity type in a Redis hash keyed by entity id."""

    def __init__(self, client: Redis, entity_cls: type[E], prefix: str = DEFAULT_PREFIX) -> None:
        """Initialize Redis store.

        Args:
            client: redis.asyncio client shared across stores
            entity_cls: Entity type held by this store
            prefix: Key prefix namespacing every table
        """
        super().__init__(entity_cls)
        self.client = client
        self.key = f"{prefix}:{entity_cls.entity_type}"
        logger.debug("Redis store initialized", entity_type=self.entity_type, key=self.key)

    def _failure(self, action: str, error: Exception) -> BackendError:
        logger.error("Redis store operation failed", action=action, entity_type=self.entity_type, error=str(error))
        return BackendError(f"Failed to {action} {self.entity_type}: {error}")

    def _load(self, raw: str | bytes) -> E:
        try:
            return self.entity_cls.from_dict(_decode(raw))
        except (ValueError, TypeError, KeyError) as e:
            raise self._failure("decode", e) from e

    async def create(self, entity: E) -> E:
        payload = json.dumps(entity.to_dict())
        try:
            created = await self.client.hsetnx(self.key, entity.id, payload)
        except RedisError as e:
            raise self._failure("create", e) from e

        if not created:
            logger.info("Entity create conflict", entity_type=self.entity_type, entity_id=entity.id)
            raise ConflictError(self.entity_type, entity.id)
        logger.info("Entity created", entity_type=self.entity_type, entity_id=entity.id)
        return copy.copy(entity)

    async def get(self, entity_id: str) -> E:
        try:
            raw = await self.client.hget(self.key, entity_id)
        except RedisError as e:
            raise self._failure("get", e) from e

        if raw is None:
            raise NotFoundError(self.entity_type, entity_id)
        logger.debug("Entity read", entity_type=self.entity_type, entity_id=entity_id)
        return self._load(raw)

    async def update(self, entity: E) -> E:
        updated = entity.touched()
        payload = json.dumps(updated.to_dict())

        async def replace(pipe: Pipeline) -> None:
            if not await pipe.hexists(self.key, entity.id):
                raise NotFoundError(self.entity_type, entity.id)
            pipe.multi()
            pipe.hset(self.key, entity.id, payload)

        try:
            await self.client.transaction(replace, self.key)
        except RedisError as e:
            raise self._failure("update", e) from e

        logger.info("Entity updated", entity_type=self.entity_type, entity_id=entity.id)
        return updated

    async def delete(self, entity_id: str) -> None:
        try:
            removed = await self.client.hdel(self.key, entity_id)
        except RedisError as e:
            raise self._failure("delete", e) from e

        if not removed:
            raise NotFoundError(self.entity_type, entity_id)
        logger.info("Entity deleted", entity_type=self.entity_type, entity_id=entity_id)

    async def list(self) -> list[E]:
        try:
            entities = [self._load(raw) async for _, raw in self.client.hscan_iter(self.key)]
        except RedisError as e:
            raise self._failure("list", e) from e

        entities.sort(key=lambda entity: (entity.created_at, entity.id))
        logger.debug("Listed entities", entity_type=self.entity_type, count=len(entities))
        return entities


class RedisLinkService(LinkService):
    """Link service over a Redis hash plus source/target index sets."""

    def __init__(self, client: Redis, prefix: str = DEFAULT_PREFIX) -> None:
        self.client = client
        self.key = f"{prefix}:links"
        logger.debug("Redis link service initialized", key=self.key)

    def _source_key(self, source_id: str) -> str:
        return f"{self.key}:source:{source_id}"

    def _target_key(self, target_id: str) -> str:
        return f"{self.key}:target:{target_id}"

    def _failure(self, action: str, error: Exception) -> BackendError:
        logger.error("Redis link operation failed", action=action, error=str(error))
        return BackendError(f"Failed to {action} link: {error}")

    def _load(self, raw: str | bytes) -> Link:
        try:
            return Link.from_dict(_decode(raw))
        except (ValueError, TypeError, KeyError) as e:
            raise self._failure("decode", e) from e

    async def _fetch(self, index_key: str, relation: str | None) -> list[Link]:
        try:
            link_ids = sorted(await self.client.smembers(index_key))
            raws = await self.client.hmget(self.key, link_ids) if link_ids else []
        except RedisError as e:
            raise self._failure("query", e) from e

        # Index entries without a primary record are skipped.
        links = [self._load(raw) for raw in raws if raw is not None]
        if relation is not None:
            links = [link for link in links if link.relation == relation]
        links.sort(key=lambda link: (link.created_at, link.id))
        return links

    async def create(self, link: Link) -> Link:
        payload = json.dumps(link.to_dict())

        async def insert(pipe: Pipeline) -> None:
            if await pipe.hexists(self.key, link.id):
                raise ConflictError("link", link.id)
            pipe.multi()
            pipe.hset(self.key, link.id, payload)
            pipe.sadd(self._source_key(link.source_id), link.id)
            pipe.sadd(self._target_key(link.target_id), link.id)

        try:
            await self.client.transaction(insert, self.key)
        except RedisError as e:
            raise self._failure("create", e) from e

        logger.info(
            "Link created",
            link_id=link.id,
            relation=link.relation,
            source_id=link.source_id,
            target_id=link.target_id,
        )
        return copy.deepcopy(link)

    async def get(self, link_id: str) -> Link:
        try:
            raw = await self.client.hget(self.key, link_id)
        except RedisError as e:
            raise self._failure("get", e) from e

        if raw is None:
            raise NotFoundError("link", link_id)
        return self._load(raw)

    async def find_by_source(self, source_id: str, relation: str | None = None) -> list[Link]:
        links = await self._fetch(self._source_key(source_id), relation)
        logger.debug("Found links by source", source_id=source_id, relation=relation, count=len(links))
        return links

    async def find_by_target(self, target_id: str, relation: str | None = None) -> list[Link]:
        links = await self._fetch(self._target_key(target_id), relation)
        logger.debug("Found links by target", target_id=target_id, relation=relation, count=len(links))
        return links

    async def delete(self, link_id: str) -> None:
        async def remove(pipe: Pipeline) -> None:
            raw = await pipe.hget(self.key, link_id)
            if raw is None:
                raise NotFoundError("link", link_id)
            link = self._load(raw)
            pipe.multi()
            pipe.hdel(self.key, link_id)
            pipe.srem(self._source_key(link.source_id), link_id)
            pipe.srem(self._target_key(link.target_id), link_id)

        try:
            await self.client.transaction(remove, self.key)
        except RedisError as e:
            raise self._failure("delete", e) from e

        logger.info("Link deleted", link_id=link_id)


def redis_stores(
    client: Redis,
    entity_types: dict[str, type[Entity]],
    prefix: str = DEFAULT_PREFIX,
) -> dict[str, RedisStore]:
    """One Redis store per entity type, sharing a client."""
    return {name: RedisStore(client, cls, prefix=prefix) for name, cls in entity_types.items()}
