"""In-memory backend: transient, process-local stores and link service."""

import copy

import structlog

from entity_graph.backend import E, LinkService, Store
from entity_graph.errors import ConflictError, NotFoundError
from entity_graph.locking import ReadWriteLock
from entity_graph.models import Entity, Link

logger = structlog.get_logger()


class InMemoryStore(Store[E]):
    """Store keeping one entity type's instances in a dict guarded by a read/write lock.

    Copies cross the boundary in both directions, so callers never hold a
    reference to the stored object.
    """

    def __init__(self, entity_cls: type[E]) -> None:
        super().__init__(entity_cls)
        self._entities: dict[str, E] = {}
        self._lock = ReadWriteLock()
        logger.debug("In-memory store initialized", entity_type=self.entity_type)

    async def create(self, entity: E) -> E:
        async with self._lock.write():
            if entity.id in self._entities:
                logger.info("Entity create conflict", entity_type=self.entity_type, entity_id=entity.id)
                raise ConflictError(self.entity_type, entity.id)
            self._entities[entity.id] = copy.copy(entity)
        logger.info("Entity created", entity_type=self.entity_type, entity_id=entity.id)
        return copy.copy(entity)

    async def get(self, entity_id: str) -> E:
        async with self._lock.read():
            entity = self._entities.get(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_type, entity_id)
        logger.debug("Entity read", entity_type=self.entity_type, entity_id=entity_id)
        return copy.copy(entity)

    async def update(self, entity: E) -> E:
        updated = entity.touched()
        async with self._lock.write():
            if entity.id not in self._entities:
                raise NotFoundError(self.entity_type, entity.id)
            self._entities[entity.id] = copy.copy(updated)
        logger.info("Entity updated", entity_type=self.entity_type, entity_id=entity.id)
        return updated

    async def delete(self, entity_id: str) -> None:
        async with self._lock.write():
            if self._entities.pop(entity_id, None) is None:
                raise NotFoundError(self.entity_type, entity_id)
        logger.info("Entity deleted", entity_type=self.entity_type, entity_id=entity_id)

    async def list(self) -> list[E]:
        async with self._lock.read():
            snapshot = [copy.copy(entity) for entity in self._entities.values()]
        logger.debug("Listed entities", entity_type=self.entity_type, count=len(snapshot))
        return snapshot


class InMemoryLinkService(LinkService):
    """Link service with a primary id map and source/target indexes.

    The indexes hold link ids in insertion order and are only mutated under
    the write lock together with the primary map.
    """

    def __init__(self) -> None:
        self._links: dict[str, Link] = {}
        self._by_source: dict[str, list[str]] = {}
        self._by_target: dict[str, list[str]] = {}
        self._lock = ReadWriteLock()

    def _collect(self, link_ids: list[str], relation: str | None) -> list[Link]:
        links = [self._links[link_id] for link_id in link_ids]
        if relation is not None:
            links = [link for link in links if link.relation == relation]
        links.sort(key=lambda link: link.created_at)
        return [copy.deepcopy(link) for link in links]

    async def create(self, link: Link) -> Link:
        async with self._lock.write():
            if link.id in self._links:
                raise ConflictError("link", link.id)
            self._links[link.id] = copy.deepcopy(link)
            self._by_source.setdefault(link.source_id, []).append(link.id)
            self._by_target.setdefault(link.target_id, []).append(link.id)
        logger.info(
            "Link created",
            link_id=link.id,
            relation=link.relation,
            source_id=link.source_id,
            target_id=link.target_id,
        )
        return copy.deepcopy(link)

    async def get(self, link_id: str) -> Link:
        async with self._lock.read():
            link = self._links.get(link_id)
            if link is None:
                raise NotFoundError("link", link_id)
            return copy.deepcopy(link)

    async def find_by_source(self, source_id: str, relation: str | None = None) -> list[Link]:
        async with self._lock.read():
            links = self._collect(self._by_source.get(source_id, []), relation)
        logger.debug("Found links by source", source_id=source_id, relation=relation, count=len(links))
        return links

    async def find_by_target(self, target_id: str, relation: str | None = None) -> list[Link]:
        async with self._lock.read():
            links = self._collect(self._by_target.get(target_id, []), relation)
        logger.debug("Found links by target", target_id=target_id, relation=relation, count=len(links))
        return links

    async def delete(self, link_id: str) -> None:
        async with self._lock.write():
            link = self._links.pop(link_id, None)
            if link is None:
                raise NotFoundError("link", link_id)
            _unindex(self._by_source, link.source_id, link_id)
            _unindex(self._by_target, link.target_id, link_id)
        logger.info("Link deleted", link_id=link_id)


def _unindex(index: dict[str, list[str]], key: str, link_id: str) -> None:
    link_ids = index.get(key)
    if link_ids is None:
        return
    link_ids.remove(link_id)
    if not link_ids:
        del index[key]


def in_memory_stores(entity_types: dict[str, type[Entity]]) -> dict[str, InMemoryStore]:
    """One in-memory store per entity type."""
    return {name: InMemoryStore(cls) for name, cls in entity_types.items()}
