"""Registry of entity stores, facades, the link service and route topology."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from redis.asyncio import Redis

from entity_graph.backend import LinkService, Store
from entity_graph.backends import InMemoryLinkService, RedisLinkService, in_memory_stores, redis_stores
from entity_graph.backends.redis import DEFAULT_PREFIX
from entity_graph.entities import ENTITY_TYPES
from entity_graph.errors import NotFoundError, ValidationError
from entity_graph.facade import EntityFacade
from entity_graph.models import Entity, Link

logger = structlog.get_logger()

DEFAULT_MAX_DEPTH = 5


@dataclass(frozen=True)
class LinkRoute:
    """One traversable hop: ``/{source plural}/{id}/{segment}``.

    Forward routes follow links whose source is the current entity; reverse
    routes follow links whose target is the current entity back to their source.
    """

    source_type: str
    segment: str
    relation: str
    target_type: str
    reverse: bool = False


DEFAULT_ROUTES = (
    LinkRoute("order", "invoices", "has_invoice", "invoice"),
    LinkRoute("invoice", "payments", "payment", "payment"),
    LinkRoute("product", "categories", "has_category", "category"),
    LinkRoute("category", "products", "has_category", "product", reverse=True),
    LinkRoute("product", "tags", "has_tag", "tag"),
    LinkRoute("tag", "products", "has_tag", "product", reverse=True),
    LinkRoute("category", "parent", "has_parent", "category"),
    LinkRoute("category", "children", "has_parent", "category", reverse=True),
    LinkRoute("store", "activities", "has_activity", "activity"),
    LinkRoute("activity", "stores", "has_activity", "store", reverse=True),
    LinkRoute("store", "warehouses", "has_warehouse", "warehouse"),
    LinkRoute("warehouse", "stock_items", "has_stock_item", "stock_item"),
    LinkRoute("stock_item", "movements", "has_movement", "stock_movement"),
    LinkRoute("stock_item", "product", "has_product", "product"),
    LinkRoute("activity", "usages", "has_usage", "usage"),
    LinkRoute("usage", "from_activity", "from_activity", "activity"),
)


class EntityRegistry:
    """Entity facades by type and plural, plus the shared link service."""

    def __init__(self, link_service: LinkService, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.link_service = link_service
        self.max_depth = max_depth
        self._facades: dict[str, EntityFacade] = {}
        self._plurals: dict[str, str] = {}
        self._routes: dict[tuple[str, str], LinkRoute] = {}

    @classmethod
    def in_memory(
        cls,
        entity_types: dict[str, type[Entity]] | None = None,
        routes: tuple[LinkRoute, ...] = DEFAULT_ROUTES,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> "EntityRegistry":
        """Registry with transient in-process stores."""
        registry = cls(InMemoryLinkService(), max_depth=max_depth)
        for store in in_memory_stores(entity_types or ENTITY_TYPES).values():
            registry.register(store)
        registry.add_routes(routes)
        return registry

    @classmethod
    def redis(
        cls,
        client: Redis,
        prefix: str = DEFAULT_PREFIX,
        entity_types: dict[str, type[Entity]] | None = None,
        routes: tuple[LinkRoute, ...] = DEFAULT_ROUTES,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> "EntityRegistry":
        """Registry with one Redis table per entity type and a Redis link table."""
        registry = cls(RedisLinkService(client, prefix=prefix), max_depth=max_depth)
        for store in redis_stores(client, entity_types or ENTITY_TYPES, prefix=prefix).values():
            registry.register(store)
        registry.add_routes(routes)
        return registry

    def register(self, store: Store) -> EntityFacade:
        facade = EntityFacade(store)
        self._facades[store.entity_type] = facade
        self._plurals[store.entity_cls.plural] = store.entity_type
        logger.debug("Entity type registered", entity_type=store.entity_type, plural=store.entity_cls.plural)
        return facade

    def add_routes(self, routes: tuple[LinkRoute, ...] | list[LinkRoute]) -> None:
        for route in routes:
            if route.source_type not in self._facades or route.target_type not in self._facades:
                logger.debug("Skipping route for unregistered entity type", route=route)
                continue
            self._routes[(route.source_type, route.segment)] = route

    @property
    def entity_types(self) -> list[str]:
        return list(self._facades)

    def facade(self, entity_type: str) -> EntityFacade:
        """Facade by entity type name or plural."""
        entity_type = self._plurals.get(entity_type, entity_type)
        try:
            return self._facades[entity_type]
        except KeyError:
            raise NotFoundError("entity type", entity_type) from None

    def resolve_type(self, name: str) -> str:
        """Entity type name for a type name or plural."""
        return self.facade(name).entity_type

    def route(self, source_type: str, segment: str) -> LinkRoute:
        try:
            return self._routes[(source_type, segment)]
        except KeyError:
            raise NotFoundError("route", f"{source_type}/{segment}") from None

    def routes_from(self, source_type: str) -> list[LinkRoute]:
        return [route for (source, _), route in self._routes.items() if source == source_type]

    async def link(
        self,
        source_id: str,
        target_id: str,
        relation: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> Link:
        """Create a link between two existing ids. Not transactional with entity writes."""
        if metadata is None:
            metadata = {}
        elif not isinstance(metadata, Mapping):
            raise ValidationError("metadata", "expected an object")
        return await self.link_service.create(
            Link(source_id=source_id, target_id=target_id, relation=relation, metadata=dict(metadata))
        )
