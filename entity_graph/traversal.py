"""Nested resource traversal over the link graph.

``orders/{oid}/invoices/{iid}/payments`` resolves hop by hop: each hop is one
link query for the current entity plus one concurrent batch read of the far
ends through the target type's store.
"""

import asyncio
from typing import Any

import structlog

from entity_graph.errors import NotFoundError, ValidationError
from entity_graph.models import Link
from entity_graph.registry import EntityRegistry, LinkRoute

logger = structlog.get_logger()


class Traverser:
    """Resolve related entities and nested paths through an EntityRegistry."""

    def __init__(self, registry: EntityRegistry) -> None:
        self.registry = registry

    async def _links(self, route: LinkRoute, entity_id: str) -> list[Link]:
        service = self.registry.link_service
        if route.reverse:
            return await service.find_by_target(entity_id, route.relation)
        return await service.find_by_source(entity_id, route.relation)

    @staticmethod
    def _far_end(route: LinkRoute, link: Link) -> str:
        return link.source_id if route.reverse else link.target_id

    async def _fetch_many(self, route: LinkRoute, entity_ids: list[str]) -> list[dict[str, Any]]:
        facade = self.registry.facade(route.target_type)
        results = await asyncio.gather(
            *(facade.fetch_as_json(entity_id) for entity_id in entity_ids),
            return_exceptions=True,
        )

        entities = []
        for entity_id, result in zip(entity_ids, results):
            if isinstance(result, NotFoundError):
                # Deleting an entity leaves its links in place.
                logger.warning("Skipping dangling link", entity_type=route.target_type, entity_id=entity_id)
                continue
            if isinstance(result, BaseException):
                raise result
            entities.append(result)
        return entities

    async def related(self, entity_type: str, entity_id: str, segment: str) -> list[dict[str, Any]]:
        """Entities reached from one entity through the route named ``segment``."""
        route = self.registry.route(self.registry.resolve_type(entity_type), segment)
        links = await self._links(route, entity_id)
        # Duplicate links to the same entity yield it once.
        far_ids = list(dict.fromkeys(self._far_end(route, link) for link in links))
        related = await self._fetch_many(route, far_ids)
        logger.debug(
            "Resolved related entities",
            entity_type=route.source_type,
            entity_id=entity_id,
            segment=segment,
            count=len(related),
        )
        return related

    async def resolve(self, path: str) -> dict[str, Any] | list[dict[str, Any]]:
        """Resolve a nested path to an entity (even segment count) or a collection (odd).

        Paths with more hops than the registry's ``max_depth`` are rejected up
        front. The limit is a configurable guard; the link graph itself places
        no bound on depth.
        """
        segments = [segment for segment in path.strip("/").split("/") if segment]
        if not segments:
            raise ValidationError("path", "empty path")

        hops = (len(segments) - 1) // 2
        if hops > self.registry.max_depth:
            raise ValidationError("path", f"traversal depth {hops} exceeds maximum {self.registry.max_depth}")

        entity_type = self.registry.resolve_type(segments[0])
        if len(segments) == 1:
            return await self.registry.facade(entity_type).list_as_json()

        entity_id = segments[1]
        current = await self.registry.facade(entity_type).fetch_as_json(entity_id)

        position = 2
        while position < len(segments):
            route = self.registry.route(entity_type, segments[position])
            links = await self._links(route, entity_id)
            far_ids = list(dict.fromkeys(self._far_end(route, link) for link in links))

            if position + 1 == len(segments):
                return await self._fetch_many(route, far_ids)

            next_id = segments[position + 1]
            if next_id not in far_ids:
                raise NotFoundError(route.target_type, next_id)
            current = await self.registry.facade(route.target_type).fetch_as_json(next_id)
            entity_type, entity_id = route.target_type, next_id
            position += 2

        return current
