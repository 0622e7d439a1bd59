"""Backend interfaces for entity stores and the link service."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from entity_graph.errors import ValidationError
from entity_graph.models import Entity, Link

E = TypeVar("E", bound=Entity)
T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20


def paginate(items: list[T], limit: int | None = DEFAULT_PAGE_SIZE, offset: int | None = 0) -> list[T]:
    """Skip ``offset`` items, then take ``limit``."""
    limit = DEFAULT_PAGE_SIZE if limit is None else limit
    offset = 0 if offset is None else offset
    if limit < 0:
        raise ValidationError("limit", "must not be negative")
    if offset < 0:
        raise ValidationError("offset", "must not be negative")
    return items[offset : offset + limit]


class Store(ABC, Generic[E]):
    """Abstract base class for the instances of one entity type."""

    def __init__(self, entity_cls: type[E]) -> None:
        self.entity_cls = entity_cls

    @property
    def entity_type(self) -> str:
        return self.entity_cls.entity_type

    @abstractmethod
    async def create(self, entity: E) -> E:
        """Persist a new entity, raising ConflictError if its id exists."""
        pass

    @abstractmethod
    async def get(self, entity_id: str) -> E:
        """Get an entity by ID."""
        pass

    @abstractmethod
    async def update(self, entity: E) -> E:
        """Replace the entity with the same ID."""
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> None:
        """Delete an entity by ID."""
        pass

    async def list_page(self, limit: int | None = DEFAULT_PAGE_SIZE, offset: int | None = 0) -> list[E]:
        """List one page of entities with skip/take semantics."""
        return paginate(await self.list(), limit, offset)

    # Declared last: the name shadows the builtin for the rest of the class body.
    @abstractmethod
    async def list(self) -> list[E]:
        """List every entity, in backend-defined order."""
        pass


class LinkService(ABC):
    """Abstract base class for storing and querying links."""

    @abstractmethod
    async def create(self, link: Link) -> Link:
        """Persist a link. Duplicate (relation, source, target) triples are allowed."""
        pass

    @abstractmethod
    async def get(self, link_id: str) -> Link:
        """Get a link by ID."""
        pass

    @abstractmethod
    async def find_by_source(self, source_id: str, relation: str | None = None) -> list[Link]:
        """Links leaving ``source_id``, optionally restricted to one relation."""
        pass

    @abstractmethod
    async def find_by_target(self, target_id: str, relation: str | None = None) -> list[Link]:
        """Links arriving at ``target_id``, optionally restricted to one relation."""
        pass

    @abstractmethod
    async def delete(self, link_id: str) -> None:
        """Delete a link by ID."""
        pass
