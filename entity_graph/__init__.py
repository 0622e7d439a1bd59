"""Entity graph: validated entity stores linked by named relations."""

from entity_graph.backend import LinkService, Store
from entity_graph.errors import BackendError, ConflictError, NotFoundError, StoreError, ValidationError
from entity_graph.facade import EntityFacade
from entity_graph.models import Entity, Link
from entity_graph.registry import EntityRegistry, LinkRoute
from entity_graph.traversal import Traverser

__all__ = [
    "BackendError",
    "ConflictError",
    "Entity",
    "EntityFacade",
    "EntityRegistry",
    "Link",
    "LinkRoute",
    "LinkService",
    "NotFoundError",
    "Store",
    "StoreError",
    "Traverser",
    "ValidationError",
]
