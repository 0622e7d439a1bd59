"""CLI for entity graph."""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Literal, TypeVar

import structlog
from cyclopts import App, Parameter
from redis.asyncio import Redis

from entity_graph.config import get_config
from entity_graph.config_commands import config_app
from entity_graph.errors import StoreError, ValidationError
from entity_graph.link_commands import link_app
from entity_graph.registry import EntityRegistry
from entity_graph.seed import populate_all
from entity_graph.traversal import Traverser

logger = structlog.get_logger()

T = TypeVar("T")

app = App(
    help="Entity Graph - Validated entity stores linked by named relations",
)

app.command(link_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


async def _with_registry(operation: Callable[[EntityRegistry], Awaitable[T]]) -> T:
    """Run ``operation`` against the configured backend."""
    config = get_config()
    backend_type = config.get("backend")
    try:
        max_depth = config.get_int("traversal.max_depth")
    except ValueError as e:
        raise ValidationError("traversal.max_depth", "must be a positive integer") from e

    if backend_type == "memory":
        return await operation(EntityRegistry.in_memory(max_depth=max_depth))
    elif backend_type == "redis":
        client = Redis.from_url(config.get("redis.url"), decode_responses=True)
        try:
            registry = EntityRegistry.redis(client, prefix=config.get("redis.prefix"), max_depth=max_depth)
            return await operation(registry)
        finally:
            await client.aclose()
    else:
        raise ValidationError("backend", f"unknown backend {backend_type!r}, expected memory or redis")


def run(operation: Callable[[EntityRegistry], Awaitable[T]]) -> T:
    """Run an async operation, printing typed store errors as structured output."""
    try:
        return asyncio.run(_with_registry(operation))
    except StoreError as e:
        logger.debug("Command failed", error=e.kind, details=e.message)
        print(json.dumps(e.to_dict(), indent=2))
        sys.exit(1)


def parse_data(data: str) -> dict[str, Any]:
    """Parse a JSON object passed on the command line."""
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        print(json.dumps(ValidationError("data", f"invalid JSON: {e}").to_dict(), indent=2))
        sys.exit(1)
    return parsed


def emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


@app.command
def create(entity_type: str, data: str) -> None:
    """Create an entity from a JSON object of fields."""
    raw = parse_data(data)
    emit(run(lambda registry: registry.facade(entity_type).create_from_json(raw)))


@app.command
def get(entity_type: str, entity_id: str) -> None:
    """Get an entity by ID."""
    emit(run(lambda registry: registry.facade(entity_type).fetch_as_json(entity_id)))


@app.command(name="list")
def list_entities(entity_type: str, limit: int = 20, offset: int = 0) -> None:
    """List one page of entities of a type."""
    emit(run(lambda registry: registry.facade(entity_type).list_as_json(limit=limit, offset=offset)))


@app.command
def update(entity_type: str, entity_id: str, data: str) -> None:
    """Update an entity from a JSON object of changed fields."""
    raw = parse_data(data)
    emit(run(lambda registry: registry.facade(entity_type).update_from_json(entity_id, raw)))


@app.command
def delete(entity_type: str, entity_id: str) -> None:
    """Delete an entity. Links referencing it are kept."""
    run(lambda registry: registry.facade(entity_type).delete(entity_id))
    print(f"Deleted {entity_type} {entity_id}")


@app.command
def traverse(path: str) -> None:
    """Resolve a nested path such as orders/<id>/invoices/<id>/payments."""
    emit(run(lambda registry: Traverser(registry).resolve(path)))


@app.command
def types() -> None:
    """List entity types with their plural path segment and outgoing routes."""
    registry = EntityRegistry.in_memory()
    for entity_type in registry.entity_types:
        facade = registry.facade(entity_type)
        print(f"{entity_type} ({facade.entity_cls.plural})")
        for route in registry.routes_from(entity_type):
            direction = "<-" if route.reverse else "->"
            print(f"  {route.segment}: {direction} {route.target_type} [{route.relation}]")


@app.command
def seed() -> None:
    """Populate the configured backend with sample billing, catalog and inventory data."""
    created = run(populate_all)
    for plural, ids in created.items():
        print(f"{plural}: {len(ids)} created")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
