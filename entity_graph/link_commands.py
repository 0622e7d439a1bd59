"""Link management commands for entity graph CLI."""

from cyclopts import App

from entity_graph.models import Link

link_app = App(name="link", help="Manage links between entities")


@link_app.command
def add(
    source_id: str,
    target_id: str,
    relation: str,
    metadata: str | None = None,
) -> None:
    """Add a link from a source entity to a target entity."""
    from entity_graph.cli import emit, parse_data, run

    attributes = parse_data(metadata) if metadata else {}
    link = run(lambda registry: registry.link(source_id, target_id, relation, attributes))
    emit(link.to_dict())


@link_app.command
def get(link_id: str) -> None:
    """Get a link by ID."""
    from entity_graph.cli import emit, run

    link = run(lambda registry: registry.link_service.get(link_id))
    emit(link.to_dict())


@link_app.command(name="list")
def list_links(
    source: str | None = None,
    target: str | None = None,
    relation: str | None = None,
) -> None:
    """List links leaving a source entity or arriving at a target entity."""
    from entity_graph.cli import run

    if (source is None) == (target is None):
        print("Pass exactly one of --source or --target")
        return

    async def find(registry) -> list[Link]:
        if source is not None:
            return await registry.link_service.find_by_source(source, relation)
        return await registry.link_service.find_by_target(target, relation)

    links = run(find)
    if not links:
        print(f"No links found for entity {source or target}")
        return

    for link in links:
        print(f"  {link.id}: {link.source_id} --[{link.relation}]--> {link.target_id}")


@link_app.command
def delete(link_id: str) -> None:
    """Delete a link by ID."""
    from entity_graph.cli import run

    run(lambda registry: registry.link_service.delete(link_id))
    print(f"Deleted link {link_id}")
