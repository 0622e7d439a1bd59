"""Tests for CLI commands, run against an in-process Redis server."""

import json
from collections.abc import Iterator
from pathlib import Path

import fakeredis
import pytest
import structlog
from redis.asyncio import Redis

from entity_graph import cli, config_commands, link_commands
from entity_graph.config import Config


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    """Keep log lines out of the captured command output."""
    cli.configure_logging("critical")
    yield
    structlog.reset_defaults()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run commands from an empty directory with an empty home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def redis_server(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> fakeredis.FakeServer:
    """Route every client the CLI opens to one fake server."""
    server = fakeredis.FakeServer()

    def from_url(url: str, **kwargs) -> fakeredis.FakeAsyncRedis:
        return fakeredis.FakeAsyncRedis(server=server, **kwargs)

    monkeypatch.setattr(Redis, "from_url", from_url)
    return server


def output(capsys: pytest.CaptureFixture[str]) -> dict | list:
    return json.loads(capsys.readouterr().out)


def test_create_get_and_list(redis_server: fakeredis.FakeServer, capsys: pytest.CaptureFixture[str]) -> None:
    """Test entities created from the CLI persist between commands."""
    cli.create("order", '{"number": "ord-001", "amount": 10, "status": "pending"}')
    created = output(capsys)
    assert created["number"] == "ORD-001"

    cli.get("orders", created["id"])
    assert output(capsys) == created

    cli.list_entities("order", limit=5)
    assert [order["id"] for order in output(capsys)] == [created["id"]]


def test_errors_are_printed_as_structured_output(
    redis_server: fakeredis.FakeServer, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test typed errors print their kind and exit non-zero."""
    with pytest.raises(SystemExit) as excinfo:
        cli.get("invoice", "missing")
    assert excinfo.value.code == 1
    assert output(capsys)["error"] == "not_found"

    with pytest.raises(SystemExit):
        cli.create("order", '{"number": "ORD-1", "amount": 10, "status": "shipped"}')
    assert output(capsys) == {
        "error": "validation",
        "details": "status: must be one of: pending, confirmed, cancelled, paid",
        "field": "status",
    }


def test_invalid_json_is_a_validation_error(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test malformed data never reaches the backend."""
    with pytest.raises(SystemExit):
        cli.create("order", "{not json")
    error = output(capsys)
    assert error["error"] == "validation"
    assert error["field"] == "data"


def test_link_and_traverse(redis_server: fakeredis.FakeServer, capsys: pytest.CaptureFixture[str]) -> None:
    """Test links added from the CLI are followed by traverse."""
    cli.create("order", '{"number": "ORD-001", "amount": 10, "status": "pending"}')
    order = output(capsys)
    cli.create("invoice", '{"number": "INV-001", "amount": 10, "status": "draft"}')
    invoice = output(capsys)

    link_commands.add(order["id"], invoice["id"], "has_invoice", metadata='{"note": "first"}')
    link = output(capsys)
    assert link["metadata"] == {"note": "first"}

    cli.traverse(f"orders/{order['id']}/invoices")
    assert [found["id"] for found in output(capsys)] == [invoice["id"]]

    link_commands.list_links(source=order["id"])
    assert link["id"] in capsys.readouterr().out


def test_seed_reports_counts(redis_server: fakeredis.FakeServer, capsys: pytest.CaptureFixture[str]) -> None:
    """Test seeding prints how many entities of each type were created."""
    cli.seed()
    out = capsys.readouterr().out
    assert "orders: 2 created" in out
    assert "usages:" in out


def test_memory_backend_does_not_persist(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the memory backend starts empty for every command."""
    Config(config_dir=workdir / ".entity-graph").set("backend", "memory")

    cli.create("tag", '{"name": "Sale"}')
    tag = output(capsys)
    with pytest.raises(SystemExit):
        cli.get("tag", tag["id"])
    assert output(capsys)["error"] == "not_found"


def test_config_set_validates_known_keys(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test unusable values for known keys are refused."""
    config_commands.set("backend", "postgres")
    assert "Refusing" in capsys.readouterr().out
    assert Config().get("backend") == "redis"

    config_commands.set("traversal.max_depth", "3")
    config_commands.list_config()
    out = capsys.readouterr().out
    assert "traversal.max_depth = 3" in out
    assert "backend = redis (default)" in out


def test_types_lists_routes(capsys: pytest.CaptureFixture[str]) -> None:
    """Test entity types are listed with their traversable segments."""
    cli.types()
    out = capsys.readouterr().out
    assert "order (orders)" in out
    assert "  invoices: -> invoice [has_invoice]" in out
    assert "  children: <- category [has_parent]" in out


def test_update_and_delete(redis_server: fakeredis.FakeServer, capsys: pytest.CaptureFixture[str]) -> None:
    """Test updates apply update rules and deletes remove the entity."""
    cli.create("invoice", '{"number": "INV-001", "amount": 10, "status": "draft"}')
    invoice = output(capsys)

    cli.update("invoice", invoice["id"], '{"status": " SENT "}')
    assert output(capsys)["status"] == "sent"

    cli.delete("invoice", invoice["id"])
    assert capsys.readouterr().out.strip() == f"Deleted invoice {invoice['id']}"
    with pytest.raises(SystemExit):
        cli.get("invoice", invoice["id"])
    assert output(capsys)["error"] == "not_found"


@pytest.mark.parametrize(
    ("key", "value"),
    [("backend", "postgres"), ("traversal.max_depth", "deep")],
)
def test_hand_edited_bad_config_is_a_validation_error(
    workdir: Path, capsys: pytest.CaptureFixture[str], key: str, value: str
) -> None:
    """Test unusable settings written around `config set` fail without a traceback."""
    Config(config_dir=workdir / ".entity-graph").set(key, value)

    with pytest.raises(SystemExit) as excinfo:
        cli.get("invoice", "any")

    assert excinfo.value.code == 1
    error = output(capsys)
    assert error["error"] == "validation"
    assert error["field"] == key


def test_link_metadata_must_be_an_object(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test list metadata from the command line is a validation error."""
    Config(config_dir=workdir / ".entity-graph").set("backend", "memory")

    with pytest.raises(SystemExit):
        link_commands.add("product-1", "tag-1", "has_tag", metadata="[1, 2]")
    assert output(capsys)["field"] == "metadata"
