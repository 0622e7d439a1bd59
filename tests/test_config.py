"""Tests for YAML configuration."""

from pathlib import Path

import pytest
import yaml

from entity_graph.config import DEFAULTS, Config


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user's home directory at a temporary directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


def test_defaults_when_unset(home: Path, tmp_path: Path) -> None:
    """Test built-in defaults are returned for known keys."""
    config = Config(config_dir=tmp_path / "local")
    assert config.get("backend") == "redis"
    assert config.get_int("traversal.max_depth") == 5
    assert config.get("unknown") is None
    assert config.get("unknown", "fallback") == "fallback"


def test_set_persists_to_yaml(home: Path, tmp_path: Path) -> None:
    """Test set values are written to config.yaml and read back."""
    config_dir = tmp_path / "local"
    Config(config_dir=config_dir).set("backend", "memory")

    assert yaml.safe_load((config_dir / "config.yaml").read_text()) == {"backend": "memory"}
    assert Config(config_dir=config_dir).get("backend") == "memory"


def test_local_overrides_global(home: Path, tmp_path: Path) -> None:
    """Test local values win over global ones, which win over defaults."""
    Config(use_global=True).set("redis.prefix", "global_prefix")
    Config(use_global=True).set("redis.url", "redis://global:6379/0")
    local = Config(config_dir=tmp_path / "local")
    local.set("redis.url", "redis://local:6379/0")

    assert local.get("redis.url") == "redis://local:6379/0"
    assert local.get("redis.prefix") == "global_prefix"
    assert local.list() == {"redis.prefix": "global_prefix", "redis.url": "redis://local:6379/0"}


def test_unset_falls_back(home: Path, tmp_path: Path) -> None:
    """Test unsetting a key restores the default."""
    config = Config(config_dir=tmp_path / "local")
    config.set("traversal.max_depth", "2")
    assert config.get_int("traversal.max_depth") == 2

    config.unset("traversal.max_depth")
    assert config.get("traversal.max_depth") == DEFAULTS["traversal.max_depth"]


def test_get_int_rejects_non_integers(home: Path, tmp_path: Path) -> None:
    """Test a non-numeric value is reported with its key."""
    config = Config(config_dir=tmp_path / "local")
    config.set("traversal.max_depth", "deep")
    with pytest.raises(ValueError, match="traversal.max_depth"):
        config.get_int("traversal.max_depth")


def test_corrupt_file_is_an_error(home: Path, tmp_path: Path) -> None:
    """Test an unreadable config file raises instead of being ignored."""
    config_dir = tmp_path / "local"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("backend: [unclosed\n")
    with pytest.raises(ValueError, match="Failed to load config"):
        Config(config_dir=config_dir)
