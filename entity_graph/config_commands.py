"""Configuration commands for entity graph CLI."""

from cyclopts import App

from entity_graph.config import DEFAULTS, get_config

config_app = App(name="config", help="Manage backend and traversal configuration")

BACKENDS = ("memory", "redis")


def _check(key: str, value: str) -> str | None:
    """Reason a value is unusable for a known key, or None."""
    if key == "backend" and value not in BACKENDS:
        return f"backend must be one of: {', '.join(BACKENDS)}"
    if key == "traversal.max_depth" and not (value.isdigit() and int(value) > 0):
        return "traversal.max_depth must be a positive integer"
    return None


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Args:
        key: Configuration key (backend, redis.url, redis.prefix, traversal.max_depth)
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    reason = _check(key, value)
    if reason:
        print(f"Refusing to set {key}: {reason}")
        return

    get_config(use_global=global_).set(key, value)
    print(f"Set {key} = {value} ({'global' if global_ else 'local'})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting, falling back to the global value or default."""
    get_config(use_global=global_).unset(key)
    print(f"Unset {key} ({'global' if global_ else 'local'})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Get the effective value of a configuration setting."""
    value = get_config(use_global=global_).get(key)
    if value is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {value}")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List configured settings, followed by defaults that are not overridden."""
    settings = get_config(use_global=global_).list()

    for key, value in settings.items():
        print(f"{key} = {value}")
    for key, value in DEFAULTS.items():
        if key not in settings:
            print(f"{key} = {value} (default)")
