from dataclasses import replace
from pathlib import Path

import click

from pwin.cli.error_boundary import cli_error_boundary
from pwin.cli.output import error_output, machine_output, user_output
from pwin.core.config_store import DEFAULT_INSTALL_PATH, PwinConfig
from pwin.core.context import PwinContext
from pwin.core.platform import ThreadSafety

CONFIG_KEYS = ("path", "thread_safety")


def _get_value(config: PwinConfig, key: str) -> str:
    match key:
        case "path":
            return str(config.install_path)
        case "thread_safety":
            return config.thread_safety.token
        case _:
            error_output(f"Invalid config key: {key} (expected one of {', '.join(CONFIG_KEYS)})")
            raise SystemExit(1)


def _update_config_field(current: PwinConfig, key: str, value: str) -> PwinConfig:
    """Return a new PwinConfig with one field changed.

    Raises:
        SystemExit: If the key or value is invalid
    """
    match key:
        case "path":
            # An empty path restores the default
            install_path = Path(value).expanduser() if value else DEFAULT_INSTALL_PATH
            return replace(current, install_path=install_path)
        case "thread_safety":
            try:
                return replace(current, thread_safety=ThreadSafety.from_user_input(value))
            except ValueError as e:
                error_output(str(e))
                raise SystemExit(1) from None
        case _:
            error_output(f"Invalid config key: {key} (expected one of {', '.join(CONFIG_KEYS)})")
            raise SystemExit(1)


@click.group("config")
def config_group() -> None:
    """Configure this tool."""


@config_group.command("list")
@click.pass_obj
@cli_error_boundary
def config_list(ctx: PwinContext) -> None:
    """Print the install path and thread safety mode."""
    config = ctx.config_store.load()
    ts_description = "Safe (TS)" if config.thread_safety is ThreadSafety.SAFE else "None (NTS)"
    machine_output(f"Install path: {config.install_path}")
    machine_output(f"Thread safety mode: {ts_description}")
    if not ctx.config_store.exists():
        user_output(f"(defaults, {ctx.config_store.path()} does not exist yet)")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
@cli_error_boundary
def config_get(ctx: PwinContext, key: str) -> None:
    """Print the value of KEY (path or thread_safety)."""
    machine_output(_get_value(ctx.config_store.load(), key))


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
@cli_error_boundary
def config_set(ctx: PwinContext, key: str, value: str) -> None:
    """Set KEY to VALUE.

    \b
    Keys:
      path           Base directory for all PHP installations ("" for default)
      thread_safety  ts (Apache) or nts (IIS, CLI)
    """
    updated = _update_config_field(ctx.config_store.load(), key, value)
    ctx.config_store.save(updated)
    user_output("Configuration saved!")
