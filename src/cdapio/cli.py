# src/cdapio/cli.py
"""cdapio Command Line Interface.

Entry point for the cdapio CLI tool. Inspection helpers only: stages are
built by the host pipeline, not from the command line.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from cdapio import __version__
from cdapio.contracts.errors import CdapIOError, ConfigMappingError

if TYPE_CHECKING:
    from cdapio.plugins.config_base import PluginConfig
    from cdapio.plugins.manager import PluginManager

__all__ = ["app"]

app = typer.Typer(
    name="cdapio",
    help="cdapio: run hosted data-integration plugins as pipeline stages.",
    no_args_is_help=True,
)

plugins_app = typer.Typer(help="Plugin registration commands.")
app.add_typer(plugins_app, name="plugins")

config_app = typer.Typer(help="Plugin configuration commands.")
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"cdapio version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to cdapio settings YAML (CDAPIO_* env vars override it).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """cdapio: run hosted data-integration plugins as pipeline stages."""
    from cdapio.core.config import CdapIOSettings, load_settings
    from cdapio.core.logging import configure_logging

    if settings is not None:
        try:
            loaded = load_settings(settings)
        except (FileNotFoundError, ValidationError) as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from e
    else:
        loaded = CdapIOSettings()

    log_level = "DEBUG" if verbose else loaded.logging.level
    configure_logging(json_output=json_logs or loaded.logging.json_output, level=log_level)


def _import_object(path: str) -> object:
    """Import ``package.module:attr`` (or a bare module path)."""
    module_name, _, attr = path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        typer.secho(f"Error: cannot import {module_name!r}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    if not attr:
        return module
    try:
        return getattr(module, attr)
    except AttributeError as e:
        typer.secho(f"Error: {module_name!r} has no attribute {attr!r}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e


def _build_manager(modules: list[str]) -> PluginManager:
    from cdapio.plugins.manager import PluginManager

    manager = PluginManager()
    for module_path in modules:
        try:
            manager.register(_import_object(module_path))
        except ValueError as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from e
    return manager


@plugins_app.command("list")
def plugins_list(
    modules: list[str] = typer.Option(
        [],
        "--module",
        "-m",
        help="Registration module (or module:object) implementing cdapio_get_plugins. Repeatable.",
    ),
) -> None:
    """List registered hosted plugins."""
    manager = _build_manager(modules)
    registrations = manager.get_registrations()
    if not registrations:
        typer.echo("(no plugins registered)")
        return

    for registration in registrations:
        try:
            plugin_type = registration.plugin_type or "?"
        except CdapIOError as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from e
        typer.echo(f"  {registration.name:30} {plugin_type!s:16} {registration.kind}")


@config_app.command("resolve")
def config_resolve(
    config_class: str = typer.Argument(..., help="Config class as package.module:ClassName."),
    params_file: Path = typer.Argument(..., help="YAML or JSON file with a flat parameter mapping."),
) -> None:
    """Resolve a parameter file into a plugin config and print it as JSON."""
    from cdapio.plugins.config_base import load_params, resolve_config

    target = _import_object(config_class)
    if not isinstance(target, type):
        typer.secho(f"Error: {config_class!r} is not a class", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    try:
        params = load_params(params_file)
        config: PluginConfig = resolve_config(target, params)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    except ConfigMappingError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        typer.echo(f"field: {e.field}", err=True)
        raise typer.Exit(1) from e
    except (CdapIOError, TypeError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e

    typer.echo(config.model_dump_json(indent=2))
