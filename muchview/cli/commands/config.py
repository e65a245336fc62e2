"""Config command implementation.

Manages the muchview configuration file.
"""

import typer
from typing_extensions import Annotated

from muchview.cli.context import fail
from muchview.config import (
    CONFIG_FILE,
    init_config,
    load_config,
    resolve_settings,
    set_config_value,
)
from muchview.config.paths import CONFIG_DIR
from muchview.errors import MuchviewError

app = typer.Typer(help="Manage configuration")


@app.command()
def init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config")
    ] = False,
):
    """Initialize configuration directory and template config file."""
    created = init_config(overwrite=force)

    if created:
        typer.echo(f"Created config directory: {CONFIG_DIR}")
        typer.echo(f"Created config file: {CONFIG_FILE}")
        typer.echo()
        typer.echo("Edit the config file to point at your notmuch config.")
    else:
        typer.echo(f"Config already exists at {CONFIG_FILE}")
        typer.echo("Use --force to overwrite.")


@app.command()
def show():
    """Display current configuration and the resolved notmuch settings."""
    try:
        config = load_config()
    except MuchviewError as e:
        fail(e)

    if not config:
        typer.echo("No configuration found.")
        typer.echo(f"Run 'muchview config init' to create {CONFIG_FILE}")

    for section, values in config.items():
        typer.echo(f"[{section}]")
        if isinstance(values, dict):
            for key, value in values.items():
                typer.echo(f"  {key} = {value}")
        typer.echo()

    try:
        settings = resolve_settings(config)
    except MuchviewError as e:
        typer.echo(f"notmuch: not usable ({e})")
        return

    typer.echo(f"notmuch binary: {settings.binary}")
    typer.echo(f"notmuch config: {settings.config_path}")
    if settings.timeout:
        typer.echo(f"timeout: {settings.timeout:g}s")


@app.command("set")
def set_value(
    key: Annotated[
        str,
        typer.Argument(help="Configuration key (dot notation, e.g., 'notmuch.timeout')"),
    ],
    value: Annotated[str, typer.Argument(help="Configuration value")],
):
    """Set a configuration value using dot notation.

    Examples:
        muchview config set notmuch.config ~/.notmuch-config
        muchview config set web.port 8080
    """
    try:
        set_config_value(key, value)
        typer.echo(f"Set {key} = {value}")
    except ValueError as e:
        typer.echo(f"Invalid value: {e}", err=True)
        raise typer.Exit(1)
