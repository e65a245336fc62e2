"""Helpers shared by the CLI commands."""

from typing import NoReturn

import typer

from muchview.config import NotmuchSettings, load_config, resolve_settings
from muchview.errors import ExecutionError, MuchviewError


def get_settings() -> NotmuchSettings:
    """Load and validate the notmuch settings, or exit with an error."""
    try:
        return resolve_settings(load_config())
    except MuchviewError as e:
        fail(e)


def fail(error: MuchviewError) -> NoReturn:
    """Print an error (and notmuch's stderr, if any) and exit with status 1."""
    typer.echo(f"Error: {error}", err=True)
    if isinstance(error, ExecutionError) and error.stderr:
        typer.echo(error.stderr, err=True)
    raise typer.Exit(1)
