"""Main CLI entry point for muchview."""

import typer
from typing_extensions import Annotated

from muchview import __version__
from muchview.cli import commands
from muchview.config import load_config, log_level
from muchview.errors import MuchviewError
from muchview.log import setup_logging

app = typer.Typer(
    name="muchview",
    help="Browse a notmuch mail index from the terminal or the browser",
    no_args_is_help=True,
)

# Register commands
app.add_typer(commands.search.app, name="search")
app.add_typer(commands.thread.app, name="thread")
app.add_typer(commands.attachment.app, name="attachment")
app.add_typer(commands.config.app, name="config")
app.add_typer(commands.serve.app, name="serve")


@app.callback()
def callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")
    ] = False,
):
    """Browse a notmuch mail index from the terminal or the browser."""
    if verbose:
        setup_logging("DEBUG")
        return

    try:
        setup_logging(log_level(load_config()))
    except MuchviewError:
        # A broken config file is reported by the command that needs it
        setup_logging("WARNING")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"muchview version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
