"""Search command implementation."""

import json

import typer
from typing_extensions import Annotated

from muchview.cli.context import fail, get_settings
from muchview.errors import MuchviewError
from muchview.notmuch import SearchClient
from muchview.search import SearchResult, search_threads

app = typer.Typer(help="Search threads in the notmuch index")


@app.callback(invoke_without_command=True)
def search(
    query: Annotated[str, typer.Argument(help="notmuch search query")],
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Maximum number of threads")
    ] = 50,
    offset: Annotated[
        int, typer.Option("--offset", help="Number of threads to skip")
    ] = 0,
    format: Annotated[
        str, typer.Option("--format", help="Output format: summary, json")
    ] = "summary",
):
    """Search threads and list them, newest first."""
    if format not in ("summary", "json"):
        typer.echo(f"Unknown format: {format}", err=True)
        raise typer.Exit(1)

    client = SearchClient.from_settings(get_settings())

    try:
        results = search_threads(client, query, limit=limit, offset=offset)
    except MuchviewError as e:
        fail(e)

    if format == "json":
        typer.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    if not results:
        typer.echo("No threads found.")
        return

    for result in results:
        typer.echo(_format_summary(result))


def _format_summary(result: SearchResult) -> str:
    """One line per thread, like `notmuch search`."""
    tags = " ".join(result.tags)
    authors = result.authors or ""
    return (
        f"thread:{result.id}  {result.date_relative} "
        f"[{result.matched}/{result.total}] {authors}; {result.subject} ({tags})"
    )
