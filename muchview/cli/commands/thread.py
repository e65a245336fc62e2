"""Thread command implementation."""

import json

import typer
from typing_extensions import Annotated

from muchview.cli.context import fail, get_settings
from muchview.errors import MuchviewError
from muchview.notmuch import ShowClient
from muchview.read import Message, read_thread, thread_subject

app = typer.Typer(help="Show a thread")


@app.callback(invoke_without_command=True)
def thread(
    thread_id: Annotated[str, typer.Argument(help="Thread id (without thread:)")],
    format: Annotated[
        str, typer.Option("--format", help="Output format: summary, json")
    ] = "summary",
):
    """Show the messages of a thread.

    The json format includes the sanitized HTML bodies.
    """
    if format not in ("summary", "json"):
        typer.echo(f"Unknown format: {format}", err=True)
        raise typer.Exit(1)

    client = ShowClient.from_settings(get_settings())

    try:
        messages = read_thread(client, thread_id)
    except MuchviewError as e:
        fail(e)

    if format == "json":
        typer.echo(json.dumps([m.to_dict() for m in messages], indent=2))
        return

    typer.echo(f"Subject: {thread_subject(messages) or '(no subject)'}")
    for message in messages:
        _print_message(message, depth=0)


def _print_message(message: Message, depth: int) -> None:
    indent = "  " * depth
    typer.echo()
    typer.echo(f"{indent}id:{message.id}  {message.display_date}")
    typer.echo(f"{indent}From: {message.header('From', '')}")
    if message.tags:
        typer.echo(f"{indent}Tags: {' '.join(message.tags)}")
    for attachment in message.attachments:
        name = attachment.filename or attachment.content_id or "(unnamed)"
        typer.echo(
            f"{indent}  [part {attachment.part}] {name} ({attachment.content_type})"
        )
    for child in message.children:
        _print_message(child, depth + 1)
