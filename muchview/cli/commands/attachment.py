"""Attachment command implementation."""

import sys
from pathlib import Path

import typer
from typing_extensions import Annotated

from muchview.cli.context import fail, get_settings
from muchview.errors import MuchviewError
from muchview.notmuch import ShowClient
from muchview.read import open_attachment

app = typer.Typer(help="Save a message part")


@app.callback(invoke_without_command=True)
def attachment(
    message_id: Annotated[str, typer.Argument(help="Message id (id: prefix optional)")],
    part: Annotated[str, typer.Argument(help="Part number as shown by `thread`")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
):
    """Write the raw content of one MIME part to a file or stdout."""
    client = ShowClient.from_settings(get_settings())

    try:
        stream = open_attachment(client, message_id, part)
        typer.echo(
            f"{stream.attachment.filename or '(unnamed)'} "
            f"({stream.attachment.content_type})",
            err=True,
        )
    except MuchviewError as e:
        fail(e)

    try:
        if output is None:
            written = stream.write_to(sys.stdout.buffer)
        else:
            with open(output, "wb") as f:
                written = stream.write_to(f)
    except MuchviewError as e:
        # Don't leave a truncated file behind
        if output is not None:
            output.unlink(missing_ok=True)
        fail(e)

    typer.echo(f"{written} bytes written", err=True)
