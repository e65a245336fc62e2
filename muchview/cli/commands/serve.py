"""Serve command implementation."""

import typer
import uvicorn
from typing_extensions import Annotated

from muchview.cli.context import get_settings
from muchview.config import is_debug, load_config
from muchview.web import create_app

app = typer.Typer(help="Run the web interface")


@app.callback(invoke_without_command=True)
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Interface to bind")] = None,
    port: Annotated[int | None, typer.Option("--port", help="TCP port")] = None,
):
    """Serve the web interface (defaults from the [web] config section)."""
    settings = get_settings()
    config = load_config()
    web = config.get("web", {})

    application = create_app(
        settings,
        debug=is_debug(config),
        page_size=int(web.get("page_size", 50)),
    )

    uvicorn.run(
        application,
        host=host or web.get("host", "127.0.0.1"),
        port=port or int(web.get("port", 8000)),
        log_config=None,
    )
