"""FastAPI application factory."""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from muchview import __version__
from muchview.config import NotmuchSettings
from muchview.errors import ExecutionError, MuchviewError
from muchview.log import get_logger

from . import routes

logger = get_logger(__name__)


def create_app(
    settings: NotmuchSettings, debug: bool = False, page_size: int = 50
) -> FastAPI:
    """Create the web application.

    Args:
        settings: Resolved notmuch settings; every request builds its own
            client from them.
        debug: Include notmuch stderr and tracebacks in error responses.
        page_size: Default number of threads per search page.
    """
    app = FastAPI(title="muchview", version=__version__, debug=debug)
    app.state.settings = settings
    app.state.debug = debug
    app.state.page_size = page_size

    app.include_router(routes.router)

    @app.exception_handler(MuchviewError)
    async def handle_muchview_error(request: Request, exc: MuchviewError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "message": str(exc),
                    "code": exc.status_code,
                    "detail": _error_detail(exc) if request.app.state.debug else None,
                }
            },
        )

    @app.get("/health")
    def health_check():
        """Liveness probe."""
        return {"ok": True, "version": __version__}

    return app


def _error_detail(exc: MuchviewError) -> dict:
    """stderr and traceback of an error; only sent in debug mode."""
    detail = {
        "type": type(exc).__name__,
        "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
    }
    if isinstance(exc, ExecutionError):
        detail["exit_code"] = exc.exit_code
        detail["stderr"] = exc.stderr
    return detail
