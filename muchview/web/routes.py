"""Routes for searching, reading threads and downloading attachments.

Handlers are plain ``def`` functions: notmuch calls block, so FastAPI
runs them in its threadpool, one subprocess per request.
"""

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from muchview.notmuch import SearchClient, ShowClient
from muchview.read import open_attachment, read_thread, thread_subject
from muchview.search import search_threads

router = APIRouter()


@router.get("/api/search")
def search(
    request: Request,
    query: str = Query("", description="notmuch search expression"),
    limit: int | None = Query(None, description="Threads per page"),
    offset: int = Query(0, description="Threads to skip"),
):
    """Search threads."""
    if limit is None:
        limit = request.app.state.page_size

    client = SearchClient.from_settings(request.app.state.settings)
    results = search_threads(client, query, limit=limit, offset=offset)
    return {
        "query": query.strip(),
        "limit": limit,
        "offset": offset,
        "threads": [result.to_dict() for result in results],
    }


@router.get("/api/thread/{thread_id}")
def thread(request: Request, thread_id: str):
    """A whole thread as nested messages with sanitized HTML bodies."""
    client = ShowClient.from_settings(request.app.state.settings)
    messages = read_thread(client, thread_id)
    return {
        "thread": thread_id,
        "subject": thread_subject(messages),
        "messages": [message.to_dict() for message in messages],
    }


@router.get("/attachment")
def attachment(
    request: Request,
    id: str = Query("", description="Message id"),
    part: str = Query("", description="notmuch part number"),
):
    """Stream one MIME part of a message."""
    client = ShowClient.from_settings(request.app.state.settings)
    stream = open_attachment(client, id, part)
    return StreamingResponse(stream.iter_bytes(), headers=stream.headers())
