"""ASGI adapter serving live snapshots of a processing session.

Framework-agnostic: works with any ASGI server (uvicorn, hypercorn, daphne)
without extra dependencies, so a follow-mode session can be polled over HTTP
while it runs. The command line does not start a server; embed one next to
the follow loop instead:

    import asyncio

    import uvicorn

    from logpile.adapters.frameworks.asgi import create_asgi_app
    from logpile.adapters.sources import FollowedFile
    from logpile.cli import build_parser
    from logpile.config import Settings
    from logpile.core.processor import LogSession

    args = build_parser().parse_intermixed_args(["-f", "ERROR", "app.log"])
    session = LogSession(Settings.from_namespace(args))

    async def serve() -> None:
        follower = asyncio.create_task(session.follow(FollowedFile("app.log")))
        server = uvicorn.Server(uvicorn.Config(create_asgi_app(session), port=8000))
        await server.serve()
        follower.cancel()

    asyncio.run(serve())

GET /buckets?since=<unix seconds> returns the JSON report and GET /stats the
line counters.
"""

import json
import logging
from collections.abc import Callable, Coroutine
from typing import Any
from urllib.parse import parse_qs

from logpile.adapters.frameworks.query_params import _parse_since_param
from logpile.core.encoding.jsondoc import snapshot_document
from logpile.core.processor import LogSession

logger = logging.getLogger(__name__)

Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _parse_query_params(scope: Scope) -> dict[str, list[str]]:
    """Parse the query string of an ASGI scope; missing or empty gives {}."""
    query_string = scope.get("query_string", b"").decode(errors="replace")
    return parse_qs(query_string)


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body."""
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _send_json(send: Send, render: Callable[[], dict[str, Any]]) -> None:
    try:
        body = json.dumps(render())
    except Exception:
        logger.exception("Error encoding snapshot endpoint")
        await _send_response(
            send, 500, "application/json", json.dumps({"error": "Internal Server Error"})
        )
        return
    await _send_response(send, 200, "application/json", body)


def create_asgi_app(session: LogSession) -> ASGIApp:
    """Create an ASGI app with /buckets and /stats endpoints.

    Args:
        session: The session whose state is served. It is only read.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        path = scope["path"]
        if scope.get("method", "GET") != "GET":
            await _send_response(send, 405, "text/plain", "Method Not Allowed")
        elif path == "/buckets":
            since = _parse_since_param(_parse_query_params(scope))
            await _send_json(
                send,
                lambda: snapshot_document(session.snapshot(), session.stats, since=since),
            )
        elif path == "/stats":
            await _send_json(send, session.stats.as_dict)
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
