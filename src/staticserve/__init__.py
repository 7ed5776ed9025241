"""
=============================================================================
STATICSERVE
=============================================================================

The request-to-response core of a static file server.

Given a parsed request and a document root, it decides between a
directory listing and a file transfer and fills in a reply: status,
headers, inline content, and for files a descriptor the writer uses to
stream the rest from a memory map.

=============================================================================
WHAT IS (AND ISN'T) HERE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  IN THIS PACKAGE                 LEFT TO THE SURROUNDING SERVER     │
    │  ───────────────                 ─────────────────────────────      │
    │  Percent-decoding of paths       Accepting connections              │
    │  ".." rejection                  Parsing the request line/headers   │
    │  Index file lookup               Serialising the reply onto a socket│
    │  Directory listing page          Sending the streamed remainder     │
    │  Windowed, mapped file reads     Releasing the descriptor after it  │
    │  Stock error pages                                                   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from staticserve import HandlerConfig, RequestHandler, Request

    handler = RequestHandler(HandlerConfig.for_root("./public"))

    with handler.handle(Request("/docs/")) as reply:
        print(reply.status, reply.headers)
        for chunk in reply.body_chunks():
            sock.sendall(chunk)

=============================================================================
"""

__version__ = "1.0.0"

from .config import HandlerConfig, configure_logging
from .http import Request, Reply, StreamingDescriptor, HTTPStatus
from .handlers import RequestHandler, handle_request

__all__ = [
    "HandlerConfig",
    "configure_logging",
    "Request",
    "Reply",
    "StreamingDescriptor",
    "HTTPStatus",
    "RequestHandler",
    "handle_request",
    "__version__",
]
