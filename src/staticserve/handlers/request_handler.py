"""
=============================================================================
REQUEST HANDLER
=============================================================================

Turns one Request into one Reply. The only place where errors become
replies.

=============================================================================
FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   raw URI                                                            │
    │      │                                                               │
    │      ▼                                                               │
    │   resolve()  ──── malformed / relative / ".." ────► 400 stock reply  │
    │      │                                                               │
    │      ▼                                                               │
    │   directory? ── yes ──► index.html? ─┐                               │
    │      │                  index.htm?  ─┤ found: serve it as the file   │
    │      │                  neither ─────┼──► listing page ──► 200       │
    │      no                              │                               │
    │      ▼                               ▼                               │
    │   serve_file()  ──── missing / unmappable ────────► 404 stock reply  │
    │      │                                                               │
    │      ▼                                                               │
    │     200 (window in content, descriptor in reply.stream)              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A failure anywhere throws away whatever was already written to the reply
(releasing a mapping if one was attached) and replaces it with the stock
page for the status.

=============================================================================
CONCURRENCY
=============================================================================

RequestHandler keeps nothing but its frozen configuration. Any number of
threads may call handle_request() on the same instance, as long as each
call gets its own Reply.

=============================================================================
"""

import logging
import os
from typing import Optional

from ..config import HandlerConfig
from ..http.mime_types import extension_to_type
from ..http.reply import Reply, stock_reply
from ..http.request import Request
from .errors import RequestError
from .files import serve_file
from .listing import list_directory
from .resolver import resolve, extension_of


logger = logging.getLogger(__name__)


class RequestHandler:
    """
    The common handler for all incoming requests.

    Usage:
        handler = RequestHandler(HandlerConfig.for_root("/var/www"))

        reply = Reply()
        handler.handle_request(request, reply)
        stream = reply.take_stream()   # writer now owns the mapping
    """

    def __init__(self, config: HandlerConfig):
        self.config = config

    @property
    def doc_root(self) -> str:
        return self.config.doc_root

    def handle_request(self, request: Request, reply: Reply) -> None:
        """
        Handle a request and populate reply.

        Never raises for request-level failures: bad input and missing
        files end up as stock replies.
        """
        reply.reset()
        try:
            self._handle(request, reply)
        except RequestError as e:
            logger.info(f"{request.uri!r} -> {int(e.status)}: {e}")
            stock_reply(e.status, reply)
            return

        logger.debug(
            f"{request.uri!r} -> {int(reply.status)} "
            f"({reply.get_header('Content-Length')} bytes)"
        )

    def handle(self, request: Request) -> Reply:
        """Handle a request into a new Reply."""
        reply = Reply()
        self.handle_request(request, reply)
        return reply

    def _handle(self, request: Request, reply: Reply) -> None:
        resolved = resolve(self.doc_root, request.uri)
        path = resolved.filesystem_path
        content_type = resolved.content_type

        if os.path.isdir(path):
            index_path = self._find_index(path)
            if index_path is None:
                list_directory(path, resolved.request_path, reply)
                return
            path = index_path
            content_type = extension_to_type(extension_of(index_path))

        serve_file(path, content_type, reply, window_size=self.config.window_size)

    def _find_index(self, directory: str) -> Optional[str]:
        for name in self.config.index_files:
            candidate = os.path.join(directory, name)
            if os.path.isfile(candidate):
                return candidate
        return None


def handle_request(config: HandlerConfig, request: Request, reply: Reply) -> None:
    """Handle one request with a throwaway RequestHandler."""
    RequestHandler(config).handle_request(request, reply)
