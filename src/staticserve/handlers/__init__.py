"""
=============================================================================
HANDLERS MODULE
=============================================================================

The request handling pipeline, leaves first:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ resolver.py         Raw URI → validated path under the doc root     │
    │ listing.py          Directory → HTML/script listing page            │
    │ files.py            File → 1 MiB window + streaming descriptor      │
    │ request_handler.py  Wires the above, converts errors to replies     │
    │ errors.py           BadRequest (400), NotFound (404)                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .errors import RequestError, BadRequest, NotFound
from .resolver import ResolvedPath, resolve, extension_of
from .listing import (
    DirectoryEntry,
    SkippedEntry,
    ListingRow,
    scan_directory,
    build_rows,
    render_listing,
    list_directory,
    format_size,
    format_time,
)
from .files import serve_file, WINDOW_SIZE
from .request_handler import RequestHandler, handle_request

__all__ = [
    "RequestError",
    "BadRequest",
    "NotFound",
    "ResolvedPath",
    "resolve",
    "extension_of",
    "DirectoryEntry",
    "SkippedEntry",
    "ListingRow",
    "scan_directory",
    "build_rows",
    "render_listing",
    "list_directory",
    "format_size",
    "format_time",
    "serve_file",
    "WINDOW_SIZE",
    "RequestHandler",
    "handle_request",
]
