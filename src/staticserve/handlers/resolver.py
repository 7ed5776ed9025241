"""
=============================================================================
PATH RESOLVER
=============================================================================

Turns the raw request target into a filesystem path under the document
root, or rejects it.

=============================================================================
SECURITY: THE ".." GUARD
=============================================================================

    ATTACK ATTEMPT:
    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /../etc/passwd HTTP/1.1                                         │
    │  GET /static/..%2f..%2fetc/passwd HTTP/1.1                           │
    │                                                                      │
    │  Our protection, applied AFTER percent-decoding:                     │
    │  1. The path must start with "/"                                     │
    │  2. The path must not contain ".." ANYWHERE                          │
    │  3. Otherwise: 400 Bad Request, before touching the filesystem       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The check is a plain substring test. It also rejects harmless names such
as "/notes..txt", and it knows nothing about symlinks inside the root
that point elsewhere. It is a coarse guard, not path normalisation.

=============================================================================
"""

import logging
from dataclasses import dataclass

from ..http.mime_types import extension_to_type
from ..http.percent import decode, MalformedEncoding
from .errors import BadRequest


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPath:
    """A validated request path and what it maps to."""

    filesystem_path: str   # doc_root + request_path
    request_path: str      # Decoded, starts with "/"
    extension: str         # Without the dot, may be empty
    content_type: str


def strip_query(raw_uri: str) -> str:
    """Drop "?query" and "#fragment" from a raw request target."""
    for separator in ("?", "#"):
        index = raw_uri.find(separator)
        if index != -1:
            raw_uri = raw_uri[:index]
    return raw_uri


def extension_of(path: str) -> str:
    """
    Text after the last "." of the final path segment.

    Examples:
        >>> extension_of("/a/b.txt")
        'txt'
        >>> extension_of("/v1.2/README")
        ''
    """
    last_slash = path.rfind("/")
    last_dot = path.rfind(".")
    if last_dot != -1 and last_dot > last_slash:
        return path[last_dot + 1:]
    return ""


def validate_request_path(request_path: str) -> None:
    """
    Reject paths that are empty, relative, or contain "..".

    Raises:
        BadRequest: If the path fails any of the checks.
    """
    if not request_path or not request_path.startswith("/"):
        raise BadRequest(f"Request path must be absolute: {request_path!r}")

    if ".." in request_path:
        logger.warning(f"Path traversal attempt: {request_path!r}")
        raise BadRequest(f"Request path contains '..': {request_path!r}")


def resolve(doc_root: str, raw_uri: str) -> ResolvedPath:
    """
    Map a raw request target onto the document root.

    Args:
        doc_root: Document root, without a trailing separator.
        raw_uri: Request target as received (percent-encoded).

    Returns:
        The resolved path with its extension and content type.

    Raises:
        BadRequest: On malformed encoding or a rejected path.
    """
    try:
        request_path = decode(strip_query(raw_uri))
    except MalformedEncoding as e:
        raise BadRequest(f"Malformed percent-encoding: {e}") from e

    validate_request_path(request_path)

    extension = extension_of(request_path)
    return ResolvedPath(
        filesystem_path=doc_root + request_path,
        request_path=request_path,
        extension=extension,
        content_type=extension_to_type(extension),
    )
