"""
=============================================================================
HTTP MODULE
=============================================================================

The HTTP-level values the request handler reads and writes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       Request: method, raw URI, header list              │
    │ reply.py         Reply, StreamingDescriptor, stock error pages      │
    │ percent.py       Percent-decoding of paths, encoding of filenames   │
    │ status_codes.py  HTTPStatus enum with reason phrases                │
    │ mime_types.py    Extension → Content-Type lookup                    │
    └─────────────────────────────────────────────────────────────────────┘

Nothing here touches a socket: parsing happens before a Request exists,
and serialising a Reply onto the wire happens after.

=============================================================================
"""

from .request import Request
from .reply import Reply, StreamingDescriptor, stock_reply
from .percent import decode, encode, MalformedEncoding
from .status_codes import HTTPStatus
from .mime_types import extension_to_type, DEFAULT_MIME_TYPE

__all__ = [
    # Values
    "Request",
    "Reply",
    "StreamingDescriptor",
    "stock_reply",

    # Percent-encoding
    "decode",
    "encode",
    "MalformedEncoding",

    # Status codes
    "HTTPStatus",

    # MIME types
    "extension_to_type",
    "DEFAULT_MIME_TYPE",
]
