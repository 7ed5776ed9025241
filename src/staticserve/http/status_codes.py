"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes a reply produced by this package can carry.

=============================================================================
WHICH CODES DOES A STATIC FILE CORE NEED?
=============================================================================

Only a handful are ever produced by request handling itself:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  200 OK           File served or directory listed                   │
    │  400 Bad Request  Malformed percent-encoding, relative path, ".."   │
    │  404 Not Found    Missing, unreadable or unmappable resource        │
    └─────────────────────────────────────────────────────────────────────┘

The rest of the table exists because the stock reply generator knows a
canned page for each of them, so that the surrounding server can reuse
the same pages (e.g. 503 when its worker queue is full).

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so codes compare and format as integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 3xx REDIRECTION
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302                 # "Moved Temporarily" in HTTP/1.0 terms
    NOT_MODIFIED = 304

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503

    @property
    def phrase(self) -> str:
        """
        Reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        """True for 2xx codes."""
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.NO_CONTENT: "No Content",

    HTTPStatus.MULTIPLE_CHOICES: "Multiple Choices",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Moved Temporarily",
    HTTPStatus.NOT_MODIFIED: "Not Modified",

    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",

    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.BAD_GATEWAY: "Bad Gateway",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
