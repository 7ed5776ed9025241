"""
Errors raised while handling a request.

Each carries the status its stock reply should use. Components raise
them; only RequestHandler turns them into replies. The core only ever
raises BadRequest and NotFound; there is no internal-error class.
"""

from typing import Optional

from ..http.status_codes import HTTPStatus


class RequestError(Exception):
    """
    Base class for request handling failures.

    Subclasses set status; a bare RequestError must be given one.

    Attributes:
        status: HTTP status of the stock reply to send instead.
    """

    status: HTTPStatus

    def __init__(self, message: str, status: Optional[HTTPStatus] = None):
        super().__init__(message)
        if status is not None:
            self.status = status
        elif not hasattr(self, "status"):
            raise TypeError(f"{type(self).__name__} requires a status")


class BadRequest(RequestError):
    """Malformed encoding, or an empty, relative or ".." path."""

    status = HTTPStatus.BAD_REQUEST


class NotFound(RequestError):
    """Resource missing, or present but impossible to open or map."""

    status = HTTPStatus.NOT_FOUND
