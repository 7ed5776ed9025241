"""
Request value handed to the request handler.

Parsing the request line and headers happens upstream; by the time a
request reaches this package it is already split into its parts.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Request:
    """
    An already-parsed HTTP request.

    Attributes:
        uri:     The request target exactly as received, still
                 percent-encoded and possibly carrying "?query".
        method:  HTTP method. Not consulted by the handler.
        headers: (name, value) pairs in arrival order.
    """

    uri: str
    method: str = "GET"
    headers: Tuple[Tuple[str, str], ...] = ()

    def get_header(self, name: str) -> Optional[str]:
        """First header value matching name (case-insensitive), or None."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None
