"""
=============================================================================
REPLY VALUE
=============================================================================

What the request handler hands back: a status, an ordered header list,
inline content and, for files, a streaming descriptor.

=============================================================================
INLINE CONTENT VS. STREAMED REMAINDER
=============================================================================

A file is never read into memory as a whole. The handler copies at most
one window (1 MiB) into `content` and leaves the rest in a read-only
memory map owned by the streaming descriptor:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        5 MiB FILE ON DISK                           │
    ├──────────────┬──────────────────────────────────────────────────────┤
    │  window      │                 remainder                            │
    │  [0, 1 MiB)  │                 [1 MiB, 5 MiB)                       │
    ├──────────────┼──────────────────────────────────────────────────────┤
    │ reply.content│  reply.stream.read_remaining()                       │
    └──────────────┴──────────────────────────────────────────────────────┘

    Content-Length: 5242880   ← always the TRUE size, never the window

=============================================================================
OWNERSHIP OF THE MAPPING
=============================================================================

The descriptor holds an open file and its mmap. Whoever holds the
descriptor must release it, exactly once, on every exit path:

    handler ──(fills)──► reply.stream ──take_stream()──► writer ──release()

take_stream() makes the hand-over explicit: after it the reply no longer
references the descriptor, so releasing the reply cannot close a map the
writer is still sending from. release() is idempotent, so a writer's
"finally: release()" and an outer cleanup can both run safely.

=============================================================================
"""

import mmap
import threading
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List, Optional, Tuple

from .mime_types import extension_to_type
from .status_codes import HTTPStatus


DEFAULT_CHUNK_SIZE = 64 * 1024


class StreamingDescriptor:
    """
    Owning handle on a mapped file, plus where to resume sending.

    Attributes:
        file_size:      True size of the file in bytes.
        already_copied: Bytes already placed in the reply's content.
    """

    def __init__(
        self,
        file: BinaryIO,
        mapping: mmap.mmap,
        file_size: int,
        already_copied: int,
    ):
        self._file = file
        self._mapping = mapping
        self.file_size = file_size
        self.already_copied = already_copied
        self._released = False
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        """Bytes not yet delivered through the reply content."""
        return self.file_size - self.already_copied

    @property
    def is_complete(self) -> bool:
        """True when the window already covers the whole file."""
        return self.remaining <= 0

    @property
    def released(self) -> bool:
        return self._released

    def read_remaining(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """
        Yield bytes [already_copied, file_size) from the mapping.

        Args:
            chunk_size: Maximum size of each yielded chunk.

        Raises:
            ValueError: If the descriptor was already released.
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self._released:
            raise ValueError("Streaming descriptor already released")

        offset = self.already_copied
        while offset < self.file_size:
            end = min(offset + chunk_size, self.file_size)
            yield self._mapping[offset:end]
            offset = end

    def release(self) -> None:
        """Close the mapping and the file. Safe to call more than once."""
        with self._lock:
            if self._released:
                return
            self._released = True
        try:
            self._mapping.close()
        finally:
            self._file.close()

    def __enter__(self) -> "StreamingDescriptor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "open"
        return (
            f"StreamingDescriptor(file_size={self.file_size}, "
            f"already_copied={self.already_copied}, {state})"
        )


@dataclass
class Reply:
    """
    A semantic HTTP reply.

    Created empty by the caller, populated by a single
    RequestHandler.handle_request() call, then passed to a writer.

    Header names are kept exactly as added; the list keeps order and
    allows duplicates.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    content: bytes = b""
    stream: Optional[StreamingDescriptor] = None

    def add_header(self, name: str, value: str) -> "Reply":
        """Append a header. Returns self for chaining."""
        self.headers.append((name, value))
        return self

    def get_header(self, name: str) -> Optional[str]:
        """First value of the header with exactly this name, or None."""
        for key, value in self.headers:
            if key == name:
                return value
        return None

    def take_stream(self) -> Optional[StreamingDescriptor]:
        """
        Transfer ownership of the streaming descriptor to the caller.

        The reply forgets the descriptor; the caller must release it.
        """
        stream, self.stream = self.stream, None
        return stream

    def release(self) -> None:
        """Release the streaming descriptor, if the reply still owns one."""
        stream = self.take_stream()
        if stream is not None:
            stream.release()

    def reset(self) -> None:
        """Drop everything written so far, releasing any held mapping."""
        self.release()
        self.status = HTTPStatus.OK
        self.headers = []
        self.content = b""

    def body_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """
        Yield the complete body: inline content, then the streamed rest.

        This is what a writer sends after the headers. It does not
        release the descriptor.
        """
        if self.content:
            yield self.content
        if self.stream is not None:
            yield from self.stream.read_remaining(chunk_size)

    @classmethod
    def stock(cls, status: HTTPStatus) -> "Reply":
        """Build the canned reply for a status. See stock_reply()."""
        reply = cls()
        stock_reply(status, reply)
        return reply

    def __enter__(self) -> "Reply":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


# =============================================================================
# STOCK REPLIES
# =============================================================================
#
# A fixed, human-readable page per status. Used whenever handling ends in
# anything but success, so that no partially built reply ever escapes.
#
# =============================================================================

def _stock_page(status: HTTPStatus) -> bytes:
    return (
        f"<html><head><title>{status.phrase}</title></head>"
        f"<body><h1>{status.value} {status.phrase}</h1></body></html>"
    ).encode("utf-8")


STOCK_BODIES = {
    status: (b"" if status == HTTPStatus.OK else _stock_page(status))
    for status in HTTPStatus
}


def stock_reply(status: HTTPStatus, reply: Optional[Reply] = None) -> Reply:
    """
    Populate reply (or a new Reply) with the canned page for status.

    Statuses without a known page fall back to 500 Internal Server Error.
    Any streaming descriptor the reply held is released.

    Returns:
        The populated reply.
    """
    if reply is None:
        reply = Reply()

    try:
        status = HTTPStatus(status)
    except ValueError:
        status = HTTPStatus.INTERNAL_SERVER_ERROR

    reply.reset()
    reply.status = status
    reply.content = STOCK_BODIES[status]
    reply.add_header("Content-Length", str(len(reply.content)))
    reply.add_header("Content-Type", extension_to_type("html"))
    return reply
