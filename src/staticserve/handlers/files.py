"""
=============================================================================
FILE SERVING
=============================================================================

Serves a regular file through a bounded window over a memory map.

=============================================================================
WHY A WINDOW?
=============================================================================

Reading a whole file into memory per request does not scale: ten
concurrent downloads of a 2 GB image would need 20 GB of RAM. Instead:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  1. open(path, "rb")                    → NotFound on any failure   │
    │  2. size = fstat(fd).st_size                                        │
    │  3. size == 0 → no mapping, empty body, Content-Length: 0           │
    │  4. mmap(fd, ACCESS_READ)               → NotFound on failure       │
    │  5. content = map[0 : min(size, WINDOW_SIZE)]                       │
    │  6. reply.stream = descriptor(map, size, len(content))              │
    └─────────────────────────────────────────────────────────────────────┘

The map costs address space, not memory: pages are loaded lazily by the
kernel as the writer reads from it, and shared between requests for the
same file.

Every failure is reported as NotFound. At this layer "missing",
"permission denied" and "vanished between stat and open" look the same
to the client.

=============================================================================
"""

import logging
import mmap
import os

from ..http.reply import Reply, StreamingDescriptor
from ..http.status_codes import HTTPStatus
from .errors import NotFound


logger = logging.getLogger(__name__)


WINDOW_SIZE = 1024 * 1024  # 1 MiB eagerly copied into the reply


def serve_file(
    path: str,
    content_type: str,
    reply: Reply,
    window_size: int = WINDOW_SIZE,
) -> None:
    """
    Fill reply with the first window of a file and a descriptor for the rest.

    Args:
        path: Filesystem path of the file.
        content_type: Value for the Content-Type header.
        reply: Reply to populate. Receives ownership of the mapping.
        window_size: Maximum bytes copied into reply.content.

    Raises:
        NotFound: If the file cannot be opened or mapped.
    """
    # Keeps FIFOs and devices away from open(), which could block on them
    if not os.path.isfile(path):
        raise NotFound(f"Not a regular file: {path!r}")

    try:
        file = open(path, "rb")
    except (OSError, ValueError) as e:
        # ValueError: embedded NUL byte in the path
        raise NotFound(f"Cannot open {path!r}: {e}") from e

    try:
        file_size = os.fstat(file.fileno()).st_size
        mapping = mmap.mmap(file.fileno(), 0, access=mmap.ACCESS_READ) if file_size else None
    except (OSError, ValueError) as e:
        file.close()
        raise NotFound(f"Cannot map {path!r}: {e}") from e

    if mapping is None:
        file.close()
        content = b""
    else:
        content = mapping[:min(file_size, window_size)]
        reply.stream = StreamingDescriptor(
            file=file,
            mapping=mapping,
            file_size=file_size,
            already_copied=len(content),
        )

    reply.status = HTTPStatus.OK
    reply.content = content
    reply.add_header("Content-Length", str(file_size))
    reply.add_header("Content-Type", content_type)

    logger.debug(f"Serving {path} ({file_size} bytes, {len(content)} inline)")
