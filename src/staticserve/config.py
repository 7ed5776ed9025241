"""
=============================================================================
HANDLER CONFIGURATION
=============================================================================

Everything the request handler needs to know, fixed at startup.

=============================================================================
WHY FROZEN?
=============================================================================

The handler is called from many worker threads at once. If the only
shared state is a value nobody can modify, the threads need no locks:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   startup                        request time (N threads)           │
    │   ───────                        ────────────────────────           │
    │   config = HandlerConfig(...)    handler.handle_request(req, rep)   │
    │   config.validate()                reads config.doc_root            │
    │   handler = RequestHandler(config) reads config.window_size         │
    │                                    never writes                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    1. Command-line arguments   python -m staticserve --root ./public /
    2. Environment variables    STATICSERVE_DOC_ROOT=./public
    3. Defaults below

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Tuple


DEFAULT_WINDOW_SIZE = 1024 * 1024
DEFAULT_INDEX_FILES = ("index.html", "index.htm")


@dataclass(frozen=True)
class HandlerConfig:
    """
    Configuration for RequestHandler.

    Use HandlerConfig.for_root() to get a normalised document root.
    """

    doc_root: str
    """
    Directory all request paths are resolved under. Request paths are
    appended to it as strings, so it should carry no trailing separator.
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    """
    Bytes of a file copied into the reply content. The rest stays in the
    memory map for the writer to stream.
    """

    index_files: Tuple[str, ...] = DEFAULT_INDEX_FILES
    """
    Files served in place of a directory listing, first match wins.
    """

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    @classmethod
    def for_root(cls, doc_root: str, **kwargs) -> "HandlerConfig":
        """Create a configuration with doc_root made absolute."""
        return cls(doc_root=os.path.abspath(doc_root), **kwargs)

    @classmethod
    def from_env(cls) -> "HandlerConfig":
        """
        Create configuration from environment variables.

        STATICSERVE_DOC_ROOT     Document root (default: current directory)
        STATICSERVE_WINDOW_SIZE  Window size in bytes (default: 1048576)
        STATICSERVE_LOG_LEVEL    Logging level (default: INFO)
        """
        return cls.for_root(
            os.getenv("STATICSERVE_DOC_ROOT", "."),
            window_size=int(os.getenv("STATICSERVE_WINDOW_SIZE", str(DEFAULT_WINDOW_SIZE))),
            log_level=os.getenv("STATICSERVE_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Fail fast on unusable settings.

        Raises:
            ValueError: If any setting is invalid.
        """
        if not os.path.isdir(self.doc_root):
            raise ValueError(f"Document root does not exist: {self.doc_root}")

        if self.window_size <= 0:
            raise ValueError(f"window_size must be > 0, got {self.window_size}")

        if not self.index_files:
            raise ValueError("index_files must not be empty")

        for name in self.index_files:
            if not name or "/" in name:
                raise ValueError(f"Invalid index file name: {name!r}")

        if not isinstance(getattr(logging, self.log_level.upper(), None), int):
            raise ValueError(f"Unknown log level: {self.log_level}")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger and the staticserve logger level."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("staticserve").setLevel(numeric_level)
