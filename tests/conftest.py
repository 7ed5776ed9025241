"""
pytest configuration and fixtures.
"""

import os
from typing import Generator

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserve import HandlerConfig, RequestHandler, Request, Reply


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """
    A small document root:

        /hello.txt
        /empty.bin
        /docs/            (no index file)
        /docs/guide.md
        /site/index.html
    """
    (tmp_path / "hello.txt").write_bytes(b"Hello, World!\n")
    (tmp_path / "empty.bin").write_bytes(b"")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_bytes(b"# Guide\n")
    (tmp_path / "site").mkdir()
    (tmp_path / "site" / "index.html").write_bytes(b"<h1>Site</h1>")
    return tmp_path


@pytest.fixture
def config(doc_root: Path) -> HandlerConfig:
    """Handler configuration rooted at doc_root."""
    return HandlerConfig.for_root(str(doc_root))


@pytest.fixture
def handler(config: HandlerConfig) -> RequestHandler:
    """Request handler over doc_root."""
    return RequestHandler(config)


@pytest.fixture
def serve(handler: RequestHandler) -> Generator:
    """
    Handle a URI and return the reply; mappings are released at teardown.
    """
    replies = []

    def _serve(uri: str) -> Reply:
        reply = handler.handle(Request(uri))
        replies.append(reply)
        return reply

    yield _serve

    for reply in replies:
        reply.release()
