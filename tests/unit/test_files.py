"""
Unit tests for windowed file serving and the streaming descriptor.
"""

import os
from pathlib import Path

import pytest

from staticserve.handlers.errors import NotFound
from staticserve.handlers.files import serve_file, WINDOW_SIZE
from staticserve.http.reply import Reply
from staticserve.http.status_codes import HTTPStatus


MIB = 1024 * 1024


def make_file(path: Path, size: int) -> bytes:
    """Write a file of the given size with a recognisable pattern."""
    data = (bytes(range(251)) * (size // 251 + 1))[:size]
    path.write_bytes(data)
    return data


class TestServeFile:
    """Tests for serve_file()."""

    def test_small_file(self, tmp_path: Path):
        """Test a file smaller than the window."""
        data = make_file(tmp_path / "small.bin", 100)
        reply = Reply()

        serve_file(str(tmp_path / "small.bin"), "application/octet-stream", reply)

        with reply:
            assert reply.status == HTTPStatus.OK
            assert reply.content == data
            assert reply.headers == [
                ("Content-Length", "100"),
                ("Content-Type", "application/octet-stream"),
            ]
            assert reply.stream.file_size == 100
            assert reply.stream.already_copied == 100
            assert reply.stream.is_complete
            assert list(reply.stream.read_remaining()) == []

    def test_large_file_window(self, tmp_path: Path):
        """Test that a 5 MiB file yields a 1 MiB window and a descriptor."""
        data = make_file(tmp_path / "big.bin", 5 * MIB)
        reply = Reply()

        serve_file(str(tmp_path / "big.bin"), "application/octet-stream", reply)

        with reply:
            assert reply.get_header("Content-Length") == "5242880"
            assert len(reply.content) == WINDOW_SIZE == 1048576
            assert reply.content == data[:WINDOW_SIZE]
            assert reply.stream.file_size == 5242880
            assert reply.stream.already_copied == 1048576
            assert reply.stream.remaining == 4 * MIB

            rest = b"".join(reply.stream.read_remaining(chunk_size=300_000))
            assert rest == data[WINDOW_SIZE:]

    def test_file_exactly_window_size(self, tmp_path: Path):
        """Test the boundary where the window covers the whole file."""
        make_file(tmp_path / "exact.bin", WINDOW_SIZE)
        reply = Reply()

        serve_file(str(tmp_path / "exact.bin"), "application/octet-stream", reply)

        with reply:
            assert len(reply.content) == WINDOW_SIZE
            assert reply.stream.is_complete

    def test_custom_window(self, tmp_path: Path):
        """Test a configured window size."""
        data = make_file(tmp_path / "f.bin", 10)
        reply = Reply()

        serve_file(str(tmp_path / "f.bin"), "text/plain", reply, window_size=4)

        with reply:
            assert reply.content == data[:4]
            assert reply.get_header("Content-Length") == "10"
            assert b"".join(reply.body_chunks(chunk_size=3)) == data

    def test_empty_file(self, tmp_path: Path):
        """Test that an empty file has no window and no descriptor."""
        (tmp_path / "empty").write_bytes(b"")
        reply = Reply()

        serve_file(str(tmp_path / "empty"), "text/plain", reply)

        assert reply.status == HTTPStatus.OK
        assert reply.content == b""
        assert reply.stream is None
        assert reply.get_header("Content-Length") == "0"
        assert reply.get_header("Content-Type") == "text/plain"

    def test_missing_file(self, tmp_path: Path):
        """Test NotFound for a path that doesn't exist."""
        reply = Reply()
        with pytest.raises(NotFound):
            serve_file(str(tmp_path / "missing.txt"), "text/plain", reply)
        assert reply.stream is None
        assert reply.headers == []

    def test_directory_is_not_found(self, tmp_path: Path):
        """Test that a directory cannot be served as a file."""
        with pytest.raises(NotFound):
            serve_file(str(tmp_path), "text/plain", Reply())

    def test_nul_byte_is_not_found(self, tmp_path: Path):
        """Test that an embedded NUL byte doesn't escape as ValueError."""
        with pytest.raises(NotFound):
            serve_file(str(tmp_path) + "/a\x00b", "text/plain", Reply())

    @pytest.mark.skipif(
        not hasattr(os, "getuid") or os.getuid() == 0,
        reason="permission bits are not enforced for root",
    )
    def test_unreadable_file_is_not_found(self, tmp_path: Path):
        """Test that permission errors collapse into NotFound."""
        path = tmp_path / "secret.txt"
        path.write_bytes(b"secret")
        path.chmod(0)
        try:
            with pytest.raises(NotFound):
                serve_file(str(path), "text/plain", Reply())
        finally:
            path.chmod(0o644)


class TestStreamingDescriptor:
    """Tests for descriptor ownership and release."""

    def test_release_is_idempotent(self, tmp_path: Path):
        """Test that releasing twice is safe."""
        make_file(tmp_path / "f.bin", 10)
        reply = Reply()
        serve_file(str(tmp_path / "f.bin"), "text/plain", reply)
        stream = reply.stream

        stream.release()
        stream.release()

        assert stream.released
        with pytest.raises(ValueError):
            list(stream.read_remaining())

    def test_take_stream_transfers_ownership(self, tmp_path: Path):
        """Test that the reply forgets a taken descriptor."""
        make_file(tmp_path / "f.bin", 10)
        reply = Reply()
        serve_file(str(tmp_path / "f.bin"), "text/plain", reply, window_size=4)

        stream = reply.take_stream()
        reply.release()

        assert reply.stream is None
        assert not stream.released
        with stream:
            assert len(b"".join(stream.read_remaining())) == 6
        assert stream.released

    def test_reply_context_releases(self, tmp_path: Path):
        """Test that leaving a reply's context releases its descriptor."""
        make_file(tmp_path / "f.bin", 10)
        reply = Reply()
        serve_file(str(tmp_path / "f.bin"), "text/plain", reply)
        stream = reply.stream

        with reply:
            pass

        assert stream.released
        assert reply.stream is None

    def test_invalid_chunk_size(self, tmp_path: Path):
        """Test that a non-positive chunk size is refused."""
        make_file(tmp_path / "f.bin", 10)
        reply = Reply()
        serve_file(str(tmp_path / "f.bin"), "text/plain", reply)
        with reply:
            with pytest.raises(ValueError):
                list(reply.stream.read_remaining(chunk_size=0))
