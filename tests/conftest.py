"""
pytest configuration and fixtures.
"""

import io
import socket
import threading
from datetime import date, datetime, timezone
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import WebServer, ServerConfig


class FakeStream:
    """
    In-memory stand-in for a client connection.

    Reads come from a fixed request; writes are collected in `written`,
    which stays readable after close().
    """

    def __init__(self, request: bytes = b"", fail_on_write: bool = False):
        self._input = io.BytesIO(request)
        self._output = io.BytesIO()
        self.fail_on_write = fail_on_write
        self.close_count = 0
        self.flushed = False

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    @property
    def written(self) -> bytes:
        return self._output.getvalue()

    def readline(self, limit: int = -1) -> bytes:
        if self.closed:
            raise OSError("readline on closed stream")
        return self._input.readline(limit)

    def write(self, data: bytes) -> int:
        if self.fail_on_write:
            raise BrokenPipeError("client went away")
        return self._output.write(data)

    def flush(self):
        self.flushed = True

    def close(self):
        self.close_count += 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class TimeoutStream(FakeStream):
    """A client that connects and never sends anything."""

    def readline(self, limit: int = -1) -> bytes:
        raise TimeoutError("timed out")


def split_response(raw: bytes):
    """Split raw response bytes into (status line, headers list, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    return lines[0], lines[1:], body


@pytest.fixture
def make_stream():
    """Factory for in-memory client streams."""
    return FakeStream


@pytest.fixture
def silent_stream() -> TimeoutStream:
    """A stream whose client never sends a byte."""
    return TimeoutStream()


@pytest.fixture
def parse_response():
    """Splits raw response bytes into (status line, headers, body)."""
    return split_response


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def fixed_today():
    """Clock pinned to 18 Oct 2026."""
    return lambda: date(2026, 10, 18)


@pytest.fixture
def fixed_now():
    """UTC clock pinned to a Sunday afternoon."""
    return lambda: datetime(2026, 10, 18, 14, 5, 9, tzinfo=timezone.utc)


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """A content root with a marked-up index page and a plain page."""
    (tmp_path / "index.html").write_bytes(
        b"<html><body>\n"
        b"<p>Today is</p><cs371date>\n"
        b"<p>About</p><cs371server>\n"
        b"</body></html>\n"
    )
    (tmp_path / "plain.html").write_bytes(b"<html><body>plain</body></html>\n")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.html").write_bytes(b"<h1>Guide</h1>")
    return tmp_path


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def fetch(self, request: bytes) -> bytes:
        """Send raw request bytes and read the response until close."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(request)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(content_root: Path, free_port: int) -> Generator[TestServer, None, None]:
    """Run a WebServer over content_root."""
    server = WebServer(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        timeout=5.0,
        content_root=str(content_root),
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
