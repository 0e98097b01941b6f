"""
=============================================================================
HTTP RESPONSE WRITING
=============================================================================

Every response this server sends has the same shape:

    ┌─────────────────────────────────────────────────────────────────┐
    │  STATUS LINE                                                     │
    │  HTTP/1.1 200 OK\r\n                                             │
    ├─────────────────────────────────────────────────────────────────┤
    │  HEADERS (fixed set, fixed order)                                │
    │  Date: Sun, 18 Oct 2026 12:00:00 GMT\r\n   ← computed per write  │
    │  Server: WebWorker/1.0\r\n                                       │
    │  Connection: close\r\n                                           │
    │  Content-Type: text/html\r\n                                     │
    │  \r\n                                      ← end of headers      │
    ├─────────────────────────────────────────────────────────────────┤
    │  BODY                                                            │
    │  <html>...</html>                          ← written verbatim    │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
NO CONTENT-LENGTH?
=============================================================================

The body length is never announced. Instead the header says
"Connection: close" and the server closes the socket right after the body.
HTTP/1.1 allows a client to treat end-of-connection as end-of-body in that
case, so the caller MUST close the stream once write() returns.

Even a missing file gets "200 OK": the not-found page is ordinary content
as far as the wire is concerned.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Callable, Dict, Optional


HTTP_VERSION = "HTTP/1.1"

STATUS_CODE = 200
REASON_PHRASE = "OK"

SERVER_NAME = "WebWorker/1.0"
"""Default value of the Server header."""

CONNECTION_POLICY = "close"
"""The server always closes the connection after one response."""

CONTENT_TYPE = "text/html"
"""The single content type this server produces."""

CRLF = "\r\n"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Headers keep insertion order, which is also the order they hit the
    wire. Built once per request and never modified after serializing.
    """

    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    status: int = STATUS_CODE
    reason: str = REASON_PHRASE
    version: str = HTTP_VERSION

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status} {self.reason}"

    def head_bytes(self) -> bytes:
        """
        Serialize the status line and header block, blank line included.

        Header values are ISO-8859-1 encoded, as HTTP/1.1 requires.
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        return (CRLF.join(lines) + CRLF).encode("iso-8859-1")

    def to_bytes(self) -> bytes:
        """Serialize the whole response: head then body."""
        return self.head_bytes() + self.body


class ResponseWriter:
    """
    Writes a response to a stream.

    Usage:
        writer = ResponseWriter(server_name="WebWorker/1.0")
        writer.write(conn, b"<html>...</html>")
        conn.flush()
        conn.close()     # the writer never closes
    """

    def __init__(
        self,
        server_name: str = SERVER_NAME,
        connection_policy: str = CONNECTION_POLICY,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            server_name: Value of the Server header.
            connection_policy: Value of the Connection header.
            clock: Returns the current time; defaults to UTC now.
        """
        self.server_name = server_name
        self.connection_policy = connection_policy
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build(self, payload: bytes, content_type: str = CONTENT_TYPE) -> HTTPResponse:
        """
        Build the response for a payload.

        The Date header is computed here, at write time.
        """
        return HTTPResponse(
            headers={
                "Date": format_http_date(self.clock()),
                "Server": self.server_name,
                "Connection": self.connection_policy,
                "Content-Type": content_type,
            },
            body=payload,
        )

    def write(self, stream: BinaryIO, payload: bytes, content_type: str = CONTENT_TYPE) -> HTTPResponse:
        """
        Write status line, headers and body to the stream.

        The header block is written in full before any body byte, so
        nothing in the body can be mistaken for a header.

        Args:
            stream: Writable binary stream.
            payload: Body bytes, written verbatim.
            content_type: Content-Type header value.

        Returns:
            The response that was written.
        """
        response = self.build(payload, content_type)
        stream.write(response.head_bytes())
        stream.write(response.body)
        return response


def write_response(stream: BinaryIO, content_type: str, payload: bytes) -> HTTPResponse:
    """Write a response with the default server identity."""
    return ResponseWriter().write(stream, payload, content_type)


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sun, 18 Oct 2026 12:00:00 GMT

    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
