"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

This module pulls the one thing the responder needs out of an inbound
request: the path of the resource being fetched.

=============================================================================
WHAT WE READ
=============================================================================

    GET /index.html HTTP/1.1\r\n        ← request line (path lives here)
    Host: localhost:8080\r\n            ← headers: consumed, ignored
    User-Agent: curl/8.5.0\r\n
    \r\n                                ← blank line = end of request head

Only GET is recognized. The check is a plain prefix test on the line, so
anything else (POST, HEAD, garbage, a line shorter than "GET") simply
yields no path. The caller then serves the not-found page.

=============================================================================
WHY LINE BY LINE?
=============================================================================

A socket delivers bytes in arbitrary chunks. Reading through a buffered
readline() lets the OS buffer absorb that, and lets us stop exactly at the
blank line without needing Content-Length (GET requests have no body).

Reading is bounded twice:
1. The stream deadline (socket timeout) stops a client that goes silent.
2. max_request_size stops a client that never sends the blank line.

=============================================================================
"""

import logging
import os
from typing import BinaryIO, Optional, Union


logger = logging.getLogger(__name__)


REQUEST_METHOD = b"GET"
"""The single request kind this responder recognizes."""

PATH_SEPARATOR = b"/"

DEFAULT_MAX_REQUEST_SIZE = 64 * 1024


def extract_resource_path(line: Union[bytes, str]) -> Optional[str]:
    """
    Extract the resource path from a request line.

    The path is the second whitespace-delimited token with a single
    leading "/" removed:

        b"GET /index.html HTTP/1.1"   →  "index.html"
        b"GET //twice.html HTTP/1.1"  →  "/twice.html"
        b"GET / HTTP/1.1"             →  ""
        b"POST /form HTTP/1.1"        →  None
        b"GE"                         →  None

    =====================================================================
    BYTES IN, FILESYSTEM NAME OUT
    =====================================================================

    The line is split as bytes, so only ASCII whitespace separates
    tokens. Bytes like \\xa0 or \\x85 are parts of UTF-8 characters
    (à is \\xc3\\xa0) and must not cut the path in two.

    The token is then decoded with os.fsdecode, the same codec the OS
    uses for file names, so "GET /café.html" opens café.html and a name
    that is not valid UTF-8 still maps back to the exact bytes on disk.

    =====================================================================

    Args:
        line: Request line with the terminator already stripped. A str
              is encoded with os.fsencode first.

    Returns:
        The resource path, or None if the line is not a GET line or has
        no resource token.
    """
    if isinstance(line, str):
        line = os.fsencode(line)

    if not line.startswith(REQUEST_METHOD):
        return None

    tokens = line.split()
    if len(tokens) < 2:
        return None

    resource = tokens[1]
    if resource.startswith(PATH_SEPARATOR):
        resource = resource[len(PATH_SEPARATOR):]
    return os.fsdecode(resource)


class RequestParser:
    """
    Reads a request head from a stream and returns the resource path.

    The parser holds configuration only, so one instance can be shared by
    every connection thread.

    Usage:
        parser = RequestParser()
        path = parser.parse(conn)   # "index.html", "", or None
    """

    def __init__(self, max_request_size: int = DEFAULT_MAX_REQUEST_SIZE):
        """
        Args:
            max_request_size: Maximum bytes of request head to consume.
        """
        self.max_request_size = max_request_size

    def parse(self, stream: BinaryIO, log: Optional[logging.Logger] = None) -> Optional[str]:
        """
        Read request lines until the blank line and return the resource path.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    parse() Flow                                  │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   readline() ──► b""?  ──yes──► stop (client closed)            │
        │       │                                                          │
        │       ▼                                                          │
        │   strip CR/LF ──► empty? ──yes──► stop (end of head)            │
        │       │                                                          │
        │       ▼                                                          │
        │   no path yet and line starts with GET?                          │
        │       └── yes: remember extract_resource_path(line)              │
        │       │                                                          │
        │       ▼                                                          │
        │   over max_request_size? ──yes──► stop                           │
        │       │                                                          │
        │       └──────────► loop                                          │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Args:
            stream: Binary stream supporting readline(limit).
            log: Logger to report through (defaults to the module logger).

        Returns:
            The resource path, or None when the request never named one or
            the stream failed mid-read.
        """
        log = log or logger
        path: Optional[str] = None
        consumed = 0

        while True:
            try:
                raw = stream.readline(self.max_request_size - consumed + 1)
            except OSError as e:
                # Timeout, reset, or read on a closed stream
                log.warning(f"Request read failed: {e}")
                return None

            if not raw:
                log.debug("Stream closed before end of request head")
                break

            consumed += len(raw)

            line = raw.rstrip(b"\r\n")
            log.debug(f"Request line: ({line.decode('utf-8', errors='replace')})")

            if not line:
                break

            if path is None:
                path = extract_resource_path(line)

            if consumed > self.max_request_size:
                log.warning(f"Request head exceeds {self.max_request_size} bytes")
                break

        return path


def parse_request(stream: BinaryIO) -> Optional[str]:
    """Parse a request head with default limits. See RequestParser.parse."""
    return RequestParser().parse(stream)
