"""
=============================================================================
HTTP WIRE HANDLING
=============================================================================

The two ends of an exchange, as seen on the wire:

    request.py     GET /index.html HTTP/1.1   →  "index.html"
    response.py    b"<html>..."               →  HTTP/1.1 200 OK ... body

Neither module touches the filesystem or the content; they only read and
write the protocol framing.

=============================================================================
"""

from .request import (
    RequestParser,
    extract_resource_path,
    parse_request,
    REQUEST_METHOD,
)
from .response import (
    HTTPResponse,
    ResponseWriter,
    write_response,
    format_http_date,
    CONTENT_TYPE,
    CONNECTION_POLICY,
    SERVER_NAME,
)

__all__ = [
    # Request parsing
    "RequestParser",
    "extract_resource_path",
    "parse_request",
    "REQUEST_METHOD",

    # Response writing
    "HTTPResponse",
    "ResponseWriter",
    "write_response",
    "format_http_date",

    # Wire constants
    "CONTENT_TYPE",
    "CONNECTION_POLICY",
    "SERVER_NAME",
]
