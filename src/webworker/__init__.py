"""
=============================================================================
WEBWORKER - A One-Request-Per-Connection Web Server
=============================================================================

Each accepted connection gets a worker that reads one GET request, serves
the named file from the content root (or a not-found page), fills in two
reserved markers, writes one response, and closes the connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ONE EXCHANGE                                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /index.html HTTP/1.1          RequestParser     → "index.html" │
    │   ...headers...                                                      │
    │                                                                      │
    │   ./index.html                      ResourceResolver  → file bytes   │
    │                                     (or the 404 page)                │
    │                                                                      │
    │   <cs371date> <cs371server>         TemplateRenderer  → filled in    │
    │                                                                      │
    │   HTTP/1.1 200 OK                   ResponseWriter    → the wire     │
    │   Connection: close ...                                              │
    │                                                                      │
    │   close()                           ConnectionHandler                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # In code
    from webworker import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=3000, content_root="./site"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer, build_handler
from .config import ServerConfig
from .core.handler import ConnectionHandler, Exchange, HandlerState

__all__ = [
    "WebServer",
    "build_handler",
    "ServerConfig",
    "ConnectionHandler",
    "Exchange",
    "HandlerState",
    "__version__",
]
