"""
=============================================================================
WEB WORKER SERVER
=============================================================================

Ties the pieces together:

    ServerConfig ──► WebServer
                        │
                        ├── SocketServer        (accept loop)
                        └── ConnectionHandler   (one exchange per connection)
                               ├── RequestParser
                               ├── ResourceResolver
                               ├── TemplateRenderer
                               └── ResponseWriter

=============================================================================
THREAD PER CONNECTION
=============================================================================

Every accepted connection gets its own short-lived thread. The thread runs
exactly one exchange and exits:

    accept() ──► Thread(handler.handle, conn).start() ──► accept() ...

The handler shares nothing between requests, so threads never need to
coordinate. Threads are daemons; shutdown does not wait for stragglers
beyond the connection deadline.

=============================================================================
"""

import logging
import threading
from typing import Optional

from .config import ServerConfig
from .core.connection import Connection
from .core.handler import ConnectionHandler
from .core.socket_server import SocketServer
from .http.request import RequestParser
from .http.response import ResponseWriter
from .handlers.resources import ResourceResolver
from .handlers.template import TemplateRenderer


logger = logging.getLogger(__name__)


def build_handler(config: ServerConfig, log: Optional[logging.Logger] = None) -> ConnectionHandler:
    """
    Create a ConnectionHandler wired from configuration.

    Args:
        config: Server configuration.
        log: Logger for the handler; defaults to the handler module's logger.
    """
    return ConnectionHandler(
        parser=RequestParser(max_request_size=config.max_request_size),
        resolver=ResourceResolver(
            content_root=config.content_root,
            confine_to_root=config.confine_to_root,
        ),
        renderer=TemplateRenderer(server_description=config.server_description),
        writer=ResponseWriter(
            server_name=config.server_name,
            connection_policy=config.connection_policy,
        ),
        content_type=config.content_type,
        log=log,
    )


class WebServer:
    """
    A one-request-per-connection web server.

    Usage:
        server = WebServer(ServerConfig(port=8080, content_root="./site"))
        server.run()   # blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.handler = build_handler(self.config)
        self._socket_server = SocketServer(self.config)

    @property
    def address(self):
        """The bound (host, port), once running."""
        return self._socket_server.address

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        self._setup_logging()
        logger.info(
            f"Serving {self.config.content_root} on "
            f"{self.config.host}:{self.config.port}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

        logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Safe to call from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.level

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webworker").setLevel(level)

    def _handle_connection(self, conn: Connection):
        """Run the exchange for conn on its own thread."""
        worker = threading.Thread(
            target=self.handler.handle,
            args=(conn,),
            name=f"webworker-{conn.id}",
            daemon=True,
        )
        worker.start()
