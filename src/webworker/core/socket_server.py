"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Listens, accepts, and hands each accepted socket off as a Connection.
What happens to the connection after that is the callback's business.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with an IP:PORT
    3. listen()    Mark socket as a "listening" socket
    4. accept()    Wait for and accept an incoming connection
    5. close()     Release the socket resources

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR:
    Rebind immediately after a restart instead of waiting out TIME_WAIT.

TCP_NODELAY:
    Send small writes (like the header block) right away.

Accept timeout (1 second):
    accept() wakes up periodically so shutdown() takes effect even when
    no client is connecting.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (kill, docker stop) trigger shutdown().
Python only allows installing signal handlers from the main thread, so
a server started from a worker thread (tests, embedding) skips this and
relies on shutdown() being called directly.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def on_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(on_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set when the server is accepting, cleared again on shutdown
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the server's bound address (IP, port).

        After start(), this is the real port even when config.port is 0.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # Periodic wakeups so the accept loop can notice shutdown()
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """Route SIGTERM and SIGINT to shutdown() (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection. It
                                must return quickly (hand off to a thread).

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """Accept connections and wrap each in a Connection."""
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us re-check self._running
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            try:
                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    timeout=self.config.timeout,
                )
            except OSError as e:
                logger.warning(f"Could not set up connection from {client_address[0]}: {e}")
                client_socket.close()
                continue

            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from any thread, and more than once.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Clean up resources on shutdown."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting. Returns False on timeout."""
        return self._ready_event.wait(timeout)
