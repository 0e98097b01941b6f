"""
=============================================================================
CONNECTION: AN ACCEPTED SOCKET AS A STREAM
=============================================================================

The connection handler works on any binary stream with readline(),
write(), flush() and close(). This module supplies that stream for a real
client socket.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

    Client sends:
        "GET /index.html HTTP/1.1\r\nHost: x\r\n\r\n"

    Server might receive:
        recv() → "GET /ind"
        recv() → "ex.html HTTP/1.1\r\nHo"
        recv() → "st: x\r\n\r\n"

readline() sits on top of a buffered reader (socket.makefile), which keeps
calling recv() until it has a whole line or the peer closes.

=============================================================================
DEADLINES
=============================================================================

Every blocking call (readline, write) is bounded by the socket timeout. A
client that goes quiet raises TimeoutError (an OSError) instead of holding
its thread forever. None disables the deadline.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED
     │             │                               ▲
     └─────────────┴───────────────────────────────┘
                (error or early close)

=============================================================================
"""

import socket
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Reading the request head
    WRITING = "writing"      # Sending response data
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Unique connection identifier (for logging).
        state: Current connection state.
        bytes_read: Request bytes read so far.
        bytes_written: Response bytes sent so far.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    bytes_read: int = 0
    bytes_written: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        """Put the socket in blocking mode with the configured deadline."""
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)
        self._reader = self.socket.makefile("rb", buffering=self.buffer_size)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # STREAM API
    # =========================================================================

    def readline(self, limit: int = -1) -> bytes:
        """
        Read one line, including its terminator.

        Returns:
            The line, or b"" once the client has closed its side.

        Raises:
            TimeoutError: If the deadline passes with no complete line.
            OSError: On connection reset or a closed connection.
        """
        if self.closed:
            raise OSError("readline on closed connection")

        self.state = ConnectionState.READING
        line = self._reader.readline(limit)
        self.bytes_read += len(line)
        return line

    def write(self, data: bytes) -> int:
        """
        Send all of data to the client.

        Uses sendall() so a full kernel buffer cannot cause a short write.

        Raises:
            TimeoutError: If the client stops reading past the deadline.
            OSError: On reset or broken pipe.
        """
        if self.closed:
            raise OSError("write on closed connection")

        self.state = ConnectionState.WRITING
        self.socket.sendall(data)
        self.bytes_written += len(data)
        return len(data)

    def flush(self) -> None:
        """No-op: write() hands everything to the kernel immediately."""

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN, so the client sees end-of-body
        2. drain whatever the client still sends, briefly
        3. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Timeout or reset while draining

        # Separate steps: a failing reader close must not leak the socket
        try:
            self._reader.close()
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection from {self.client_ip}:{self.client_port} closed "
            f"({self.bytes_read} bytes in, {self.bytes_written} bytes out)"
        )

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure the connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
