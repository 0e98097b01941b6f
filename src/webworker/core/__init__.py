"""
=============================================================================
CORE: CONNECTIONS AND THE EXCHANGE PIPELINE
=============================================================================

    SocketServer          accept loop, one Connection per client
         │
         ▼
    Connection            socket wrapped as a readline/write/close stream
         │
         ▼
    ConnectionHandler     parse → resolve → render → write → close

=============================================================================
"""

from .connection import Connection, ConnectionState
from .handler import ConnectionHandler, Exchange, HandlerState
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "ConnectionHandler",
    "Exchange",
    "HandlerState",
    "SocketServer",
]
