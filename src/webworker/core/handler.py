"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs one request/response exchange on one stream, start to finish.

=============================================================================
STATE MACHINE
=============================================================================

    START ──► READING_REQUEST ──► RESOLVING ──► RENDERING ──► WRITING_RESPONSE ──► DONE
                  │                   │              │                │              ▲
                  └───────────────────┴──────────────┴────────────────┴──────────────┘
                                    any exception (logged, not raised)

Linear, no retries, no going back:

- READING_REQUEST always advances, even when no path was found.
- RESOLVING always advances; the resolver turns failures into a 404 page.
- WRITING_RESPONSE writes, flushes and closes.

Whatever happens, the stream is closed exactly once and nothing escapes
handle(). The worst a failing client can cause is a partial response and a
dropped connection.

=============================================================================
WHERE STATE LIVES
=============================================================================

One ConnectionHandler serves every connection thread. It holds only its
collaborators; everything about a single request lives in the Exchange
record that handle() creates and returns.

=============================================================================
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional

from ..http.request import RequestParser
from ..http.response import ResponseWriter, CONTENT_TYPE
from ..handlers.resources import ResourceResolver
from ..handlers.template import TemplateRenderer


logger = logging.getLogger(__name__)


class HandlerState(Enum):
    """Exchange lifecycle states."""
    START = "start"
    READING_REQUEST = "reading_request"
    RESOLVING = "resolving"
    RENDERING = "rendering"
    WRITING_RESPONSE = "writing_response"
    DONE = "done"


@dataclass
class Exchange:
    """
    Record of one request/response cycle.

    Attributes:
        id: Short identifier used to prefix log lines.
        state: Current (finally: terminal) state.
        path: Resource path from the request line, if any.
        bytes_sent: Body bytes written.
        error: The exception that ended the exchange early, if any.
        failed_in: The state the exchange was in when it failed.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: HandlerState = HandlerState.START
    path: Optional[str] = None
    bytes_sent: int = 0
    error: Optional[BaseException] = None
    failed_in: Optional[HandlerState] = None
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    @property
    def completed(self) -> bool:
        """True if the response was fully written."""
        return self.state == HandlerState.DONE and self.error is None

    @property
    def duration(self) -> float:
        """Seconds from start to finish (or to now, if unfinished)."""
        end = self.finished_at if self.finished_at is not None else time.time()
        return end - self.started_at


class ConnectionHandler:
    """
    Orchestrates parse → resolve → render → write for one stream.

    Usage:
        handler = ConnectionHandler(
            resolver=ResourceResolver("./site"),
            renderer=TemplateRenderer(),
        )
        exchange = handler.handle(conn)   # never raises
    """

    def __init__(
        self,
        parser: Optional[RequestParser] = None,
        resolver: Optional[ResourceResolver] = None,
        renderer: Optional[TemplateRenderer] = None,
        writer: Optional[ResponseWriter] = None,
        content_type: str = CONTENT_TYPE,
        log: Optional[logging.Logger] = None,
    ):
        """
        Args:
            parser: Request line parser.
            resolver: Resource resolver (content root defaults to cwd).
            renderer: Marker renderer.
            writer: Response writer.
            content_type: Content-Type of every response.
            log: Logger for this handler's observability output.
        """
        self.parser = parser or RequestParser()
        self.resolver = resolver or ResourceResolver()
        self.renderer = renderer or TemplateRenderer()
        self.writer = writer or ResponseWriter()
        self.content_type = content_type
        self.log = log or logger

    def handle(self, stream: BinaryIO) -> Exchange:
        """
        Run one exchange on the stream and close it.

        Args:
            stream: Open binary stream with readline/write/flush/close.

        Returns:
            The finished Exchange, in state DONE.
        """
        exchange = Exchange()
        self.log.debug(f"[{exchange.id}] Handling connection")

        try:
            with stream:
                self._advance(exchange, HandlerState.READING_REQUEST)
                exchange.path = self.parser.parse(stream, self.log)

                self._advance(exchange, HandlerState.RESOLVING)
                payload = self.resolver.resolve(exchange.path, self.log)

                self._advance(exchange, HandlerState.RENDERING)
                payload = self.renderer.render(payload)

                self._advance(exchange, HandlerState.WRITING_RESPONSE)
                self.writer.write(stream, payload, self.content_type)
                stream.flush()
                exchange.bytes_sent = len(payload)

        except OSError as e:
            # Transport failure: timeout, reset, broken pipe
            exchange.error = e
            exchange.failed_in = exchange.state
            self.log.warning(
                f"[{exchange.id}] Connection error in {exchange.state.value}: {e}"
            )
        except Exception as e:
            exchange.error = e
            exchange.failed_in = exchange.state
            self.log.exception(
                f"[{exchange.id}] Unexpected error in {exchange.state.value}: {e}"
            )

        exchange.state = HandlerState.DONE
        exchange.finished_at = time.time()

        if exchange.completed:
            self.log.info(
                f"[{exchange.id}] resource={exchange.path!r} -> "
                f"{exchange.bytes_sent} bytes in {exchange.duration * 1000:.1f}ms"
            )
        else:
            self.log.debug(f"[{exchange.id}] Done handling connection (aborted)")

        return exchange

    def _advance(self, exchange: Exchange, state: HandlerState) -> None:
        exchange.state = state
        self.log.debug(f"[{exchange.id}] -> {state.value}")
