"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the responder and its accept loop.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    1. Defaults            ServerConfig()
    2. Environment         ServerConfig.from_env()
    3. Command line        python -m webworker --port 3000 --root ./site

The command line starts from the environment values, so flags always win.

=============================================================================
WHAT IS *NOT* CONFIGURABLE
=============================================================================

The status line, the marker tokens and the header set are part of the
wire contract and live as constants in the modules that emit them.
Content type and connection policy are surfaced here for visibility but
default to those constants.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .http.response import CONTENT_TYPE, CONNECTION_POLICY, SERVER_NAME
from .handlers.template import SERVER_DESCRIPTION


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

NO_TIMEOUT = ("", "none", "off", "0")
"""Timeout spellings that mean "no deadline"."""


def parse_timeout(value: str) -> Optional[float]:
    """
    Parse a timeout setting from the environment or command line.

        "30"    →  30.0
        "2.5"   →  2.5
        "none"  →  None   (also "off", "0" or empty: block forever)

    Raises:
        ValueError: If the value is not a non-negative number or a
                    "no deadline" spelling.
    """
    text = value.strip().lower()
    if text in NO_TIMEOUT:
        return None

    try:
        seconds = float(text)
    except ValueError:
        raise ValueError(f"Invalid timeout: {value!r} (seconds, or 'none')") from None

    if seconds == 0:
        return None
    if not seconds > 0 or seconds == float("inf"):
        raise ValueError(f"Invalid timeout: {value!r} (seconds, or 'none')")
    return seconds


@dataclass
class ServerConfig:
    """
    Configuration for the web worker server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    REQUEST SETTINGS
    - max_request_size

    CONTENT
    - content_root, confine_to_root, server_description

    RESPONSE
    - server_name, content_type, connection_policy

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on."""

    backlog: int = 128
    """Maximum number of queued connections before new ones are refused."""

    timeout: Optional[float] = 30.0
    """
    Read/write deadline per connection in seconds.
    None = block forever (a stalled client holds its thread indefinitely).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 64 * 1024
    """Upper bound on request-head bytes read before giving up."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    content_root: str = "."
    """Directory that resource paths are resolved against."""

    confine_to_root: bool = True
    """
    Reject resource paths that resolve outside content_root.
    When False, paths like ../secret.html are read as given.
    """

    server_description: str = SERVER_DESCRIPTION
    """Sentence substituted for the <cs371server> marker."""

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = SERVER_NAME
    """Value of the Server header."""

    content_type: str = CONTENT_TYPE
    """The single content type every response carries."""

    connection_policy: str = CONNECTION_POLICY
    """Value of the Connection header. Only "close" is supported."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST       Server host (default: 127.0.0.1)
        WEBWORKER_PORT       Server port (default: 8080)
        WEBWORKER_TIMEOUT    Connection deadline in seconds (default: 30)
                             "none" or 0 disables the deadline
        WEBWORKER_ROOT       Content root directory (default: .)
        WEBWORKER_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("WEBWORKER_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBWORKER_PORT", "8080")),
            timeout=parse_timeout(os.getenv("WEBWORKER_TIMEOUT", "30")),
            content_root=os.getenv("WEBWORKER_ROOT", "."),
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", "INFO"),
        )

    @property
    def level(self) -> int:
        """Numeric logging level for log_level."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails immediately rather than on
        the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < 1024:
            raise ValueError("max_request_size must be >= 1024")

        if not Path(self.content_root).is_dir():
            raise ValueError(f"Content root does not exist: {self.content_root}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.connection_policy != CONNECTION_POLICY:
            raise ValueError(
                f"Unsupported connection policy: {self.connection_policy}"
            )
