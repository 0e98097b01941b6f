"""
=============================================================================
WEBWORKER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # Custom port and content root
    python -m webworker --port 3000 --root ./site

    # Listen on all interfaces
    python -m webworker --host 0.0.0.0

    # Verbose logging (shows every request line)
    python -m webworker --log-level DEBUG

Defaults come from the environment (see ServerConfig.from_env), so
WEBWORKER_PORT=3000 python -m webworker works too. Flags override.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS, parse_timeout
from .server import WebServer


def timeout_arg(value: str) -> Optional[float]:
    """argparse type for --timeout."""
    try:
        return parse_timeout(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, seeded with defaults."""
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="One-request-per-connection web server with page markers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                          # Serve . on 127.0.0.1:8080
  python -m webworker --port 3000 --root site  # Custom port and root
  python -m webworker --host 0.0.0.0           # Listen on all interfaces
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=timeout_arg,
        default=defaults.timeout,
        help=f"Per-connection read/write deadline in seconds, or 'none' "
             f"to wait forever (default: {defaults.timeout})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.content_root,
        help=f"Directory to serve files from (default: {defaults.content_root})"
    )

    parser.add_argument(
        "--no-confine",
        action="store_true",
        help="Allow resource paths that resolve outside the content root"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"WebWorker {__version__}"
    )

    return parser


def config_from_args(argv: Optional[List[str]] = None) -> ServerConfig:
    """Translate environment plus command line into a ServerConfig."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        content_root=args.root,
        confine_to_root=not args.no_confine,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    try:
        config = config_from_args(argv)
        server = WebServer(config)
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
