"""
=============================================================================
STATIC SERVER CLI ENTRY POINT
=============================================================================

=============================================================================
USAGE
=============================================================================

    python -m statichttpd PORT DOCUMENT_ROOT

    # Serve ./public on port 8080
    python -m statichttpd 8080 ./public

    # Installed console script, same arguments
    statichttpd 8080 /srv/www

Exactly two positional arguments. There are no other flags, environment
variables or config files; everything else keeps its ServerConfig default.

=============================================================================
EXIT STATUS
=============================================================================

    0   Stopped by Ctrl+C / SIGTERM
    1   Startup failed (invalid port, bind error, ...)
    2   Usage error (reported by argparse)

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import StaticServer
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statichttpd",
        description=f"Minimal static file HTTP server (StaticHTTPd {__version__})",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m statichttpd 8080 ./public     # Serve ./public on port 8080
  python -m statichttpd 80 /srv/www       # Serve /srv/www (needs root)
        """
    )

    parser.add_argument(
        "port",
        type=int,
        help="Port to listen on"
    )

    parser.add_argument(
        "document_root",
        help="Prefix prepended to every request path (e.g. ./public)"
    )

    return parser


def main(argv=None):
    """
    Main CLI entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    args = build_parser().parse_args(argv)

    try:
        config = ServerConfig(port=args.port, document_root=args.document_root)
        server = StaticServer(config)
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


# This allows running: python -m statichttpd
if __name__ == "__main__":
    main()
