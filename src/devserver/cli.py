"""Command-line interface for devserver.

Provides the main entry point for serving the diagnostic endpoints and
for printing a single information snapshot.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="devserver",
        description="Diagnostic HTTP server for exercising clients, proxies and load balancers",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/devserver.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server (default)")
    serve_parser.add_argument("--host", type=str, default=None, help="Interface to bind")
    serve_parser.add_argument(
        "--port", type=int, default=None,
        help="Port to listen on (default: $PORT, else 80)",
    )
    serve_parser.add_argument(
        "--template", type=Path, default=None,
        help="HTML template for /content/html (default: index.html)",
    )

    subparsers.add_parser("snapshot", help="Print one JSON information snapshot and exit")

    return parser.parse_args(argv)


def _print_snapshot(settings) -> None:
    """Build a snapshot the way the JSON endpoint does and print it."""
    from devserver.domain.models import InfoSnapshot
    from devserver.utils.network import get_outbound_ip

    cfg = settings.server
    snapshot = InfoSnapshot.capture(
        cfg.welcome_message,
        lambda: get_outbound_ip(cfg.probe_host, cfg.probe_port),
    )
    print(json.dumps(snapshot.to_wire()))


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the devserver CLI."""
    args = parse_args(argv)

    from devserver.config.settings import load_settings
    from devserver.errors import DevServerError
    from devserver.utils.logging import setup_logging

    # Settings logging happens before the configured handlers exist.
    setup_logging()
    try:
        settings = load_settings(args.config)
    except ValidationError as e:
        logger.error("Invalid configuration:\n%s", e)
        sys.exit(2)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "snapshot":
        try:
            _print_snapshot(settings)
        except DevServerError as e:
            logger.error("%s", e)
            sys.exit(1)
        return

    try:
        if getattr(args, "host", None):
            settings.server.host = args.host
        if getattr(args, "port", None) is not None:
            settings.server.port = args.port
        if getattr(args, "template", None):
            settings.server.template_path = args.template
    except ValidationError as e:
        logger.error("Invalid command-line override:\n%s", e)
        sys.exit(2)

    from devserver.endpoint.server import run

    logger.info("Starting devserver on %s:%d", settings.server.host, settings.server.port)
    run(settings)


if __name__ == "__main__":
    main()
