"""
Command Line Argument Parsing Module

This module handles argument parsing and validation for the Fibertel
exporter CLI. Every connection setting can also come from the environment,
which is how the exporter is usually configured in a container.

License: MIT
"""

import argparse
import logging
import os
from typing import Optional
from urllib.parse import urlparse

from fibertel_exporter.exceptions import FibertelConfigurationError

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Prometheus exporter for Fibertel / Vodafone CGA cable modem DOCSIS diagnostics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --password "your_password"
  %(prog)s --password "password" --url https://192.168.0.1 --listen-port 9420
  %(prog)s --password "password" --once

Environment:
  FIBERTEL_URL, FIBERTEL_USERNAME, FIBERTEL_PASSWORD, FIBERTEL_LISTEN_ADDRESS,
  FIBERTEL_LISTEN_PORT, FIBERTEL_TIMEOUT and FIBERTEL_LOG_FILE provide
  defaults for the flags.

Collection:
  Every scrape of /metrics logs in, reads the channel tables and logs out.
  The station allows a single web session, so an open browser session is
  terminated by each scrape.

One-shot mode:
  Use --once to run a single collection and print the observations as JSON
  on stdout instead of serving them.
        """,
    )

    # Station settings
    parser.add_argument(
        "--url",
        default=os.getenv("FIBERTEL_URL", "https://192.168.0.1"),
        help="Station base URL (default: %(default)s)",
    )
    parser.add_argument(
        "--username",
        default=os.getenv("FIBERTEL_USERNAME", "admin"),
        help="Station login username (default: %(default)s)",
    )
    parser.add_argument(
        "--password",
        default=os.getenv("FIBERTEL_PASSWORD"),
        help="Station login password (required, or FIBERTEL_PASSWORD)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=os.getenv("FIBERTEL_TIMEOUT") or "20",
        help="Per-request timeout in seconds (default: %(default)s)",
    )

    # Exporter settings
    parser.add_argument(
        "--listen-address",
        default=os.getenv("FIBERTEL_LISTEN_ADDRESS", "0.0.0.0"),
        help="Address to serve metrics on (default: %(default)s)",
    )
    parser.add_argument(
        "--listen-port",
        type=int,
        default=os.getenv("FIBERTEL_LISTEN_PORT") or "9420",
        help="Port to serve metrics on (default: %(default)s)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Collect once, print JSON to stdout and exit",
    )

    # Output options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging output to stderr",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors; no summary in --once mode",
    )
    parser.add_argument(
        "--log-file",
        default=os.getenv("FIBERTEL_LOG_FILE"),
        help="Also write log output to this file",
    )

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logger.debug(f"Parsed arguments: url={args.url}, username={args.username}, once={args.once}")

    validate_args(args)

    return args


def validate_args(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Raises:
        FibertelConfigurationError: If arguments are invalid
    """
    if not args.password:
        raise FibertelConfigurationError(
            "A password is required (--password or FIBERTEL_PASSWORD)",
            details={"parameter": "password"},
        )

    parsed = urlparse(args.url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise FibertelConfigurationError(
            "URL must include scheme and host, e.g. https://192.168.0.1",
            details={"parameter": "url", "value": args.url},
        )

    if args.timeout <= 0:
        raise FibertelConfigurationError(
            "Timeout must be greater than 0",
            details={"parameter": "timeout", "value": args.timeout},
        )

    if args.listen_port < 1 or args.listen_port > 65535:
        raise FibertelConfigurationError(
            "Listen port must be between 1 and 65535",
            details={"parameter": "listen_port", "value": args.listen_port},
        )

    logger.debug("Arguments validated successfully")
