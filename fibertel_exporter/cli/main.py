"""
Main CLI Orchestration Module

This module provides the entry point of the Fibertel exporter: either serve
metrics over HTTP, or run one collection and print it.

License: MIT
"""

import logging
import sys
import time
from datetime import datetime
from typing import Optional

from prometheus_client import REGISTRY, start_http_server

from fibertel_exporter import __version__
from fibertel_exporter.collector import StationCollector, run_collection_cycle
from fibertel_exporter.exceptions import FibertelConfigurationError

from .args import parse_args
from .formatters import (
    format_json_output,
    print_error_suggestions,
    print_json_output,
    print_summary_to_stderr,
)
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


def run_once(collector: StationCollector, args) -> int:
    """Collect once and print the result. Returns the exit status."""
    start_time = time.time()

    client = collector.client_factory()
    with client:
        result = run_collection_cycle(client)
        performance = client.get_performance_summary()

    collector.last_result = result
    observations = list(collector.projector.project(result))
    elapsed = time.time() - start_time

    if not args.quiet:
        print_summary_to_stderr(result)

    print_json_output(format_json_output(result, observations, args, elapsed, performance))
    logger.info(f"Collection finished in {elapsed:.2f}s with {len(observations)} observations")

    return 0 if result.login_ok else 1


def serve(collector: StationCollector, args) -> None:
    """Register the collector and serve /metrics until interrupted."""
    REGISTRY.register(collector)
    start_http_server(args.listen_port, addr=args.listen_address)
    logger.info(f"Serving metrics on http://{args.listen_address}:{args.listen_port}/metrics")

    while True:
        time.sleep(3600)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI application."""
    start_time = time.time()
    debug = False

    try:
        args = parse_args(argv)
        debug = args.debug

        setup_logging(debug=args.debug, quiet=args.quiet, log_file=args.log_file)

        if not args.quiet:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            print(f"Fibertel Exporter v{__version__} - {timestamp}", file=sys.stderr)
            print(f"Station {args.url} as {args.username}", file=sys.stderr)

        collector = StationCollector(
            url=args.url,
            username=args.username,
            password=args.password,
            timeout=args.timeout,
        )

        if args.once:
            return run_once(collector, args)

        serve(collector, args)
        return 0

    except KeyboardInterrupt:
        elapsed = time.time() - start_time
        logger.info(f"Stopped by user after {elapsed:.2f}s")
        print(f"Stopped by user after {elapsed:.2f}s", file=sys.stderr)
        return 0

    except FibertelConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2

    except Exception as e:
        elapsed = time.time() - start_time
        logger.error(f"Exporter failed after {elapsed:.2f}s: {e}")
        print(f"Error after {elapsed:.2f}s: {e}", file=sys.stderr)
        print_error_suggestions(debug=debug)
        return 1


if __name__ == "__main__":
    sys.exit(main())
