"""
Output Formatting Module

This module formats one collection cycle for the --once mode: JSON on
stdout, a human-readable summary on stderr.

License: MIT
"""

import json
import logging
import sys
from datetime import datetime
from typing import Any, Optional

from fibertel_exporter import __version__
from fibertel_exporter.models import CycleResult, MetricObservation

logger = logging.getLogger(__name__)


def format_observations(observations: list[MetricObservation]) -> list[dict[str, Any]]:
    """Convert observations to JSON-serializable dictionaries."""
    logger.debug(f"Converting {len(observations)} observations for JSON output")
    return [observation.as_dict() for observation in observations]


def format_json_output(
    result: CycleResult,
    observations: list[MetricObservation],
    args,
    elapsed_time: float,
    performance: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Build the complete JSON document for one collection.

    Args:
        result: Outcome of the collection cycle
        observations: Observations projected from the result
        args: Parsed command line arguments
        elapsed_time: Total elapsed time for the collection
        performance: Optional per-request timing summary

    Returns:
        JSON-serializable dictionary
    """
    status = result.status
    output = {
        "query_timestamp": datetime.now().isoformat(),
        "station_url": args.url,
        "client_version": __version__,
        "elapsed_time": elapsed_time,
        "login_ok": result.login_ok,
        "logout_ok": result.logout_ok,
        "channel_counts": {
            "downstream": len(status.downstream) if status else 0,
            "upstream": len(status.upstream) if status else 0,
            "ofdm_downstream": len(status.ofdm_downstream) if status else 0,
            "ofdm_upstream": len(status.ofdm_upstream) if status else 0,
        },
        "errors": list(result.errors),
        "observations": format_observations(observations),
    }
    if performance is not None:
        output["performance"] = performance
    return output


def print_json_output(json_data: dict) -> None:
    logger.debug("Outputting JSON to stdout")
    print(json.dumps(json_data, indent=2))


def print_summary_to_stderr(result: CycleResult) -> None:
    """
    Print a human-readable summary to stderr (so JSON output to stdout is clean).

    Args:
        result: Outcome of the collection cycle
    """
    print("=" * 60, file=sys.stderr)
    print("FIBERTEL STATION SUMMARY", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"Login: {'ok' if result.login_ok else 'FAILED'}", file=sys.stderr)

    if result.login is not None:
        print(f"User: {result.login.user} (uid {result.login.uid})", file=sys.stderr)
        if result.login.default_password_in_use:
            print("Warning: the default password is in use", file=sys.stderr)

    status = result.status
    if status is not None:
        print(f"Downstream Channels: {len(status.downstream)}", file=sys.stderr)
        print(f"Upstream Channels: {len(status.upstream)}", file=sys.stderr)
        print(f"OFDM Downstream Channels: {len(status.ofdm_downstream)}", file=sys.stderr)
        print(f"OFDM Upstream Channels: {len(status.ofdm_upstream)}", file=sys.stderr)

        if status.downstream:
            sample = status.downstream[0]
            print(
                f"Sample Channel: ID {sample.channel_id}, {sample.frequency}, {sample.power}, SNR {sample.snr}",
                file=sys.stderr,
            )

    if result.login_ok:
        print(f"Logout: {'ok' if result.logout_ok else 'FAILED'}", file=sys.stderr)

    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)

    print("=" * 60, file=sys.stderr)


def print_error_suggestions(debug: bool = False) -> None:
    """
    Print helpful error suggestions.

    Args:
        debug: Whether debug mode is enabled
    """
    if debug:
        import traceback

        traceback.print_exc(file=sys.stderr)
    else:
        print("\nTroubleshooting suggestions:", file=sys.stderr)
        print("1. Verify the station password is correct", file=sys.stderr)
        print("2. Check that the station URL is reachable (usually https://192.168.0.1)", file=sys.stderr)
        print("3. Log out of any open web UI session; the station allows only one", file=sys.stderr)
        print("4. Try with --debug for more detailed error information", file=sys.stderr)
        print("5. Raise --timeout if diagnostics retrieval is slow", file=sys.stderr)
