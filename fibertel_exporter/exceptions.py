"""
Custom exceptions for the Fibertel Station exporter.

All exceptions inherit from FibertelError so callers can catch every
library-specific failure in one place.

Example usage:
    try:
        with FibertelStationClient(password="wrong") as client:
            client.login()
    except FibertelProtocolError as e:
        print(f"Station rejected the login: {e}")
    except FibertelTransportError as e:
        print(f"Station unreachable: {e}")

License: MIT
"""

from typing import Any, Optional

import requests


class FibertelError(Exception):
    """
    Base exception for all Fibertel Station exporter errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class FibertelTransportError(FibertelError):
    """
    Raised when the station cannot be reached.

    This covers connection refusals, DNS failures and TLS handshake
    problems. Details may include 'url', 'error_type', 'original_error'.
    """


class FibertelTimeoutError(FibertelTransportError):
    """
    Raised when a request to the station exceeds its timeout.

    Details may include 'url', 'timeout'.
    """


class FibertelProtocolError(FibertelError):
    """
    Raised when the station answers but not with what the session expects.

    This exception is raised when:
    - The salt request, login or logout envelope has error != "ok"
    - A response body is not a JSON object

    Details may include 'operation', 'error', 'message', 'response'.
    """


class FibertelParseError(FibertelError):
    """
    Raised when a device-formatted numeric field cannot be converted.

    Never fatal for a collection cycle: the metric projection absorbs it and
    substitutes zero.
    """


class FibertelConfigurationError(FibertelError):
    """
    Raised when configuration validation fails.

    Details may include 'parameter', 'value'.
    """


def wrap_transport_error(original_error: Exception, url: str, timeout: Optional[float] = None) -> FibertelTransportError:
    """
    Wrap a requests exception in the matching FibertelTransportError.

    Args:
        original_error: The exception raised by requests
        url: URL that was being requested
        timeout: Timeout in effect for the request

    Returns:
        FibertelTimeoutError for timeouts, FibertelTransportError otherwise
    """
    if isinstance(original_error, requests.exceptions.Timeout):
        return FibertelTimeoutError(
            f"Request to {url} timed out",
            details={"url": url, "timeout": timeout, "original_error": str(original_error)},
        )

    message = f"Failed to reach {url}"
    if isinstance(original_error, requests.exceptions.SSLError):
        message = f"TLS handshake with {url} failed"
    elif isinstance(original_error, requests.exceptions.ConnectionError):
        message = f"Connection to {url} failed - station may be offline or URL is wrong"

    return FibertelTransportError(
        message,
        details={
            "url": url,
            "error_type": type(original_error).__name__,
            "original_error": str(original_error),
        },
    )


__all__ = [
    "FibertelConfigurationError",
    "FibertelError",
    "FibertelParseError",
    "FibertelProtocolError",
    "FibertelTimeoutError",
    "FibertelTransportError",
    "wrap_transport_error",
]
