"""
HTTP Request Handling for the Fibertel Station client
=====================================================

This module owns the transport primitive every station call goes through and
the anti-forgery token that travels with it.

"""

import logging
import re
import time
from typing import Any, Optional

import requests

from fibertel_exporter.exceptions import wrap_transport_error

logger = logging.getLogger("fibertel-exporter")

# The web UI always sends the factory LAN address, whatever URL is in use
STATION_REFERER = "http://192.168.0.1"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"
DEFAULT_TIMEOUT = 20.0

CSRF_COOKIE_PATTERN = re.compile(r"auth=([^;]+)")


def extract_csrf_token(set_cookie: Optional[str], current_token: str = "") -> str:
    """
    Pull the anti-forgery token out of a Set-Cookie header.

    Args:
        set_cookie: Raw Set-Cookie header value, may be None
        current_token: Token held before this response

    Returns:
        The ``auth`` cookie value, or current_token when there is none
    """
    if not set_cookie:
        return current_token
    match = CSRF_COOKIE_PATTERN.search(set_cookie)
    if match:
        return match.group(1)
    return current_token


class StationRequestHandler:
    """Sends station requests and tracks the session's CSRF token."""

    def __init__(
        self,
        session: requests.Session,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        instrumentation: Optional[Any] = None,
    ):
        """
        Initialize station request handler.

        Args:
            session: HTTP session holding the station cookies
            base_url: Base URL for the station
            timeout: Per-request timeout in seconds
            instrumentation: Optional performance instrumentation
        """
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.instrumentation = instrumentation
        self.csrf_token = ""

    def build_headers(self, method: str) -> dict[str, str]:
        headers = {
            "Referer": STATION_REFERER,
            "X-Requested-With": "XMLHttpRequest",
            "X-Csrf-Token": self.csrf_token,
        }
        if method == "POST":
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return headers

    def request(
        self,
        method: str,
        path: str,
        data: Optional[dict[str, str]] = None,
        operation: Optional[str] = None,
    ) -> str:
        """
        Make one request against the station.

        Args:
            method: HTTP method, "GET" or "POST"
            path: Path relative to the base URL, e.g. "/api/v1/session/menu"
            data: Form fields for POST requests
            operation: Name used for logging and timing, defaults to the path

        Returns:
            Response body as text

        Raises:
            FibertelTimeoutError: If the request timed out
            FibertelTransportError: On connection, DNS or TLS failure
        """
        url = f"{self.base_url}{path}"
        operation = operation or path.split("?", 1)[0]
        start_time = self.instrumentation.start_timer(operation) if self.instrumentation else time.time()

        logger.debug(f"📤 {method} {path}")

        try:
            response = self.session.request(
                method,
                url,
                data=data if method == "POST" else None,
                headers=self.build_headers(method),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            if self.instrumentation:
                self.instrumentation.record_timing(
                    operation,
                    start_time,
                    success=False,
                    error_type=type(e).__name__,
                )
            logger.error(f"❌ {method} {path} failed: {e}")
            raise wrap_transport_error(e, url, self.timeout) from e

        self.csrf_token = extract_csrf_token(response.headers.get("Set-Cookie"), self.csrf_token)

        response_text = str(response.text)
        logger.debug(f"📥 {operation}: HTTP {response.status_code}, {len(response_text)} chars")

        if self.instrumentation:
            self.instrumentation.record_timing(
                operation,
                start_time,
                success=response.status_code < 400,
                error_type=None if response.status_code < 400 else f"HTTP_{response.status_code}",
                http_status=response.status_code,
                response_size=len(response_text),
            )

        return response_text
