"""
Fibertel Station Client
=======================

This module contains the session client: one instance is one login against
the station, from the cookie bootstrap to the logout.

"""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from fibertel_exporter.client.auth import StationAuthenticator
from fibertel_exporter.client.diagnostics import DiagnosticsFetcher
from fibertel_exporter.client.http import DEFAULT_TIMEOUT, StationRequestHandler
from fibertel_exporter.client.parser import StationResponseParser
from fibertel_exporter.exceptions import (
    FibertelConfigurationError,
    FibertelProtocolError,
    FibertelTransportError,
)
from fibertel_exporter.instrumentation import PerformanceInstrumentation
from fibertel_exporter.models import LoginInfo, LogoutInfo, ModemStatus, SessionState
from fibertel_exporter.session import create_station_session

logger = logging.getLogger("fibertel-exporter")

LOGIN_PATH = "/api/v1/session/login"
LOGOUT_PATH = "/api/v1/session/logout"
MENU_PATH = "/api/v1/session/menu"


class FibertelStationClient:
    """
    Authenticated session against a Fibertel / Vodafone CGA station.

    The client walks UNAUTHENTICATED -> SALTS_REQUESTED -> AUTHENTICATED ->
    CLOSED. A transport failure in any state closes it. Each instance owns
    its cookie jar and CSRF token, so independent clients never interfere.

    Example:
        >>> with FibertelStationClient(password="secret") as client:
        ...     info = client.login()
        ...     status = client.get_modem_status()
        ...     client.logout()
    """

    def __init__(
        self,
        password: str,
        username: str = "admin",
        url: str = "https://192.168.0.1",
        timeout: float = DEFAULT_TIMEOUT,
        enable_instrumentation: bool = True,
    ):
        """
        Initialize the station client.

        Args:
            password: Station admin password
            username: Login username (default: "admin")
            url: Station base URL (default: "https://192.168.0.1")
            timeout: Per-request timeout in seconds (default: 20, status
                retrieval is slow on the device)
            enable_instrumentation: Record per-request timings (default: True)

        Raises:
            FibertelConfigurationError: If url or timeout is invalid
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise FibertelConfigurationError(
                f"Invalid station URL: {url!r}",
                details={"parameter": "url", "value": url},
            )
        if timeout <= 0:
            raise FibertelConfigurationError(
                "Timeout must be greater than 0",
                details={"parameter": "timeout", "value": timeout},
            )

        self.url = url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self.state = SessionState.UNAUTHENTICATED
        self.login_info: Optional[LoginInfo] = None

        self.instrumentation = PerformanceInstrumentation() if enable_instrumentation else None
        self.session = create_station_session(self.url)
        self.authenticator = StationAuthenticator(username, password)
        self.parser = StationResponseParser()
        self.request_handler = StationRequestHandler(
            self.session,
            self.url,
            timeout=timeout,
            instrumentation=self.instrumentation,
        )
        self.diagnostics = DiagnosticsFetcher(self.parser)

        logger.debug(f"FibertelStationClient initialized for {self.url} as {username}")

    @property
    def csrf_token(self) -> str:
        return self.request_handler.csrf_token

    @property
    def authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def request(
        self,
        method: str,
        path: str,
        data: Optional[dict[str, str]] = None,
        operation: Optional[str] = None,
    ) -> str:
        """
        Send a request within this session.

        Raises:
            FibertelTransportError: On connection or timeout failure; the
                session is closed afterwards
        """
        try:
            return self.request_handler.request(method, path, data, operation=operation)
        except FibertelTransportError:
            self.state = SessionState.CLOSED
            raise

    def login(self) -> LoginInfo:
        """
        Run the full login handshake.

        Returns:
            Session metadata from the station

        Raises:
            FibertelProtocolError: If the salt request or the login is rejected
            FibertelTransportError: If the station cannot be reached
        """
        logger.info(f"🔐 Logging in to {self.url} as {self.username}")

        self.request("GET", "/", operation="bootstrap")

        salts_text = self.request(
            "POST", LOGIN_PATH, self.authenticator.build_salt_request(), operation="salts"
        )
        salts = self.parser.parse_salts(salts_text)
        self.state = SessionState.SALTS_REQUESTED
        logger.debug("Received login salts")

        login_text = self.request(
            "POST", LOGIN_PATH, self.authenticator.build_login_request(salts), operation="login"
        )
        self.login_info = self.parser.parse_login(login_text)
        self.state = SessionState.AUTHENTICATED

        # Authenticated GETs are rejected until the menu has been requested once
        menu_text = self.request("GET", MENU_PATH, operation="menu")
        logger.debug(f"Response menu: {menu_text}")

        logger.info(f"✅ Logged in as {self.login_info.user or self.username} (uid {self.login_info.uid})")
        return self.login_info

    def get_modem_status(self) -> ModemStatus:
        """Retrieve the DOCSIS channel tables."""
        if not self.authenticated:
            raise FibertelProtocolError(
                "Not authenticated. Call login() first.",
                details={"operation": "modem_status", "state": self.state.value},
            )
        return self.diagnostics.fetch(self)

    def logout(self) -> LogoutInfo:
        """
        End the station session.

        Raises:
            FibertelProtocolError: If the station answers error != "ok"
            FibertelTransportError: If the station cannot be reached
        """
        try:
            logout_text = self.request("POST", LOGOUT_PATH, {}, operation="logout")
            logout_info = self.parser.parse_logout(logout_text)
        finally:
            self.state = SessionState.CLOSED
        logger.info("👋 Logged out")
        return logout_info

    def get_performance_summary(self) -> dict[str, Any]:
        if not self.instrumentation:
            return {"error": "Instrumentation disabled"}
        return self.instrumentation.get_performance_summary()

    def close(self) -> None:
        """Close the HTTP session."""
        self.state = SessionState.CLOSED
        self.session.close()

    def __enter__(self) -> "FibertelStationClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
