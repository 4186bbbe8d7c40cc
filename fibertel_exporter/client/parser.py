"""
Response Parser for the Fibertel Station client
===============================================

This module turns the station's JSON envelopes into the dataclasses in
``fibertel_exporter.models``.

Every API answer is an envelope ``{"error": ..., "message": ..., "data": ...}``
where ``error`` is the literal ``"ok"`` on success.

"""

import json
import logging
from typing import Any

from fibertel_exporter.exceptions import FibertelProtocolError
from fibertel_exporter.models import (
    ChannelReading,
    DownstreamChannel,
    LoginInfo,
    LoginSalts,
    LogoutInfo,
    ModemStatus,
    OfdmDownstreamChannel,
    OfdmUpstreamChannel,
    UpstreamChannel,
)

logger = logging.getLogger("fibertel-exporter")

ENVELOPE_OK = "ok"

# Table name in the diagnostics response -> (ModemStatus attribute, variant)
CHANNEL_TABLES: dict[str, tuple[str, type[ChannelReading]]] = {
    "DSTbl": ("downstream", DownstreamChannel),
    "USTbl": ("upstream", UpstreamChannel),
    "exDSTbl": ("ofdm_downstream", OfdmDownstreamChannel),
    "exUSTbl": ("ofdm_upstream", OfdmUpstreamChannel),
}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class StationResponseParser:
    """Parses station responses into structured data."""

    def parse_envelope(self, response_text: str, operation: str) -> dict[str, Any]:
        """
        Decode a response body into its JSON envelope.

        Raises:
            FibertelProtocolError: If the body is not a JSON object
        """
        try:
            envelope = json.loads(response_text)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"{operation} response is not valid JSON: {e}")
            raise FibertelProtocolError(
                f"Station returned an unparseable {operation} response",
                details={"operation": operation, "parse_error": str(e), "response": str(response_text)[:200]},
            ) from e

        if not isinstance(envelope, dict):
            raise FibertelProtocolError(
                f"Station returned an unexpected {operation} response",
                details={"operation": operation, "response": str(response_text)[:200]},
            )
        return envelope

    def require_ok(self, envelope: dict[str, Any], operation: str) -> None:
        """
        Check the envelope's error field.

        Raises:
            FibertelProtocolError: If error is not "ok"; details carry the
                station's error and message
        """
        error = _text(envelope.get("error"))
        if error != ENVELOPE_OK:
            message = _text(envelope.get("message"))
            raise FibertelProtocolError(
                f"Station answered {operation} with error={error!r}",
                details={"operation": operation, "error": error, "message": message},
            )

    def parse_salts(self, response_text: str) -> LoginSalts:
        envelope = self.parse_envelope(response_text, "salts")
        self.require_ok(envelope, "salts")
        return LoginSalts(
            salt=_text(envelope.get("salt")),
            salt_webui=_text(envelope.get("saltwebui")),
        )

    def parse_login(self, response_text: str) -> LoginInfo:
        """Parse the login envelope; raises FibertelProtocolError unless error is "ok"."""
        envelope = self.parse_envelope(response_text, "login")
        self.require_ok(envelope, "login")

        data = envelope.get("data")
        if not isinstance(data, dict):
            data = {}

        return LoginInfo(
            error=_text(envelope.get("error")),
            message=_text(envelope.get("message")),
            interface=_text(data.get("intf")),
            user=_text(data.get("user")),
            uid=_text(data.get("uid")),
            default_password=_text(data.get("Dpd")),
            remote_address=_text(data.get("remoteAddr")),
            user_agent=_text(data.get("userAgent")),
            http_referer=_text(data.get("httpReferer")),
        )

    def parse_logout(self, response_text: str) -> LogoutInfo:
        envelope = self.parse_envelope(response_text, "logout")
        self.require_ok(envelope, "logout")
        return LogoutInfo(
            error=_text(envelope.get("error")),
            message=_text(envelope.get("message")),
        )

    def parse_modem_status(self, response_text: str) -> ModemStatus:
        """
        Parse the multi-table diagnostics envelope.

        A non-"ok" error is not raised here: the returned ModemStatus carries
        the error and no channels, and the caller decides what to do with it.
        Missing or null tables become empty lists.

        Raises:
            FibertelProtocolError: If the body is not a JSON object
        """
        envelope = self.parse_envelope(response_text, "modem_status")

        status = ModemStatus(
            error=_text(envelope.get("error")),
            message=_text(envelope.get("message")),
        )
        if not status.ok:
            return status

        data = envelope.get("data")
        if not isinstance(data, dict):
            logger.warning("Diagnostics response carries no data object")
            return status

        for table_name, (attribute, variant) in CHANNEL_TABLES.items():
            channels = getattr(status, attribute)
            channels.extend(self.parse_channel_table(data.get(table_name), variant, table_name))

        logger.debug(
            f"Parsed {len(status.downstream)} DS, {len(status.upstream)} US, "
            f"{len(status.ofdm_downstream)} OFDM DS, {len(status.ofdm_upstream)} OFDM US channels"
        )
        return status

    def parse_channel_table(self, rows: Any, variant: type[ChannelReading], table_name: str) -> list:
        """Build one variant reading per row, skipping rows that are not objects."""
        if rows is None:
            return []
        if not isinstance(rows, list):
            logger.warning(f"Channel table {table_name} is not a list, ignoring it")
            return []

        channels = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning(f"Skipping malformed {table_name} row: {row!r}")
                continue
            channels.append(variant.from_device(row))
        return channels
