"""
DOCSIS diagnostics retrieval for the Fibertel Station client.

All four channel tables come back from a single call; the trailing ``_``
query parameter is the millisecond timestamp the web UI uses to defeat
caching.
"""

import logging
import time
from typing import TYPE_CHECKING, Optional

from fibertel_exporter.client.parser import StationResponseParser
from fibertel_exporter.models import ModemStatus

if TYPE_CHECKING:
    from fibertel_exporter.client.main import FibertelStationClient

logger = logging.getLogger("fibertel-exporter")

STATUS_TABLES = ("exUSTbl", "exDSTbl", "USTbl", "DSTbl")
STATUS_PATH = "/api/v1/modem/" + ",".join(STATUS_TABLES)


def epoch_millis() -> int:
    return int(time.time() * 1000)


class DiagnosticsFetcher:
    """Fetches the channel tables through an authenticated client."""

    def __init__(self, parser: Optional[StationResponseParser] = None):
        self.parser = parser or StationResponseParser()

    def build_path(self) -> str:
        return f"{STATUS_PATH}?_={epoch_millis()}"

    def fetch(self, client: "FibertelStationClient") -> ModemStatus:
        """
        Retrieve the DOCSIS channel tables.

        Args:
            client: Logged-in station client

        Returns:
            ModemStatus; when the station answers with error != "ok" it holds
            that error and no channels

        Raises:
            FibertelTransportError: If the station cannot be reached
            FibertelProtocolError: If the body is not a JSON envelope
        """
        response_text = client.request("GET", self.build_path(), operation="modem_status")
        logger.debug(f"DOCSIS response body: {response_text}")

        status = self.parser.parse_modem_status(response_text)
        if not status.ok:
            logger.warning(f"⚠️ Station reported error={status.error!r} for diagnostics: {status.message}")
        else:
            logger.info(f"📡 Retrieved {status.channel_count} channels")
        return status
