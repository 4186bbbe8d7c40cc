"""
HTTP session factory for the Fibertel Station client
====================================================

The station serves its API over HTTPS with a self-signed certificate, so the
session never verifies certificates and the matching urllib3 warning is
silenced once here.

"""

import logging
from urllib.parse import urlparse

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.exceptions import InsecureRequestWarning

urllib3.disable_warnings(InsecureRequestWarning)

logger = logging.getLogger("fibertel-exporter")


def create_station_session(base_url: str) -> requests.Session:
    """
    Create a requests Session for one station login.

    The cookie jar is seeded with ``Cwd=No``, as the web UI does before its
    first request. Retries are disabled on the adapter: a failed call fails
    the collection cycle.

    Args:
        base_url: Station base URL, e.g. ``https://192.168.0.1``

    Returns:
        requests.Session ready for the login handshake
    """
    session = requests.Session()

    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=2, max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.verify = False
    session.headers.update(
        {
            "User-Agent": "FibertelExporter/1.0.0",
            "Accept": "application/json, text/javascript, */*; q=0.01",
            "Cache-Control": "no-cache",
        }
    )

    host = urlparse(base_url).hostname or ""
    # Unscoped: domain cookies are never sent to dotless hosts such as "modem"
    session.cookies.set("Cwd", "No", path="/")

    logger.debug(f"🔧 Created station session for {host}")
    return session


__all__ = ["create_station_session"]
