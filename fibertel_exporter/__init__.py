"""
Fibertel Station Exporter
=========================

Python library and Prometheus exporter for the DOCSIS diagnostics of
Fibertel / Vodafone "CGA" cable modems (Sagemcom/Technicolor web API with
double PBKDF2 login).

Each collection cycle is one complete session: salt handshake, login,
diagnostics retrieval, logout. The four channel tables (SC-QAM and OFDM,
downstream and upstream) are projected onto flat gauge observations.

Quick Start:
    One-off query with automatic resource management:

    >>> from fibertel_exporter import FibertelStationClient
    >>> with FibertelStationClient(password="your_password") as client:
    ...     client.login()
    ...     status = client.get_modem_status()
    ...     print(f"{len(status.downstream)} downstream channels")
    ...     client.logout()

    Serving metrics:

    >>> from prometheus_client import REGISTRY, start_http_server
    >>> from fibertel_exporter import StationCollector
    >>> REGISTRY.register(StationCollector("https://192.168.0.1", "admin", "secret"))
    >>> start_http_server(9420)

Error Handling:
    All operations raise subclasses of FibertelError:

    >>> from fibertel_exporter import FibertelProtocolError
    >>> try:
    ...     client.login()
    ... except FibertelProtocolError as e:
    ...     print(f"Login rejected: {e}")

This is an unofficial library not affiliated with Fibertel, Vodafone or the
device manufacturers.

License: MIT
"""

from .client.auth import derive_login_password
from .client.diagnostics import DiagnosticsFetcher
from .client.main import FibertelStationClient
from .collector import StationCollector, run_collection_cycle
from .exceptions import (
    FibertelConfigurationError,
    FibertelError,
    FibertelParseError,
    FibertelProtocolError,
    FibertelTimeoutError,
    FibertelTransportError,
)
from .metrics import MetricProjector
from .models import (
    CycleResult,
    DownstreamChannel,
    MetricObservation,
    ModemStatus,
    OfdmDownstreamChannel,
    OfdmUpstreamChannel,
    UpstreamChannel,
)

# Version information
__version__ = "1.0.0"
__license__ = "MIT"

# Public API
__all__ = [
    "CycleResult",
    "DiagnosticsFetcher",
    "DownstreamChannel",
    "FibertelConfigurationError",
    "FibertelError",
    "FibertelParseError",
    "FibertelProtocolError",
    "FibertelStationClient",
    "FibertelTimeoutError",
    "FibertelTransportError",
    "MetricObservation",
    "MetricProjector",
    "ModemStatus",
    "OfdmDownstreamChannel",
    "OfdmUpstreamChannel",
    "StationCollector",
    "UpstreamChannel",
    "__license__",
    "__version__",
    "derive_login_password",
    "run_collection_cycle",
]
