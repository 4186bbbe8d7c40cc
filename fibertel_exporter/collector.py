"""
Collection cycle and Prometheus collector
=========================================

One scrape is one collection cycle: login, diagnostics, logout, each against
a fresh FibertelStationClient. StationCollector plugs that cycle into the
prometheus_client registry as a custom collector.

"""

import logging
from typing import Callable, Iterator, Optional

from prometheus_client.core import GaugeMetricFamily

from fibertel_exporter.client.http import DEFAULT_TIMEOUT
from fibertel_exporter.client.main import FibertelStationClient
from fibertel_exporter.exceptions import FibertelError, FibertelProtocolError
from fibertel_exporter.metrics import MetricProjector
from fibertel_exporter.models import CycleResult, LogoutInfo, MetricObservation

logger = logging.getLogger("fibertel-exporter")


def run_collection_cycle(client: FibertelStationClient) -> CycleResult:
    """
    Run login, diagnostics and logout against one client.

    Never raises for station-side failures: they are logged and recorded in
    the returned CycleResult.

    - A failed login ends the cycle; diagnostics and logout are skipped.
    - A failed diagnostics fetch leaves status empty; logout still runs.
    - A failed logout only sets logout_ok to False.
    """
    result = CycleResult()

    try:
        result.login = client.login()
        result.login_ok = True
        result.login_message = result.login.message
    except FibertelError as e:
        logger.error(f"❌ Login failed: {e}")
        result.errors.append(f"login: {e.message}")
        if isinstance(e, FibertelProtocolError) and e.details.get("message"):
            result.login_message = e.details["message"]
        return result

    try:
        result.status = client.get_modem_status()
        if not result.status.ok:
            result.errors.append(f"modem_status: error={result.status.error!r}")
    except FibertelError as e:
        logger.error(f"❌ Diagnostics retrieval failed, reporting no channels: {e}")
        result.errors.append(f"modem_status: {e.message}")

    try:
        result.logout = client.logout()
        result.logout_ok = True
    except FibertelError as e:
        logger.error(f"❌ Logout failed: {e}")
        result.errors.append(f"logout: {e.message}")
        if isinstance(e, FibertelProtocolError) and "error" in e.details:
            result.logout = LogoutInfo(error=e.details["error"], message=e.details.get("message", ""))

    return result


class StationCollector:
    """Custom collector that logs in to the station on every scrape."""

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        projector: Optional[MetricProjector] = None,
        client_factory: Optional[Callable[[], FibertelStationClient]] = None,
    ):
        self.url = url
        self.username = username
        self.password = password
        self.timeout = timeout
        self.projector = projector or MetricProjector()
        self.client_factory = client_factory or self._new_client
        self.last_result: Optional[CycleResult] = None

    def _new_client(self) -> FibertelStationClient:
        return FibertelStationClient(
            password=self.password,
            username=self.username,
            url=self.url,
            timeout=self.timeout,
        )

    def observe(self) -> list[MetricObservation]:
        """Run one collection cycle and return its observations."""
        with self.client_factory() as client:
            self.last_result = run_collection_cycle(client)
        return list(self.projector.project(self.last_result))

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for spec in self.projector.describe():
            yield GaugeMetricFamily(spec.name, spec.documentation, labels=list(spec.label_names))

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families: dict[str, GaugeMetricFamily] = {
            spec.name: GaugeMetricFamily(spec.name, spec.documentation, labels=list(spec.label_names))
            for spec in self.projector.describe()
        }
        seen = []
        for observation in self.observe():
            family = families[observation.name]
            family.add_metric(observation.label_values, observation.value)
            if observation.name not in seen:
                seen.append(observation.name)

        for name in seen:
            yield families[name]
