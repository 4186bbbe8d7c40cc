"""
Data Models for the Fibertel Station exporter
=============================================

This module contains the dataclasses shared by the session client, the
diagnostics fetcher and the metric projector.

"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional


class SessionState(Enum):
    """Lifecycle of one station session."""

    UNAUTHENTICATED = "unauthenticated"
    SALTS_REQUESTED = "salts_requested"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass
class TimingMetrics:
    """Timing of a single station request."""

    operation: str
    start_time: float
    end_time: float
    duration: float
    success: bool
    error_type: Optional[str] = None
    http_status: Optional[int] = None
    response_size: int = 0

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds."""
        return self.duration * 1000


@dataclass
class LoginSalts:
    """One-time salts handed out by the station for a single login attempt."""

    salt: str
    salt_webui: str


@dataclass
class LoginInfo:
    """Session metadata returned by a successful login."""

    error: str
    message: str = ""
    interface: str = ""
    user: str = ""
    uid: str = ""
    default_password: str = ""
    remote_address: str = ""
    user_agent: str = ""
    http_referer: str = ""

    @property
    def default_password_in_use(self) -> bool:
        return self.default_password == "Yes"


@dataclass
class LogoutInfo:
    error: str
    message: str = ""


@dataclass
class ChannelReading:
    """
    Shared core of the four DOCSIS channel tables.

    Every field is kept exactly as the station formats it ("602.0 MHz",
    "3.1 dBmV", "Locked"); conversion to numbers happens in the metric
    projector. Subclasses add their table-specific fields and declare which
    device key feeds which attribute.

    Attributes:
        id: Row identifier (``__id``)
        channel_id: DOCSIS channel ID
        power: Received or transmitted power level
        lock_status: Lock status literal, "Locked" when the channel is up
        channel_type: Channel type code reported by the station
    """

    kind: ClassVar[str] = "channel"
    device_fields: ClassVar[dict[str, str]] = {
        "id": "__id",
        "channel_id": "ChannelID",
        "power": "PowerLevel",
        "lock_status": "LockStatus",
        "channel_type": "ChannelType",
    }

    id: str = ""
    channel_id: str = ""
    power: str = ""
    lock_status: str = ""
    channel_type: str = ""

    @classmethod
    def from_device(cls, record: dict[str, Any]) -> "ChannelReading":
        """Build a reading from one row of a station channel table."""
        values = {}
        for attribute, key in cls.device_fields.items():
            value = record.get(key)
            values[attribute] = "" if value is None else str(value)
        return cls(**values)

    @property
    def locked(self) -> bool:
        return self.lock_status == "Locked"


@dataclass
class DownstreamChannel(ChannelReading):
    """Legacy (SC-QAM) downstream channel from ``DSTbl``."""

    kind: ClassVar[str] = "downstream"
    device_fields: ClassVar[dict[str, str]] = {
        **ChannelReading.device_fields,
        "frequency": "Frequency",
        "snr": "SNRLevel",
        "modulation": "Modulation",
    }

    frequency: str = ""
    snr: str = ""
    modulation: str = ""


@dataclass
class UpstreamChannel(ChannelReading):
    """Legacy upstream channel from ``USTbl``."""

    kind: ClassVar[str] = "upstream"
    device_fields: ClassVar[dict[str, str]] = {
        **ChannelReading.device_fields,
        "frequency": "Frequency",
        "symbol_rate": "SymbolRate",
    }

    frequency: str = ""
    symbol_rate: str = ""


@dataclass
class OfdmChannel(ChannelReading):
    """Fields shared by the DOCSIS 3.1 OFDM and OFDMA tables."""

    kind: ClassVar[str] = "ofdm"
    device_fields: ClassVar[dict[str, str]] = {
        **ChannelReading.device_fields,
        "start_frequency": "StartFrequency",
        "plc_frequency": "PLCFrequency",
        "central_frequency": "CentralFrequency",
        "bandwidth": "BandWidth",
        "fft": "FFT",
    }

    start_frequency: str = ""
    plc_frequency: str = ""
    central_frequency: str = ""
    bandwidth: str = ""
    fft: str = ""


@dataclass
class OfdmDownstreamChannel(OfdmChannel):
    """DOCSIS 3.1 OFDM downstream channel from ``exDSTbl``."""

    kind: ClassVar[str] = "ofdm_downstream"
    device_fields: ClassVar[dict[str, str]] = {
        **OfdmChannel.device_fields,
        "snr": "SNRLevel",
    }

    snr: str = ""


@dataclass
class OfdmUpstreamChannel(OfdmChannel):
    """DOCSIS 3.1 OFDMA upstream channel from ``exUSTbl``."""

    kind: ClassVar[str] = "ofdm_upstream"


@dataclass
class ModemStatus:
    """Parsed diagnostics envelope with the four channel tables."""

    error: str
    message: str = ""
    downstream: list[DownstreamChannel] = field(default_factory=list)
    upstream: list[UpstreamChannel] = field(default_factory=list)
    ofdm_downstream: list[OfdmDownstreamChannel] = field(default_factory=list)
    ofdm_upstream: list[OfdmUpstreamChannel] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error == "ok"

    @property
    def channels(self) -> Iterator[ChannelReading]:
        yield from self.downstream
        yield from self.upstream
        yield from self.ofdm_downstream
        yield from self.ofdm_upstream

    @property
    def channel_count(self) -> int:
        return len(self.downstream) + len(self.upstream) + len(self.ofdm_downstream) + len(self.ofdm_upstream)


@dataclass
class CycleResult:
    """Everything one collection cycle learned about the station."""

    login: Optional[LoginInfo] = None
    login_ok: bool = False
    login_message: Optional[str] = None
    status: Optional[ModemStatus] = None
    logout: Optional[LogoutInfo] = None
    logout_ok: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MetricSpec:
    name: str
    documentation: str
    label_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricObservation:
    """
    A single metric sample.

    Labels are an ordered tuple of (key, value) pairs so that observations
    are hashable and keep the label order of their MetricSpec.
    """

    name: str
    value: float
    labels: tuple[tuple[str, str], ...] = ()

    @property
    def label_names(self) -> list[str]:
        return [key for key, _ in self.labels]

    @property
    def label_values(self) -> list[str]:
        return [value for _, value in self.labels]

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "labels": dict(self.labels)}


__all__ = [
    "ChannelReading",
    "CycleResult",
    "DownstreamChannel",
    "LoginInfo",
    "LoginSalts",
    "LogoutInfo",
    "MetricObservation",
    "MetricSpec",
    "ModemStatus",
    "OfdmChannel",
    "OfdmDownstreamChannel",
    "OfdmUpstreamChannel",
    "SessionState",
    "TimingMetrics",
    "UpstreamChannel",
]
