"""
Metric projection for the Fibertel Station exporter
===================================================

Turns a collection cycle's outcome into flat MetricObservation records.

The station reports every number as a string, often with its unit attached
("602.0 MHz", "-1.3 dBmV"). All conversion goes through best_effort_float so
that one unreadable field zeroes one sample instead of dropping a channel.

"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional

from fibertel_exporter.exceptions import FibertelParseError
from fibertel_exporter.models import (
    ChannelReading,
    CycleResult,
    LoginInfo,
    MetricObservation,
    MetricSpec,
    ModemStatus,
)

logger = logging.getLogger("fibertel-exporter")

PREFIX = "fibertel_"

# Station frequencies are in MHz
FREQUENCY_SCALE = 1e6

LOCKED = "Locked"

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")


def parse_number(value: Optional[str]) -> float:
    """
    Extract the number from a device-formatted string.

    Everything but digits, "." and "-" is dropped before conversion, so
    "123.4 MHz" gives 123.4.

    Raises:
        FibertelParseError: If nothing numeric is left
    """
    cleaned = _NON_NUMERIC.sub("", value or "")
    try:
        return float(cleaned)
    except ValueError as e:
        raise FibertelParseError(
            f"Cannot parse {value!r} as a number",
            details={"value": value},
        ) from e


def best_effort_float(value: Optional[str]) -> float:
    """parse_number with 0.0 for anything unreadable."""
    try:
        return parse_number(value)
    except FibertelParseError as e:
        logger.debug(f"Using 0 for unparseable value: {e}")
        return 0.0


def locked_to_float(lock_status: Optional[str]) -> float:
    return 1.0 if lock_status == LOCKED else 0.0


def _spec(name: str, documentation: str, label_names: tuple[str, ...] = ()) -> MetricSpec:
    return MetricSpec(PREFIX + name, documentation, label_names)


LOGIN_SUCCESS = _spec("login_success_bool", "1 if the login was successful")
LOGIN_MESSAGE = _spec("login_message_info", "Login message returned by the web interface", ("message",))
USER = _spec("user_info", "User name as returned by the web interface", ("username",))
UID = _spec("uid_info", "User id as returned by the web interface", ("uid",))
DEFAULT_PASSWORD = _spec("default_password_bool", "1 if the default password is in use")
LOGOUT_SUCCESS = _spec("logout_success_bool", "1 if the logout was successful")
LOGOUT_MESSAGE = _spec("logout_message_info", "Logout message returned by the web interface", ("message",))

SESSION_SPECS = (LOGIN_SUCCESS, LOGIN_MESSAGE, USER, UID, DEFAULT_PASSWORD, LOGOUT_SUCCESS, LOGOUT_MESSAGE)


@dataclass(frozen=True)
class ChannelMetricGroup:
    """
    How one channel variant maps onto metrics.

    Attributes:
        label_names: Label names, in order: row id, channel id, tertiary, type
        tertiary: Attribute that feeds the third label
        frequencies: (spec, attribute) pairs scaled from MHz to Hz
        levels: (spec, attribute) pairs reported in native dBmV / dB
        locked: Spec for the 0/1 lock indicator
        status_info: Optional info metric carrying the raw lock status
    """

    label_names: tuple[str, ...]
    tertiary: str
    frequencies: tuple[tuple[MetricSpec, str], ...]
    levels: tuple[tuple[MetricSpec, str], ...]
    locked: MetricSpec
    status_info: Optional[MetricSpec] = None

    def labels(self, channel: ChannelReading) -> tuple[tuple[str, str], ...]:
        values = (channel.id, channel.channel_id, getattr(channel, self.tertiary), channel.channel_type)
        return tuple(zip(self.label_names, values))

    @property
    def specs(self) -> list[MetricSpec]:
        specs = [spec for spec, _ in self.frequencies + self.levels]
        specs.append(self.locked)
        if self.status_info:
            specs.append(self.status_info)
        return specs


_DS_LABELS = ("id", "channel_id", "modulation", "channel_type")
_US_LABELS = ("id", "channel_id_up", "symbol_rate", "channel_type")
_OFDM_LABELS = ("id", "channel_id_ofdm", "fft", "channel_type")


def _ofdm_group(direction: str, with_snr: bool) -> ChannelMetricGroup:
    prefix = f"ofdm_{direction}_"
    levels = [(_spec(prefix + "power_dBmV", "Power", _OFDM_LABELS), "power")]
    if with_snr:
        levels.append((_spec(prefix + "snr_dB", "SNR", _OFDM_LABELS), "snr"))
    return ChannelMetricGroup(
        label_names=_OFDM_LABELS,
        tertiary="fft",
        frequencies=(
            (_spec(prefix + "start_frequency_hertz", "Start frequency", _OFDM_LABELS), "start_frequency"),
            (_spec(prefix + "end_frequency_hertz", "End frequency", _OFDM_LABELS), "plc_frequency"),
            (_spec(prefix + "central_frequency_hertz", "Central frequency", _OFDM_LABELS), "central_frequency"),
            (_spec(prefix + "bandwidth_hertz", "Bandwidth", _OFDM_LABELS), "bandwidth"),
        ),
        levels=tuple(levels),
        locked=_spec(prefix + "locked_bool", "Locking status", _OFDM_LABELS),
    )


CHANNEL_GROUPS: dict[str, ChannelMetricGroup] = {
    "downstream": ChannelMetricGroup(
        label_names=_DS_LABELS,
        tertiary="modulation",
        frequencies=(
            (_spec("downstream_central_frequency_hertz", "Central frequency in hertz", _DS_LABELS), "frequency"),
        ),
        levels=(
            (_spec("downstream_power_dBmV", "Power in dBmV", _DS_LABELS), "power"),
            (_spec("downstream_snr_dB", "SNR in dB", _DS_LABELS), "snr"),
        ),
        locked=_spec("downstream_locked_bool", "Locking status", _DS_LABELS),
    ),
    "upstream": ChannelMetricGroup(
        label_names=_US_LABELS,
        tertiary="symbol_rate",
        frequencies=(
            (_spec("upstream_central_frequency_hertz", "Central frequency", _US_LABELS), "frequency"),
        ),
        levels=((_spec("upstream_power_dBmV", "Power", _US_LABELS), "power"),),
        locked=_spec("upstream_locked_bool", "Locking status", _US_LABELS),
        status_info=_spec("upstream_ranging_status_info", "Ranging status", _US_LABELS + ("status",)),
    ),
    "ofdm_downstream": _ofdm_group("downstream", with_snr=True),
    "ofdm_upstream": _ofdm_group("upstream", with_snr=False),
}


class MetricProjector:
    """
    Projects a CycleResult onto metric observations.

    Exposes the two capabilities an exporter needs: describe() lists every
    metric that can appear, project() yields the samples of one cycle.
    """

    def __init__(self, frequency_scale: float = FREQUENCY_SCALE):
        self.frequency_scale = frequency_scale

    def describe(self) -> list[MetricSpec]:
        specs = list(SESSION_SPECS)
        for group in CHANNEL_GROUPS.values():
            specs.extend(group.specs)
        return specs

    def project(self, result: CycleResult) -> Iterator[MetricObservation]:
        """Yield the observations for one cycle, session metrics first."""
        if result.login_message is not None:
            yield MetricObservation(LOGIN_MESSAGE.name, 1.0, (("message", result.login_message),))

        if not result.login_ok or result.login is None:
            yield MetricObservation(LOGIN_SUCCESS.name, 0.0)
            yield MetricObservation(LOGOUT_SUCCESS.name, 0.0)
            return

        yield MetricObservation(LOGIN_SUCCESS.name, 1.0)
        yield from self.project_login(result.login)

        if result.status is not None:
            yield from self.project_channels(result.status)

        if result.logout is not None:
            yield MetricObservation(LOGOUT_MESSAGE.name, 1.0, (("message", result.logout.message),))
        yield MetricObservation(LOGOUT_SUCCESS.name, 1.0 if result.logout_ok else 0.0)

    def project_login(self, login: LoginInfo) -> Iterator[MetricObservation]:
        yield MetricObservation(USER.name, 1.0, (("username", login.user),))
        yield MetricObservation(UID.name, 1.0, (("uid", login.uid),))
        yield MetricObservation(DEFAULT_PASSWORD.name, 1.0 if login.default_password_in_use else 0.0)

    def project_channels(self, status: ModemStatus) -> Iterator[MetricObservation]:
        for channel in status.channels:
            yield from self.project_channel(channel)

    def project_channel(self, channel: ChannelReading) -> Iterator[MetricObservation]:
        group = CHANNEL_GROUPS.get(channel.kind)
        if group is None:
            logger.warning(f"No metric mapping for channel kind {channel.kind!r}")
            return

        labels = group.labels(channel)
        for spec, attribute in group.frequencies:
            value = best_effort_float(getattr(channel, attribute)) * self.frequency_scale
            yield MetricObservation(spec.name, value, labels)
        for spec, attribute in group.levels:
            yield MetricObservation(spec.name, best_effort_float(getattr(channel, attribute)), labels)
        yield MetricObservation(group.locked.name, locked_to_float(channel.lock_status), labels)
        if group.status_info:
            yield MetricObservation(group.status_info.name, 1.0, labels + (("status", channel.lock_status),))


__all__ = [
    "CHANNEL_GROUPS",
    "FREQUENCY_SCALE",
    "MetricProjector",
    "best_effort_float",
    "locked_to_float",
    "parse_number",
]
