# SPDX-License-Identifier: MPL-2.0
"""
Amber Electric API Data Models

Immutable records decoded from the JSON arrays returned by the Amber API.
Wire names are camelCase; the field literally named "type" is exposed under
a descriptive attribute name on each record.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple, Type, TypeVar

T = TypeVar("T")


def _field(data: Dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise TypeError(f"Expected JSON object, got {type(data).__name__}")
    return data[key]


def _str(data: Dict[str, Any], key: str) -> str:
    value = _field(data, key)
    if not isinstance(value, str):
        raise TypeError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def _int(data: Dict[str, Any], key: str) -> int:
    value = _field(data, key)
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Field '{key}' must be an integer, got {type(value).__name__}")
    return value


def _float(data: Dict[str, Any], key: str) -> float:
    value = _field(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Field '{key}' must be a number, got {type(value).__name__}")
    return float(value)


def _bool(data: Dict[str, Any], key: str) -> bool:
    value = _field(data, key)
    if not isinstance(value, bool):
        raise TypeError(f"Field '{key}' must be a boolean, got {type(value).__name__}")
    return value


def _timestamp(data: Dict[str, Any], key: str) -> datetime:
    """Parse an ISO 8601 date or date-time, accepting a trailing 'Z'."""
    value = _str(data, key)
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValueError(f"Field '{key}' is not an ISO 8601 timestamp: '{value}'")


def parse_list(cls: Type[T], data: Any) -> List[T]:
    """
    Decode a JSON array into a list of records.

    Args:
        cls: Record class providing a from_dict classmethod
        data: Parsed JSON body

    Returns:
        Records in the order they appear in the array

    Raises:
        TypeError: If data is not a list or an element has the wrong shape
        KeyError: If an element is missing a required field
        ValueError: If an element holds an unparseable timestamp
    """
    if not isinstance(data, list):
        raise TypeError(f"Expected JSON array, got {type(data).__name__}")
    from_dict: Callable[[Dict[str, Any]], T] = getattr(cls, "from_dict")
    return [from_dict(item) for item in data]


@dataclass(frozen=True)
class TariffInfo:
    """Tariff information attached to a price or usage interval."""
    period: str  # e.g. "offPeak", "shoulder", "peak"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API format."""
        return {"period": self.period}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TariffInfo":
        """Create from API response."""
        return cls(period=_str(data, "period"))


@dataclass(frozen=True)
class SiteChannel:
    """One metering channel of a site."""
    identifier: str  # e.g. "E1"
    tariff: str
    channel_type: str  # "general", "controlledLoad" or "feedIn"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API format."""
        return {
            "identifier": self.identifier,
            "tariff": self.tariff,
            "type": self.channel_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SiteChannel":
        """Create from API response."""
        return cls(
            identifier=_str(data, "identifier"),
            tariff=_str(data, "tariff"),
            channel_type=_str(data, "type"),
        )


@dataclass(frozen=True)
class SiteDetails:
    """
    A metering point linked to the account.

    Attributes:
        active_from: Date the site became active with Amber
        channels: Metering channels, in API order
        id: Site identifier used to scope price and usage requests
        network: Distribution network operator
        nmi: National Metering Identifier
        status: Site status (e.g. "active", "pending", "closed")
    """
    active_from: datetime
    channels: Tuple[SiteChannel, ...]
    id: str
    network: str
    nmi: str
    status: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API format."""
        return {
            "activeFrom": self.active_from.isoformat(),
            "channels": [channel.to_dict() for channel in self.channels],
            "id": self.id,
            "network": self.network,
            "nmi": self.nmi,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SiteDetails":
        """Create from API response."""
        channels = _field(data, "channels")
        if not isinstance(channels, list):
            raise TypeError(f"Field 'channels' must be an array, got {type(channels).__name__}")
        return cls(
            active_from=_timestamp(data, "activeFrom"),
            channels=tuple(SiteChannel.from_dict(c) for c in channels),
            id=_str(data, "id"),
            network=_str(data, "network"),
            nmi=_str(data, "nmi"),
            status=_str(data, "status"),
        )


@dataclass(frozen=True)
class CurrentPriceWindow:
    """
    The price applicable to the current interval for one channel.

    Prices are in c/kWh. renewables_pct is the share of renewables
    in the grid for the interval.
    """
    interval_type: str  # "CurrentInterval"
    date: datetime
    duration_minutes: int
    start_time: datetime
    end_time: datetime
    nem_time: datetime
    per_kwh: float
    renewables_pct: float
    spot_per_kwh: float
    channel_type: str
    spike_status: str  # "none", "potential" or "spike"
    tariff_info: TariffInfo
    descriptor: str
    is_estimate: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API format."""
        return {
            "type": self.interval_type,
            "date": self.date.isoformat(),
            "duration": self.duration_minutes,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "nemTime": self.nem_time.isoformat(),
            "perKwh": self.per_kwh,
            "renewables": self.renewables_pct,
            "spotPerKwh": self.spot_per_kwh,
            "channelType": self.channel_type,
            "spikeStatus": self.spike_status,
            "tariffInformation": self.tariff_info.to_dict(),
            "descriptor": self.descriptor,
            "estimate": self.is_estimate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CurrentPriceWindow":
        """Create from API response."""
        return cls(
            interval_type=_str(data, "type"),
            date=_timestamp(data, "date"),
            duration_minutes=_int(data, "duration"),
            start_time=_timestamp(data, "startTime"),
            end_time=_timestamp(data, "endTime"),
            nem_time=_timestamp(data, "nemTime"),
            per_kwh=_float(data, "perKwh"),
            renewables_pct=_float(data, "renewables"),
            spot_per_kwh=_float(data, "spotPerKwh"),
            channel_type=_str(data, "channelType"),
            spike_status=_str(data, "spikeStatus"),
            tariff_info=TariffInfo.from_dict(_field(data, "tariffInformation")),
            descriptor=_str(data, "descriptor"),
            is_estimate=_bool(data, "estimate"),
        )


@dataclass(frozen=True)
class UsageRecord:
    """One metered interval of usage for a channel."""
    interval_type: str  # "Usage"
    duration_minutes: int
    date: datetime
    end_time: datetime
    quality: str  # "estimated" or "billable"
    kwh: float
    nem_time: datetime
    per_kwh: float
    channel_type: str
    channel_identifier: str
    cost_cents: float
    renewables_pct: float
    spot_per_kwh: float
    start_time: datetime
    spike_status: str
    tariff_info: TariffInfo
    descriptor: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API format."""
        return {
            "type": self.interval_type,
            "duration": self.duration_minutes,
            "date": self.date.isoformat(),
            "endTime": self.end_time.isoformat(),
            "quality": self.quality,
            "kwh": self.kwh,
            "nemTime": self.nem_time.isoformat(),
            "perKwh": self.per_kwh,
            "channelType": self.channel_type,
            "channelIdentifier": self.channel_identifier,
            "cost": self.cost_cents,
            "renewables": self.renewables_pct,
            "spotPerKwh": self.spot_per_kwh,
            "startTime": self.start_time.isoformat(),
            "spikeStatus": self.spike_status,
            "tariffInformation": self.tariff_info.to_dict(),
            "descriptor": self.descriptor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsageRecord":
        """Create from API response."""
        return cls(
            interval_type=_str(data, "type"),
            duration_minutes=_int(data, "duration"),
            date=_timestamp(data, "date"),
            end_time=_timestamp(data, "endTime"),
            quality=_str(data, "quality"),
            kwh=_float(data, "kwh"),
            nem_time=_timestamp(data, "nemTime"),
            per_kwh=_float(data, "perKwh"),
            channel_type=_str(data, "channelType"),
            channel_identifier=_str(data, "channelIdentifier"),
            cost_cents=_float(data, "cost"),
            renewables_pct=_float(data, "renewables"),
            spot_per_kwh=_float(data, "spotPerKwh"),
            start_time=_timestamp(data, "startTime"),
            spike_status=_str(data, "spikeStatus"),
            tariff_info=TariffInfo.from_dict(_field(data, "tariffInformation")),
            descriptor=_str(data, "descriptor"),
        )
