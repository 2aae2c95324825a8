# -*- coding: utf-8 -*-
"""Geolocation base types.
Access point record, location result, error classes and the response parser
shared by every request style. No network calls here.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Union

import structlog

log = structlog.get_logger(__name__)


class GeolocationError(Exception):
    """Base class for errors raised by a geolocation client."""


class ParseError(GeolocationError):
    """Response body cannot be interpreted as a location."""


class NetworkError(GeolocationError):
    """The request did not complete (DNS, refused connection, timeout...)."""


class ProviderUnavailable(NetworkError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, status: int, reason: Optional[str] = None, body: str = ''):
        self.status = status
        self.reason = reason
        self.body = body
        msg = f'Provider returned HTTP {status}'
        if reason:
            msg += f' ({reason})'
        super().__init__(msg)


class ScanError(OSError):
    """The access point provider failed."""


class IAccessPoint(Protocol):
    mac: str
    ssid: str
    signal_level: int
    channel: int


# wire / scanner aliases accepted by AccessPoint.from_mapping
_FIELD_ALIASES = {
    'mac': ('mac', 'macAddress', 'bssid'),
    'ssid': ('ssid', 'essid'),
    'signal_level': ('signal_level', 'signalStrength', 'signal', 'rssi'),
    'channel': ('channel',),
}


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    for alias in _FIELD_ALIASES[name]:
        if alias in data and data[alias] is not None:
            return data[alias]
    return None


@dataclass(frozen=True)
class AccessPoint:
    mac: str
    ssid: str
    signal_level: int
    channel: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'AccessPoint':
        mac = _lookup(data, 'mac')
        if not mac:
            raise ValueError(f'Access point without MAC address: {dict(data)!r}')
        signal = _lookup(data, 'signal_level')
        if signal is None:
            raise ValueError(f'Access point {mac} has no signal level')
        try:
            signal_level = int(signal)
            channel = int(_lookup(data, 'channel') or 0)
        except (TypeError, ValueError) as e:
            raise ValueError(f'Access point {mac} has non-integer fields') from e
        ssid = _lookup(data, 'ssid') or ''
        return cls(mac=str(mac), ssid=str(ssid), signal_level=signal_level, channel=channel)


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class LocationResult:
    accuracy: float  # meters
    coordinate: Coordinate
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accuracy': self.accuracy,
            'location': {'lat': self.coordinate.lat, 'lng': self.coordinate.lng},
        }


class IGeolocator(Protocol):
    def get_location(self, access_points: Iterable[IAccessPoint]) -> LocationResult: ...

    def get_location_by_query(self, access_points: Iterable[IAccessPoint]) -> LocationResult: ...


def _number(obj: Mapping[str, Any], key: str) -> float:
    val = obj.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ParseError(f'Field {key!r} missing or not a number')
    return float(val)


def parse_location(data: Union[str, bytes, Mapping[str, Any]]) -> LocationResult:
    """Build a LocationResult from a provider response.

    Accepts the raw body (str/bytes) or an already decoded object. Raises
    ParseError unless accuracy and location.lat/lng are all present, numeric
    and within range.
    """
    if isinstance(data, (str, bytes, bytearray)):
        try:
            js = json.loads(data)
        except ValueError as e:
            raise ParseError(f'Invalid JSON: {e}') from e
    else:
        js = data
    if not isinstance(js, Mapping):
        raise ParseError('Response is not a JSON object')
    loc = js.get('location')
    if not isinstance(loc, Mapping):
        raise ParseError("Field 'location' missing or not an object")
    accuracy = _number(js, 'accuracy')
    lat = _number(loc, 'lat')
    lng = _number(loc, 'lng')
    if not -90 <= lat <= 90:
        raise ParseError('Latitude out of range')
    if not -180 <= lng <= 180:
        raise ParseError('Longitude out of range')
    return LocationResult(accuracy=accuracy, coordinate=Coordinate(lat=lat, lng=lng), raw=dict(js))


def collect_access_points(provider: Callable[[], Iterable[IAccessPoint]]) -> List[IAccessPoint]:
    """Call the scanning collaborator once and materialize its records.
    Any failure is re-raised as ScanError.
    """
    try:
        return list(provider())
    except Exception as e:
        log.warning('access_point_scan_failed', error=str(e))
        raise ScanError(f'Access point scan failed: {e}') from e
