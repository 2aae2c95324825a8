# -*- coding: utf-8 -*-
"""Locate a device from the wifi access points it can see, using Google's geolocation APIs."""

from .geolocation_base import (
    AccessPoint,
    Coordinate,
    GeolocationError,
    LocationResult,
    NetworkError,
    ParseError,
    ProviderUnavailable,
    ScanError,
    collect_access_points,
    parse_location,
)
from .google_geolocator import GoogleGeolocator
from .scan_loader import load_access_points
from .settings_store import get_api_key_from_file

__version__ = "0.3.0"
__all__ = [
    "AccessPoint",
    "Coordinate",
    "GeolocationError",
    "GoogleGeolocator",
    "LocationResult",
    "NetworkError",
    "ParseError",
    "ProviderUnavailable",
    "ScanError",
    "collect_access_points",
    "get_api_key_from_file",
    "load_access_points",
    "parse_location",
]
