# -*- coding: utf-8 -*-
"""Request styles offered by GoogleGeolocator.
The CLI builds its --api choices and log labels from here."""
from __future__ import annotations
from typing import Callable, Iterable, Iterator, Optional, Tuple

from .geolocation_base import IAccessPoint, IGeolocator, LocationResult

# (request style id, label, GoogleGeolocator method), in --api order
PROVIDERS = [
    ('geolocate', 'Google Geolocation API', 'get_location'),
    ('browserlocation', 'Google Browser Location API', 'get_location_by_query'),
]

DEFAULT_PROVIDER = 'geolocate'

_LABELS = {pid: label for pid, label, _ in PROVIDERS}
_METHODS = {pid: meth for pid, _, meth in PROVIDERS}


def get_display_name(provider_id: Optional[str]) -> str:
    """Label for a request style; unknown ids are echoed back."""
    return _LABELS.get(provider_id, provider_id) if provider_id else ''


def iter_providers() -> Iterator[Tuple[str, str]]:
    for pid, label, _ in PROVIDERS:
        yield pid, label


def get_location_method(
    geolocator: IGeolocator, provider_id: str
) -> Callable[[Iterable[IAccessPoint]], LocationResult]:
    """Bound lookup operation for a request style. Unknown ids raise KeyError."""
    return getattr(geolocator, _METHODS[provider_id])
