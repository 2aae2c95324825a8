# -*- coding: utf-8 -*-
"""Google geolocation client.
Two request styles against two endpoints:
- get_location: Geolocation API, JSON body, key as query parameter
- get_location_by_query: browser location API, access points in the query string
Transport problems raise NetworkError, non-2xx statuses ProviderUnavailable and
unusable bodies ParseError. No retry.
"""
from __future__ import annotations
import http.client
import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog

from .geolocation_base import (
    IAccessPoint,
    IGeolocator,
    LocationResult,
    NetworkError,
    ParseError,
    ProviderUnavailable,
    parse_location,
)
from .settings_store import SettingsStore

log = structlog.get_logger(__name__)

# Placeholder network identification sent with every structured request.
# Not derived from the access points.
HOME_NETWORK = {
    'homeMobileCountryCode': 310,
    'homeMobileNetworkCode': 410,
    'radioType': 'gsm',
    'carrier': 'Vodafone',
    'considerIp': 'true',
    'cellTowers': [],
}

BROWSER_PARAMS = [('browser', 'firefox'), ('sensor', 'true')]


def _error_reason(body: str) -> Optional[str]:
    """Pull the reason out of a Google error envelope, if the body is one."""
    try:
        js = json.loads(body)
        err = js['error']
        errors = err.get('errors') or []
        if errors and errors[0].get('reason'):
            return errors[0]['reason']
        return err.get('status') or err.get('message')
    except (ValueError, KeyError, TypeError, AttributeError):
        return None


class GoogleGeolocator(IGeolocator):
    BASE_URL = 'https://www.googleapis.com/geolocation/v1/geolocate'
    QUERY_BASE_URL = 'https://maps.googleapis.com/maps/api/browserlocation/json'

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        geolocate_url: Optional[str] = None,
        browserlocation_url: Optional[str] = None,
        timeout: Optional[float] = None,
        store: Optional[SettingsStore] = None,
    ):
        store = store if store is not None else SettingsStore()
        self.api_key = api_key if api_key is not None else store.get_api_key()
        self.geolocate_url = geolocate_url or store.get_geolocate_url() or self.BASE_URL
        self.browserlocation_url = browserlocation_url or store.get_browserlocation_url() or self.QUERY_BASE_URL
        self.timeout = timeout if timeout is not None else store.get_http_timeout()

    # ---- request construction ----

    def build_request_body(self, access_points: Iterable[IAccessPoint]) -> Dict[str, Any]:
        body: Dict[str, Any] = dict(HOME_NETWORK)
        body['cellTowers'] = []
        body['wifiAccessPoints'] = [
            {
                'macAddress': ap.mac,
                'signalStrength': ap.signal_level,
                'age': 0,
                'channel': ap.channel,
                'signalToNoiseRatio': 0,
            }
            for ap in access_points
        ]
        return body

    def build_query_url(self, access_points: Iterable[IAccessPoint]) -> str:
        params: List[Tuple[str, str]] = list(BROWSER_PARAMS)
        for ap in access_points:
            params.append(('wifi', f'mac:{ap.mac}|ssid:{ap.ssid}|ss:{ap.signal_level}'))
        # '|' goes out as %7C, colons stay readable
        return self.browserlocation_url + '?' + urllib.parse.urlencode(params, safe=':')

    def _geolocate_url_with_key(self) -> str:
        return self.geolocate_url + '?' + urllib.parse.urlencode({'key': self.api_key})

    # ---- transport ----

    def _send(self, req: urllib.request.Request, api: str) -> str:
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.read().decode('utf-8', 'replace')
        except urllib.error.HTTPError as e:
            try:
                body = e.read().decode('utf-8', 'replace')
            except OSError:
                body = ''
            finally:
                e.close()
            reason = _error_reason(body)
            log.warning('geolocate_http_error', api=api, status=e.code, reason=reason)
            raise ProviderUnavailable(e.code, reason, body) from e
        except (urllib.error.URLError, OSError, http.client.HTTPException) as e:
            # URLError wraps DNS/refused, socket.timeout is an OSError;
            # BadStatusLine and IncompleteRead come through as HTTPException
            log.warning('geolocate_network_error', api=api, error=str(e))
            raise NetworkError(f'Request to {api} API failed: {e}') from e

    def _parse(self, text: str, api: str) -> LocationResult:
        try:
            return parse_location(text)
        except ParseError:
            log.warning('geolocate_parse_error', api=api, body=text[:200])
            raise

    # ---- operations ----

    def get_location(self, access_points: Iterable[IAccessPoint]) -> LocationResult:
        body = self.build_request_body(access_points)
        log.debug('geolocate_request', api='geolocate', access_points=len(body['wifiAccessPoints']))
        req = urllib.request.Request(
            self._geolocate_url_with_key(),
            data=json.dumps(body).encode('utf-8'),
            headers={'Content-Type': 'application/json'},
            method='POST',
        )
        text = self._send(req, 'geolocate')
        return self._parse(text, 'geolocate')

    def get_location_by_query(self, access_points: Iterable[IAccessPoint]) -> LocationResult:
        aps = list(access_points)
        log.debug('geolocate_request', api='browserlocation', access_points=len(aps))
        req = urllib.request.Request(
            self.build_query_url(aps),
            headers={'Accept': 'application/json'},
            method='POST',
        )
        text = self._send(req, 'browserlocation')
        return self._parse(text, 'browserlocation')
