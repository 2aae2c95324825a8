# -*- coding: utf-8 -*-
"""Command line entry point: resolve a scan file to a location."""
from __future__ import annotations
import argparse
import json
import sys
from typing import Optional

import structlog

from .geolocation_base import GeolocationError
from .google_geolocator import GoogleGeolocator
from .log import setup_logging
from .provider_registry import DEFAULT_PROVIDER, get_display_name, get_location_method, iter_providers
from .scan_loader import load_access_points
from .settings_store import SettingsStore, get_api_key_from_file

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_LOOKUP_FAILED = 1
EXIT_BAD_INPUT = 2

_LEVELS = ['WARNING', 'INFO', 'DEBUG']


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    providers = list(iter_providers())
    parser = argparse.ArgumentParser(
        prog='wifilocation',
        description="Estimate a location from a wifi access point scan using Google's APIs.",
        epilog='APIs: ' + ', '.join(f'{pid} ({name})' for pid, name in providers),
    )
    parser.add_argument('scan_file', help='Access point scan, .json or CSV with a header row')
    parser.add_argument(
        '--api',
        choices=[pid for pid, _ in providers],
        default=DEFAULT_PROVIDER,
        help=f'Request style (default: {DEFAULT_PROVIDER})',
    )
    key = parser.add_mutually_exclusive_group()
    key.add_argument('--api-key', help='API key (default: WIFILOCATION_API_KEY)')
    key.add_argument('--api-key-file', help='File whose whole content is the API key')
    parser.add_argument('--timeout', type=float, help='HTTP timeout in seconds')
    parser.add_argument('--url', help='Override the endpoint of the selected API')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='More logging (repeatable)')
    return parser.parse_args(argv)


def _log_level(store: Optional[SettingsStore], verbose: int) -> str:
    if verbose:
        return _LEVELS[min(verbose, len(_LEVELS) - 1)]
    if store is None:
        return 'WARNING'
    return store.get_log_level()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    store: Optional[SettingsStore] = None

    try:
        # invalid WIFILOCATION_* values raise pydantic's ValidationError (a ValueError)
        store = SettingsStore()
        setup_logging(_log_level(store, args.verbose))
        log.debug('settings_loaded', **store.export_all())
        api_key: Optional[str] = args.api_key
        if args.api_key_file:
            api_key = get_api_key_from_file(args.api_key_file)
        urls = {}
        if args.url:
            urls['geolocate_url' if args.api == 'geolocate' else 'browserlocation_url'] = args.url
        # falls back to the settings key, which may read WIFILOCATION_API_KEY_FILE
        geolocator = GoogleGeolocator(api_key, timeout=args.timeout, store=store, **urls)
        access_points = load_access_points(args.scan_file)
    except (OSError, ValueError) as exc:
        if store is None:
            setup_logging(_log_level(None, args.verbose))
        print(f'error: {exc}', file=sys.stderr)
        return EXIT_BAD_INPUT

    lookup = get_location_method(geolocator, args.api)
    log.info('geolocate_start', api=get_display_name(args.api), access_points=len(access_points))

    try:
        result = lookup(access_points)
    except GeolocationError as exc:
        print(f'error: {exc}', file=sys.stderr)
        return EXIT_LOOKUP_FAILED

    log.info('location_resolved', api=get_display_name(args.api), accuracy=result.accuracy)
    print(json.dumps(result.to_dict()))
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
