# -*- coding: utf-8 -*-
"""Access point scan files.
- JSON: array of objects, or {"wifiAccessPoints": [...]}
- CSV: delimiter sniffed (csv.Sniffer), columns matched by header keywords
Produces AccessPoint records for the geolocation client.
"""
from __future__ import annotations
import csv
import json
import re
from typing import Dict, List, Optional

import structlog

from .geolocation_base import AccessPoint

log = structlog.get_logger(__name__)

SAMPLE_SIZE = 65536

# header keywords per field, exact match scores higher than partial
COLUMN_KEYWORDS = {
    'mac': ['mac', 'bssid', 'macaddress', 'address'],
    'ssid': ['ssid', 'essid', 'name'],
    'signal_level': ['signal', 'signallevel', 'signalstrength', 'rssi', 'level', 'ss', 'dbm'],
    'channel': ['channel', 'chan', 'ch'],
}

NORMALIZE_RE = re.compile(r"[\s_\-]+")
HEX_RE = re.compile(r"^[0-9A-Fa-f]{12}$")


def normalize(name: str) -> str:
    return NORMALIZE_RE.sub("", name.strip().lower())


def normalize_mac(text: str) -> str:
    """'aabbccddeeff', 'AA-BB-CC-DD-EE-FF', 'aa:bb:...' -> 'AA:BB:CC:DD:EE:FF'."""
    raw = re.sub(r"[:\-.\s]", "", text or "")
    if not HEX_RE.match(raw):
        raise ValueError(f"Invalid MAC address: {text!r}")
    raw = raw.upper()
    return ':'.join(raw[i:i + 2] for i in range(0, 12, 2))


def _score(name: str, keywords: List[str]) -> int:
    norm = normalize(name)
    if norm in keywords:
        return 100
    for kw in keywords:
        # short keywords only as whole names, 'ss' would match 'ssid'
        if len(kw) > 2 and kw in norm:
            return 70
    return 0


def detect_columns(header: List[str]) -> Dict[str, Optional[int]]:
    """Map each AccessPoint field to the best scoring header index (or None)."""
    found: Dict[str, Optional[int]] = {}
    taken = set()
    for fld, keywords in COLUMN_KEYWORDS.items():
        best, best_score = None, 0
        for idx, col in enumerate(header):
            if idx in taken:
                continue
            s = _score(col, keywords)
            if s > best_score:
                best, best_score = idx, s
        found[fld] = best
        if best is not None:
            taken.add(best)
    return found


def sniff(text: str) -> str:
    try:
        return csv.Sniffer().sniff(text, delimiters=',;\t|').delimiter
    except csv.Error:
        return ','


def _cell(row: List[str], idx: Optional[int]) -> str:
    if idx is None or idx >= len(row):
        return ''
    return row[idx].strip()


def parse_csv(text: str) -> List[AccessPoint]:
    delimiter = sniff(text[:SAMPLE_SIZE])
    reader = csv.reader(text.splitlines(), delimiter=delimiter)
    header = next(reader, [])
    cols = detect_columns(header)
    if cols['mac'] is None or cols['signal_level'] is None:
        raise ValueError(f"CSV header needs MAC and signal columns, got {header!r}")
    aps: List[AccessPoint] = []
    for lineno, row in enumerate(reader, start=2):
        mac = _cell(row, cols['mac'])
        if not mac:
            continue
        try:
            signal = int(float(_cell(row, cols['signal_level'])))
            channel = int(_cell(row, cols['channel']) or 0)
        except ValueError as e:
            raise ValueError(f"Line {lineno}: bad number in {row!r}") from e
        aps.append(AccessPoint(
            mac=normalize_mac(mac),
            ssid=_cell(row, cols['ssid']),
            signal_level=signal,
            channel=channel,
        ))
    return aps


def parse_json(text: str) -> List[AccessPoint]:
    js = json.loads(text)
    if isinstance(js, dict):
        js = js.get('wifiAccessPoints')
    if not isinstance(js, list):
        raise ValueError("JSON scan must be a list of access points")
    aps = []
    for item in js:
        if not isinstance(item, dict):
            raise ValueError(f"Access point entry is not an object: {item!r}")
        ap = AccessPoint.from_mapping(item)
        aps.append(AccessPoint(normalize_mac(ap.mac), ap.ssid, ap.signal_level, ap.channel))
    return aps


def load_access_points(path: str) -> List[AccessPoint]:
    # strict utf-8, a leading BOM is stripped
    with open(path, 'r', encoding='utf-8-sig', newline='') as f:
        text = f.read()
    if path.lower().endswith('.json'):
        aps = parse_json(text)
    else:
        aps = parse_csv(text)
    log.debug('scan_file_loaded', path=path, access_points=len(aps))
    return aps
