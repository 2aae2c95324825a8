"""Shared fixtures: a local HTTP server standing in for the Google endpoints."""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

import pytest
import structlog

from wifilocation.geolocation_base import AccessPoint

OK_BODY = {"accuracy": 10.5, "location": {"lat": 37.4, "lng": -122.1}}


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: Any  # email.message.Message, case-insensitive lookups
    body: bytes


@dataclass
class FakeProvider:
    """Canned response plus every request the server received."""

    url: str
    status: int = 200
    body: Any = field(default_factory=lambda: dict(OK_BODY))
    requests: list[RecordedRequest] = field(default_factory=list)

    def respond(self, status: int, body: Any) -> None:
        self.status = status
        self.body = body

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.body.decode("utf-8"))


@pytest.fixture
def fake_provider():
    """Serve canned responses on 127.0.0.1 for the duration of a test."""
    state: dict[str, FakeProvider] = {}

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):  # noqa: N802
            provider = state["provider"]
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            provider.requests.append(
                RecordedRequest("POST", self.path, self.headers, body)
            )
            payload = provider.body
            raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
            self.send_response(provider.status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(raw)))
            self.end_headers()
            self.wfile.write(raw)

        def log_message(self, format, *args):  # silence stderr
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    host, port = server.server_address[:2]
    state["provider"] = FakeProvider(url=f"http://{host}:{port}")
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield state["provider"]
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def access_points() -> list[AccessPoint]:
    return [
        AccessPoint(mac="00:11:22:33:44:55", ssid="home", signal_level=-43, channel=11),
        AccessPoint(mac="66:77:88:99:AA:BB", ssid="cafe wifi", signal_level=-70, channel=6),
        AccessPoint(mac="CC:DD:EE:FF:00:11", ssid="", signal_level=-88, channel=36),
    ]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's WIFILOCATION_* variables and .env out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("WIFILOCATION_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENV_FILE", str(tmp_path / "missing.env"))


@pytest.fixture(autouse=True)
def reset_logging():
    """setup_logging() binds the current stderr; drop it once capsys closes it."""
    yield
    structlog.reset_defaults()
