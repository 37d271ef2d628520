"""Pytest configuration - loads .env and provides a stand-in HubSpot server."""

import json
import threading
import urllib.parse
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


@dataclass
class RecordedRequest:
    """A request received by the stand-in server."""

    method: str
    path: str
    query: dict[str, list[str]]
    headers: dict[str, str]
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body)


@dataclass
class StandInServer:
    """Local HTTP server that replays scripted responses and records requests."""

    url: str
    requests: list[RecordedRequest] = field(default_factory=list)
    responses: list[tuple[int, str]] = field(default_factory=list)
    # Requests beyond this count get no response until teardown
    hang_after: int | None = None
    release: threading.Event = field(default_factory=threading.Event)

    def enqueue(self, status: int, body: Any = "") -> None:
        """Queue a response; dicts and lists are sent as JSON."""
        if not isinstance(body, str):
            body = json.dumps(body)
        self.responses.append((status, body))


def _make_handler(server: StandInServer) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def _handle(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            parsed = urllib.parse.urlsplit(self.path)
            server.requests.append(
                RecordedRequest(
                    method=self.command,
                    path=parsed.path,
                    query=urllib.parse.parse_qs(parsed.query),
                    headers={k.lower(): v for k, v in self.headers.items()},
                    body=body,
                )
            )

            if server.hang_after is not None and len(server.requests) > server.hang_after:
                server.release.wait(10)
                return

            status, text = server.responses.pop(0) if server.responses else (200, "{}")
            payload = text.encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        do_GET = _handle
        do_POST = _handle
        do_PATCH = _handle
        do_DELETE = _handle

        def log_message(self, format: str, *args: Any) -> None:
            pass

    return Handler


@pytest.fixture
def hubspot_server():
    """Run a stand-in HubSpot API on a free local port."""
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), BaseHTTPRequestHandler)
    host, port = httpd.server_address[:2]
    server = StandInServer(url=f"http://{host}:{port}")
    httpd.RequestHandlerClass = _make_handler(server)

    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.release.set()
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real credentials and config files out of unit tests."""
    monkeypatch.delenv("HUBSPOT_API_KEY", raising=False)
    monkeypatch.delenv("HUBSPOT_BASE_URL", raising=False)
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setattr("hsctl.cli.DEFAULT_CONFIG_PATH", tmp_path / "missing.env")
