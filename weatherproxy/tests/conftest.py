"""Shared test fixtures."""

import json
import socketserver
import threading
import time
from collections.abc import Iterator
from pathlib import Path

import pytest

from weatherproxy.config.schema import CacheBackend, CacheConfig, ProxyConfig, UpstreamConfig
from weatherproxy.models.forecast import ForecastRecord
from weatherproxy.storage.cache_store import MemoryCacheStore

FIXTURE_DIR = Path(__file__).parent / "fixtures"


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def cairns_payload() -> dict:
    with open(FIXTURE_DIR / "openweather_forecast_cairns.json") as f:
        return json.load(f)


@pytest.fixture
def cairns_record(cairns_payload: dict) -> ForecastRecord:
    return ForecastRecord.from_dict(cairns_payload)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def test_config() -> ProxyConfig:
    """Config pointing at a fake upstream with the in-process cache."""
    return ProxyConfig(
        upstream=UpstreamConfig(
            base_url="https://test-owm.example.com/data/2.5",
            api_key="test-key",
        ),
        cache=CacheConfig(backend=CacheBackend.MEMORY),
    )


class _TrickleHandler(socketserver.BaseRequestHandler):
    """Sends a 200 header block, then the body one byte at a time."""

    body = b'{"cod":"200","message":0,"cnt":0,"list":[],"city":{"name":"Cairns"}}'
    byte_interval = 0.05

    def handle(self) -> None:
        self.request.recv(65536)
        head = (
            "HTTP/1.1 200 OK\r\n"
            "Content-Type: application/json\r\n"
            f"Content-Length: {len(self.body)}\r\n"
            "Connection: close\r\n\r\n"
        )
        try:
            self.request.sendall(head.encode())
            for i in range(len(self.body)):
                self.request.sendall(self.body[i : i + 1])
                time.sleep(self.byte_interval)
        except OSError:
            # Client gave up and closed the socket
            return


@pytest.fixture
def trickling_upstream(monkeypatch) -> Iterator[str]:
    """Base URL of a local server that takes ~3.5s to finish its body."""
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)
    server = socketserver.ThreadingTCPServer(("127.0.0.1", 0), _TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address
    try:
        yield f"http://{host}:{port}/data/2.5"
    finally:
        server.shutdown()
        server.server_close()
