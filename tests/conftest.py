"""Test configuration and fixtures for originprobe."""

import asyncio
import tempfile
from collections.abc import AsyncGenerator, Generator
from ipaddress import IPv4Address
from pathlib import Path

import pytest

from originprobe.modules.models import ProbeOutcome, ScanConfig, build_scan_config


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Keep tests away from the real ~/.originprobe and ORIGINPROBE_* env."""
    home = temp_dir / "home"
    home.mkdir()
    workdir = temp_dir / "work"
    workdir.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(workdir)
    for key in (
        "ORIGINPROBE_WORKERS",
        "ORIGINPROBE_TIMEOUT_MS",
        "ORIGINPROBE_PORT",
        "ORIGINPROBE_STATUS_CODE",
        "ORIGINPROBE_METHOD",
        "ORIGINPROBE_USER_AGENT",
        "ORIGINPROBE_VERBOSE",
        "ORIGINPROBE_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return workdir


@pytest.fixture
def make_config():
    """Factory for validated scan configs with test-friendly defaults."""

    def _make(**overrides) -> ScanConfig:
        params = {
            "domain": "example.com",
            "status_code": 202,
            "workers": 4,
            "timeout": 1.0,
        }
        params.update(overrides)
        domain = params.pop("domain")
        return build_scan_config(domain, **params)

    return _make


class StatusProber:
    """Fake prober answering from a fixed address → status table."""

    def __init__(self, statuses: dict[str, int], delay: float = 0.0, status_code: int = 202):
        self.statuses = statuses
        self.delay = delay
        self.status_code = status_code
        self.calls: list[IPv4Address] = []
        self.in_flight = 0
        self.peak = 0

    async def __call__(self, address: IPv4Address) -> ProbeOutcome:
        self.calls.append(address)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        status = self.statuses.get(str(address), 404)
        return ProbeOutcome(
            address=address,
            status=status,
            status_matched=status == self.status_code,
        )


@pytest.fixture
def status_prober():
    return StatusProber


class StubHTTPServer:
    """Local TCP server that replies to each request with canned bytes.

    With ``response=None`` the server reads the request and then holds the
    connection open without answering.
    """

    def __init__(self, response: bytes | None):
        self.response = response
        self.requests: list[bytes] = []
        self.release = asyncio.Event()
        self.server: asyncio.Server | None = None

    @property
    def port(self) -> int:
        assert self.server is not None
        return self.server.sockets[0].getsockname()[1]

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            head = await reader.readuntil(b"\r\n\r\n")
            body = b""
            for line in head.split(b"\r\n"):
                if line.lower().startswith(b"content-length:"):
                    length = int(line.split(b":", 1)[1].strip())
                    if length:
                        body = await reader.readexactly(length)
            self.requests.append(head + body)
            if self.response is None:
                await self.release.wait()
            else:
                writer.write(self.response)
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()

    async def start(self) -> "StubHTTPServer":
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        return self

    async def stop(self) -> None:
        self.release.set()
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()


@pytest.fixture
async def stub_server() -> AsyncGenerator:
    """Factory fixture starting StubHTTPServer instances, stopped on teardown."""
    servers: list[StubHTTPServer] = []

    async def _start(response: bytes | None) -> StubHTTPServer:
        server = await StubHTTPServer(response).start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        await server.stop()


def http_response(status: int, reason: str = "OK", body: bytes = b"", headers: dict | None = None) -> bytes:
    """Build a raw HTTP/1.1 response."""
    lines = [f"HTTP/1.1 {status} {reason}"]
    merged = {"Content-Length": str(len(body)), "Connection": "close"}
    merged.update(headers or {})
    lines.extend(f"{name}: {value}" for name, value in merged.items())
    return ("\r\n".join(lines) + "\r\n\r\n").encode() + body


@pytest.fixture
def raw_response():
    return http_response
