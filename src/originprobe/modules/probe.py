"""Single-address probe: connect, request with the target Host, evaluate."""

import asyncio
import errno
import logging
import ssl
import time
from ipaddress import IPv4Address

import httpx

from .errors import PROBE_ERROR_REASONS, ProbeError
from .models import ProbeOutcome, ScanConfig

logger = logging.getLogger(__name__)

_EXHAUSTION_ERRNOS = {errno.EMFILE, errno.ENFILE, errno.ENOBUFS, errno.EADDRNOTAVAIL}


def _exception_chain(exc: BaseException):
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_exception(exc: BaseException) -> ProbeError:
    """Map a transport exception to a ProbeError."""
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ProbeError.TIMEOUT

    for link in _exception_chain(exc):
        if isinstance(link, OSError) and link.errno in _EXHAUSTION_ERRNOS:
            return ProbeError.RESOURCE_EXHAUSTED
        if isinstance(link, ssl.SSLError):
            return ProbeError.TLS_ERROR

    if isinstance(exc, httpx.ConnectError):
        return ProbeError.CONNECT_FAILED
    if isinstance(exc, (httpx.RemoteProtocolError, httpx.DecodingError)):
        return ProbeError.MALFORMED_RESPONSE
    if isinstance(exc, httpx.TransportError):
        return ProbeError.READ_FAILED
    if isinstance(exc, ConnectionError):
        return ProbeError.CONNECT_FAILED
    return ProbeError.READ_FAILED


def render_head(response: httpx.Response) -> str:
    """Rebuild the status line and headers as text for content matching."""
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}"]
    lines.extend(f"{name}: {value}" for name, value in response.headers.multi_items())
    return "\r\n".join(lines) + "\r\n\r\n"


async def read_prefix(response: httpx.Response, limit: int) -> bytes:
    """Read at most ``limit`` decoded body bytes from a streamed response."""
    if limit <= 0:
        return b""
    buffer = bytearray()
    async for chunk in response.aiter_bytes():
        buffer.extend(chunk)
        if len(buffer) >= limit:
            break
    return bytes(buffer[:limit])


class ProbeEngine:
    """Probes one address at a time against a shared httpx client.

    The whole probe (connect, send, status line, body prefix) runs under a
    single deadline of ``config.timeout`` seconds. Remote misbehaviour never
    escapes as an exception; it comes back as an errored ProbeOutcome.
    """

    def __init__(self, config: ScanConfig, client: httpx.AsyncClient):
        self.config = config
        self.client = client
        self._extensions = {"sni_hostname": config.domain} if config.https else {}

    def url_for(self, address: IPv4Address) -> str:
        return f"{self.config.scheme}://{address}:{self.config.port}/"

    def request_headers(self) -> list[tuple[str, str]]:
        return [("Host", self.config.domain), *self.config.headers]

    async def __call__(self, address: IPv4Address) -> ProbeOutcome:
        return await self.probe(address)

    async def probe(self, address: IPv4Address) -> ProbeOutcome:
        config = self.config
        outcome = ProbeOutcome(address=address)
        started = time.perf_counter()
        logger.debug("Scanning %s:%d", address, config.port)

        try:
            async with asyncio.timeout(config.timeout):
                async with self.client.stream(
                    config.method,
                    self.url_for(address),
                    headers=self.request_headers(),
                    content=config.body,
                    extensions=self._extensions,
                ) as response:
                    outcome.status = response.status_code
                    body = await read_prefix(response, config.body_limit)
        except (TimeoutError, httpx.HTTPError, OSError) as exc:
            outcome.error = classify_exception(exc)
            outcome.elapsed = time.perf_counter() - started
            logger.debug(
                "%s: %s (%s)",
                address,
                PROBE_ERROR_REASONS[outcome.error],
                str(exc) or type(exc).__name__,
            )
            return outcome

        outcome.elapsed = time.perf_counter() - started
        outcome.status_matched = outcome.status == config.status_code
        if config.matcher.enabled:
            text = render_head(response) + body.decode("utf-8", errors="replace")
            outcome.content_matched = config.matcher.evaluate(text)

        if outcome.status_matched and outcome.content_matched is False:
            logger.debug(
                "%s returned %d but content didn't match", address, config.status_code
            )
        return outcome
