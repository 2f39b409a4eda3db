"""Data models for scan configuration and probe results."""

import time
from dataclasses import dataclass, field
from ipaddress import IPv4Address

from .errors import ConfigurationError, ProbeError
from .matcher import ContentMatcher

SUPPORTED_METHODS = ("HEAD", "GET", "POST")
SUPPORTED_SCHEMES = ("http", "https")
DEFAULT_STATUS_CODE = 202
DEFAULT_PORT = 80
DEFAULT_USER_AGENT = "originprobe/2.0"


@dataclass(frozen=True)
class ScanConfig:
    """Immutable settings shared by every probe of one scan."""

    domain: str
    port: int = DEFAULT_PORT
    scheme: str = "http"
    method: str = "HEAD"
    status_code: int = DEFAULT_STATUS_CODE
    matcher: ContentMatcher = field(default_factory=ContentMatcher)
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes | None = None
    workers: int = 1000
    timeout: float = 1.0
    stop_on_find: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def https(self) -> bool:
        return self.scheme == "https"

    @property
    def body_limit(self) -> int:
        return self.matcher.body_limit(self.method)


def _is_header_safe(text: str) -> bool:
    # httpx encodes header text as ASCII; CR/LF would split the request.
    return text.isascii() and not any(ch in "\r\n\x00" for ch in text)


def build_scan_config(
    domain: str,
    *,
    port: int = DEFAULT_PORT,
    https: bool = False,
    method: str = "HEAD",
    status_code: int = DEFAULT_STATUS_CODE,
    content_match: str | None = None,
    headers: list[tuple[str, str]] | None = None,
    body: str | bytes | None = None,
    workers: int = 1000,
    timeout: float = 1.0,
    stop_on_find: bool = True,
    user_agent: str = DEFAULT_USER_AGENT,
) -> ScanConfig:
    """Validate scan input and build a ScanConfig.

    Raises:
        ConfigurationError: for an empty or non-ASCII domain, non-ASCII
            header text, an unsupported method, or
            port, status code, worker count or timeout out of range.
        PatternError: when ``content_match`` does not compile.
    """
    domain = domain.strip() if isinstance(domain, str) else ""
    if not domain or any(ch.isspace() for ch in domain):
        raise ConfigurationError("Invalid target domain", domain)

    method_name = method.strip().upper()
    if method_name not in SUPPORTED_METHODS:
        raise ConfigurationError("Unsupported HTTP method", method)

    if not 1 <= port <= 65535:
        raise ConfigurationError("Port must be between 1 and 65535", port)
    if not 100 <= status_code <= 599:
        raise ConfigurationError("Status code must be between 100 and 599", status_code)
    if workers < 1:
        raise ConfigurationError("Worker count must be at least 1", workers)
    if timeout <= 0:
        raise ConfigurationError("Timeout must be positive", timeout)

    if not _is_header_safe(domain):
        raise ConfigurationError("Domain must be ASCII (use its punycode form)", domain)
    for name, value in headers or ():
        if not (_is_header_safe(name) and _is_header_safe(value)):
            raise ConfigurationError(
                "Header names and values must be printable ASCII", f"{name}: {value}"
            )
    if not _is_header_safe(user_agent):
        raise ConfigurationError("User-Agent must be printable ASCII", user_agent)

    matcher = ContentMatcher.compile(content_match)

    payload: bytes | None = None
    if method_name == "POST":
        if isinstance(body, str):
            payload = body.encode()
        else:
            payload = body or b""

    return ScanConfig(
        domain=domain,
        port=port,
        scheme="https" if https else "http",
        method=method_name,
        status_code=status_code,
        matcher=matcher,
        headers=tuple(headers or ()),
        body=payload,
        workers=workers,
        timeout=timeout,
        stop_on_find=stop_on_find,
        user_agent=user_agent,
    )


@dataclass
class ProbeOutcome:
    """Result of probing a single address."""

    address: IPv4Address
    status: int | None = None
    content_matched: bool | None = None
    elapsed: float = 0.0
    error: ProbeError | None = None
    status_matched: bool = False

    @property
    def qualifies(self) -> bool:
        """Status matched and, when a pattern is configured, content matched."""
        if self.error is not None or not self.status_matched:
            return False
        return self.content_matched is not False


@dataclass(frozen=True)
class MatchRecord:
    """A qualifying outcome accepted by the coordinator."""

    address: IPv4Address
    status: int
    content_matched: bool
    elapsed: float = 0.0

    @classmethod
    def from_outcome(cls, outcome: ProbeOutcome) -> "MatchRecord":
        return cls(
            address=outcome.address,
            status=outcome.status or 0,
            content_matched=bool(outcome.content_matched),
            elapsed=outcome.elapsed,
        )

    def describe(self) -> str:
        if self.content_matched:
            return f"Status: {self.status}, Content matched"
        return f"Status: {self.status}"


@dataclass
class ScanReport:
    """Summary of one completed scan."""

    matches: list[MatchRecord] = field(default_factory=list)
    total: int = 0
    completed: int = 0
    stopped_early: bool = False
    peak_in_flight: int = 0
    started: float = field(default_factory=time.perf_counter)
    elapsed: float = 0.0

    @property
    def found(self) -> bool:
        return bool(self.matches)
