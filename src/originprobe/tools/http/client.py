"""Shared httpx client for direct-to-IP probes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from originprobe.modules.models import ScanConfig


class ProbeHTTPClient:
    """Async HTTP client sized for one scan.

    The pool holds at most ``workers`` connections and never keeps them
    alive: every probe dials its own address once and closes.
    """

    def __init__(
        self,
        timeout: float,
        max_connections: int,
        user_agent: str,
        verify_ssl: bool = False,
    ):
        self.timeout = timeout
        self.max_connections = max_connections
        self.user_agent = user_agent
        self.verify_ssl = verify_ssl
        self.client: httpx.AsyncClient | None = None

    @classmethod
    def for_config(cls, config: ScanConfig) -> ProbeHTTPClient:
        return cls(
            timeout=config.timeout,
            max_connections=config.workers,
            user_agent=config.user_agent,
        )

    def build(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            limits=httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=0,
            ),
            headers={"User-Agent": self.user_agent, "Connection": "close"},
            follow_redirects=False,
            verify=self.verify_ssl,
            trust_env=False,
        )

    async def __aenter__(self):
        self.client = self.build()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None
