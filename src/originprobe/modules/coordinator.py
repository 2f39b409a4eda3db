"""Bounded worker pool that drives probes over an address stream."""

import asyncio
import logging
import threading
import time
from collections.abc import Awaitable, Callable, Iterable, Iterator
from contextlib import suppress
from dataclasses import dataclass, field
from ipaddress import IPv4Address

from originprobe.tools.http import ProbeHTTPClient

from .models import MatchRecord, ProbeOutcome, ScanConfig, ScanReport
from .probe import ProbeEngine
from .ranges import RangeExpander
from .reporting import NullSink, ResultSink
from .sync import AtomicCounter, InFlightGauge, OneShotLatch

logger = logging.getLogger(__name__)

Prober = Callable[[IPv4Address], Awaitable[ProbeOutcome]]

PROGRESS_INTERVAL = 0.25


@dataclass
class ScanState:
    """State shared by every worker of one scan."""

    total: int
    completed: AtomicCounter = field(default_factory=AtomicCounter)
    matched: AtomicCounter = field(default_factory=AtomicCounter)
    dispatched: AtomicCounter = field(default_factory=AtomicCounter)
    in_flight: InFlightGauge = field(default_factory=InFlightGauge)
    stop: OneShotLatch = field(default_factory=OneShotLatch)
    matches: list[MatchRecord] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, record: MatchRecord) -> int:
        with self._lock:
            self.matches.append(record)
        return self.matched.increment()


class ScanCoordinator:
    """Feeds addresses to at most ``config.workers`` concurrent probes.

    Each worker takes the next address only after its previous probe has
    returned and only while the stop latch is unset. With stop-on-find the
    first worker to trip the latch owns the single reported match; probes
    already running are allowed to finish, their results are dropped.
    """

    def __init__(
        self,
        config: ScanConfig,
        sink: ResultSink | None = None,
        prober: Prober | None = None,
        progress_interval: float = PROGRESS_INTERVAL,
    ):
        self.config = config
        self.sink = sink or NullSink()
        self.prober = prober
        self.progress_interval = progress_interval
        self.state: ScanState | None = None

    async def scan_ranges(self, expander: RangeExpander) -> ScanReport:
        """Scan every address of ``expander``."""
        return await self.run(expander, total=expander.total)

    async def run(self, addresses: Iterable[IPv4Address], total: int) -> ScanReport:
        if self.prober is not None:
            return await self._run(addresses, total, self.prober)

        async with ProbeHTTPClient.for_config(self.config) as http:
            engine = ProbeEngine(self.config, http.client)
            return await self._run(addresses, total, engine.probe)

    async def _run(
        self, addresses: Iterable[IPv4Address], total: int, prober: Prober
    ) -> ScanReport:
        state = ScanState(total=total)
        self.state = state
        report = ScanReport(total=total)
        iterator = iter(addresses)
        pool_size = max(1, min(self.config.workers, total)) if total else 1

        logger.debug("Starting scan of %d addresses with %d workers", total, pool_size)
        ticker = asyncio.create_task(self._tick(state))
        try:
            async with asyncio.TaskGroup() as group:
                for _ in range(pool_size):
                    group.create_task(self._worker(iterator, state, prober))
        finally:
            ticker.cancel()
            with suppress(asyncio.CancelledError):
                await ticker
            self._emit_progress(state)

        report.matches = list(state.matches)
        report.completed = state.completed.value
        report.stopped_early = state.stop.is_set()
        report.peak_in_flight = state.in_flight.peak
        report.elapsed = time.perf_counter() - report.started
        logger.debug(
            "Scan finished: %d/%d probed, %d matched, peak %d in flight",
            report.completed,
            total,
            len(report.matches),
            report.peak_in_flight,
        )
        return report

    async def _worker(
        self, addresses: Iterator[IPv4Address], state: ScanState, prober: Prober
    ) -> None:
        while not state.stop.is_set():
            address = next(addresses, None)
            if address is None:
                return
            state.dispatched.increment()
            state.in_flight.enter()
            try:
                outcome = await prober(address)
            finally:
                state.in_flight.exit()
            state.completed.increment()
            self._accept(outcome, state)

    def _accept(self, outcome: ProbeOutcome, state: ScanState) -> None:
        if not outcome.qualifies:
            return
        if self.config.stop_on_find and not state.stop.trigger():
            logger.debug("Dropping late match %s; scan already stopping", outcome.address)
            return
        record = MatchRecord.from_outcome(outcome)
        state.record(record)
        self.sink.on_match(record)

    async def _tick(self, state: ScanState) -> None:
        while True:
            await asyncio.sleep(self.progress_interval)
            self._emit_progress(state)

    def _emit_progress(self, state: ScanState) -> None:
        self.sink.on_progress(state.completed.value, state.total, state.matched.value)


async def run_scan(
    config: ScanConfig,
    ranges: RangeExpander | Iterable[str],
    sink: ResultSink | None = None,
) -> ScanReport:
    """Expand ``ranges`` and scan them with ``config``."""
    expander = ranges if isinstance(ranges, RangeExpander) else RangeExpander(ranges)
    coordinator = ScanCoordinator(config, sink=sink)
    return await coordinator.scan_ranges(expander)


async def probe_address(config: ScanConfig, address: IPv4Address) -> ProbeOutcome:
    """Probe a single address outside of a pooled scan."""
    async with ProbeHTTPClient.for_config(config) as http:
        return await ProbeEngine(config, http.client).probe(address)
