"""Derive worker concurrency and probe timeout from host resources."""

import logging
import os
import sys
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)

GIB = 1024 * 1024 * 1024

# Used when host introspection yields nothing usable.
FALLBACK_WORKERS = 1000
FALLBACK_TIMEOUT_MS = 1000

# File descriptors kept free for the interpreter, logging and the terminal.
FD_HEADROOM = 64


@dataclass(frozen=True)
class HostMetrics:
    """Host facts the autotuner works from; ``None`` means unknown."""

    cpu_count: int | None = None
    total_memory: int | None = None
    fd_limit: int | None = None

    @property
    def memory_gib(self) -> int | None:
        if self.total_memory is None:
            return None
        return self.total_memory // GIB


@dataclass(frozen=True)
class TunedSettings:
    """Worker count and per-probe timeout (milliseconds)."""

    workers: int
    timeout_ms: int
    autotuned: bool = True

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000


def _workers_for_memory(memory_gib: int) -> int:
    if memory_gib >= 16:
        return 10000
    if memory_gib >= 8:
        return 5000
    if memory_gib >= 4:
        return 2000
    return 1000


def _timeout_for_host(memory_gib: int, cpu_count: int) -> int:
    # Big hosts run more probes at once, so each one gets less time.
    if memory_gib >= 16 and cpu_count >= 8:
        return 300
    if memory_gib >= 8 and cpu_count >= 4:
        return 500
    return 1000


def recommend_settings(metrics: HostMetrics) -> TunedSettings:
    """Recommend workers and timeout for ``metrics``. Never raises."""
    memory_gib = metrics.memory_gib
    cpu_count = metrics.cpu_count

    if memory_gib is None:
        workers = FALLBACK_WORKERS
        timeout_ms = FALLBACK_TIMEOUT_MS
    else:
        workers = _workers_for_memory(memory_gib)
        timeout_ms = _timeout_for_host(memory_gib, cpu_count or 0)

    if metrics.fd_limit is not None and metrics.fd_limit > 0:
        fd_budget = max(1, metrics.fd_limit - FD_HEADROOM)
        if fd_budget < workers:
            logger.debug(
                "Capping workers at %d to fit open-file limit %d", fd_budget, metrics.fd_limit
            )
            workers = fd_budget

    return TunedSettings(workers=workers, timeout_ms=timeout_ms)


def _open_file_limit() -> int | None:
    if sys.platform == "win32":
        return None
    import resource

    try:
        soft, _hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    except (OSError, ValueError):
        return None
    if soft == resource.RLIM_INFINITY:
        return None
    return int(soft)


def collect_host_metrics() -> HostMetrics:
    """Introspect the current host. Unavailable facts come back as None."""
    cpu_count: int | None
    try:
        cpu_count = psutil.cpu_count(logical=True) or os.cpu_count()
    except (psutil.Error, OSError):
        cpu_count = os.cpu_count()

    total_memory: int | None
    try:
        total_memory = int(psutil.virtual_memory().total)
    except (psutil.Error, OSError):
        logger.debug("Memory introspection failed", exc_info=True)
        total_memory = None

    return HostMetrics(
        cpu_count=cpu_count,
        total_memory=total_memory,
        fd_limit=_open_file_limit(),
    )


def resolve_settings(
    workers: int | None = None,
    timeout_ms: int | None = None,
    metrics: HostMetrics | None = None,
) -> TunedSettings:
    """Apply explicit operator values over autotuned ones.

    Host metrics are only collected when at least one value is missing.
    """
    if workers is not None and timeout_ms is not None:
        return TunedSettings(workers=workers, timeout_ms=timeout_ms, autotuned=False)

    tuned = recommend_settings(metrics if metrics is not None else collect_host_metrics())
    return TunedSettings(
        workers=workers if workers is not None else tuned.workers,
        timeout_ms=timeout_ms if timeout_ms is not None else tuned.timeout_ms,
        autotuned=True,
    )
