"""Scanning core: range expansion, autotuning, probing and coordination."""

from .autotune import (
    HostMetrics,
    TunedSettings,
    collect_host_metrics,
    recommend_settings,
    resolve_settings,
)
from .coordinator import ScanCoordinator, ScanState, probe_address, run_scan
from .errors import ConfigurationError, InvalidRange, PatternError, ProbeError
from .matcher import BODY_PREFIX_LIMIT, ContentMatcher
from .models import MatchRecord, ProbeOutcome, ScanConfig, ScanReport, build_scan_config
from .probe import ProbeEngine
from .ranges import RangeExpander, expand_ranges, parse_range
from .reporting import CollectingSink, NullSink, ResultSink, RichResultSink
from .sync import AtomicCounter, InFlightGauge, OneShotLatch

__all__ = [
    "AtomicCounter",
    "BODY_PREFIX_LIMIT",
    "CollectingSink",
    "ConfigurationError",
    "ContentMatcher",
    "HostMetrics",
    "InFlightGauge",
    "InvalidRange",
    "MatchRecord",
    "NullSink",
    "OneShotLatch",
    "PatternError",
    "ProbeEngine",
    "ProbeError",
    "ProbeOutcome",
    "RangeExpander",
    "ResultSink",
    "RichResultSink",
    "ScanConfig",
    "ScanCoordinator",
    "ScanReport",
    "ScanState",
    "TunedSettings",
    "build_scan_config",
    "collect_host_metrics",
    "expand_ranges",
    "parse_range",
    "probe_address",
    "recommend_settings",
    "resolve_settings",
    "run_scan",
]
