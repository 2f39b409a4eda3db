"""originprobe CLI - backend IP discovery behind CDNs and reverse proxies."""

from originprobe.cli_commands import app, console
from originprobe.modules.autotune import collect_host_metrics
from originprobe.modules.coordinator import probe_address, run_scan
from originprobe.utils.async_utils import safe_async_run
from originprobe.utils.log import setup_logging

__all__ = [
    "app",
    "collect_host_metrics",
    "console",
    "main",
    "probe_address",
    "run_scan",
    "safe_async_run",
    "setup_logging",
]


def main():
    """Entry point for the CLI."""
    app()
