"""Scan CLI command."""

import ipaddress
from pathlib import Path
from typing import TypeVar

import typer
from rich.markup import escape

from originprobe.config import (
    get_log_level,
    get_method,
    get_port,
    get_status_code,
    get_timeout_ms,
    get_user_agent,
    get_verbose,
    get_workers,
)
from originprobe.modules.autotune import TunedSettings, resolve_settings
from originprobe.modules.errors import ConfigurationError
from originprobe.modules.models import (
    DEFAULT_PORT,
    DEFAULT_STATUS_CODE,
    DEFAULT_USER_AGENT,
    ScanConfig,
    ScanReport,
    build_scan_config,
)
from originprobe.modules.ranges import RangeExpander
from originprobe.modules.reporting import RichResultSink

from .deps import cli_module
from .scan_helpers import (
    format_bytes_gib,
    load_ranges_file,
    normalize_method,
    parse_headers,
    split_ranges,
)
from .shared import app, console, print_banner, print_item, print_section

VERSION_LABEL = "2.0.0"


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]✗[/] {escape(message)}")
    return typer.Exit(1)


T = TypeVar("T")


def _first_set(*values: T | None) -> T | None:
    """First value that is not None; zero and empty values count as set."""
    return next((value for value in values if value is not None), None)


def _resolve_tuning(workers: int | None, timeout_ms: int | None) -> TunedSettings:
    """Flag > config > autotune, reporting host facts when autotuning."""
    workers = _first_set(workers, get_workers())
    timeout_ms = _first_set(timeout_ms, get_timeout_ms())
    if workers is not None and timeout_ms is not None:
        return resolve_settings(workers, timeout_ms)

    metrics = cli_module().collect_host_metrics()
    tuned = resolve_settings(workers, timeout_ms, metrics=metrics)

    console.print("[bright_blue]ℹ[/] Auto-detected system capabilities:")
    print_item("CPU Cores", metrics.cpu_count if metrics.cpu_count is not None else "unknown")
    print_item("RAM", format_bytes_gib(metrics.total_memory))
    if metrics.fd_limit is not None:
        print_item("Open file limit", metrics.fd_limit)
    print_item("Concurrent Workers", tuned.workers)
    print_item("Connection Timeout", f"{tuned.timeout_ms}ms")
    console.print()
    return tuned


def _print_configuration(config: ScanConfig, range_count: int, total: int) -> None:
    print_section("⚙ Scan Configuration:")
    print_item("Target domain", config.domain)
    print_item("HTTP method", config.method)
    print_item("Port", f"{config.port} ({config.scheme})")
    print_item("Target status", config.status_code)
    if config.matcher.enabled:
        print_item("Content match", config.matcher.pattern)
    if config.headers:
        print_item("Custom headers", f"{len(config.headers)} header(s)")
    print_item("IP ranges", range_count)
    print_item("Addresses", f"{total:,}")
    print_item("Concurrent workers", config.workers)
    print_item("Timeout", f"{int(config.timeout * 1000)}ms")
    print_item("Stop on find", "yes" if config.stop_on_find else "no")


def _print_summary(report: ScanReport) -> None:
    print_section(f"[bright_green]✓[/] Scan completed in {report.elapsed:.2f}s")
    console.print(
        f"[dim]{report.completed:,}/{report.total:,} addresses probed, "
        f"peak {report.peak_in_flight} in flight[/dim]"
    )
    if not report.matches:
        console.print("[red]✗[/] No matching IPs found")
        return
    console.print(f"[bright_green]✓[/] Found {len(report.matches)} backend IP(s):")
    for record in report.matches:
        console.print(f"  [bright_cyan]→[/] [bright_yellow]{record.address}[/] - {record.describe()}")


def _scan_single(config: ScanConfig, single_ip: str) -> None:
    try:
        address = ipaddress.IPv4Address(single_ip.strip())
    except ValueError as exc:
        raise _fail(f"Invalid IP address: {single_ip} ({exc})") from exc

    console.print(f"[bright_green]➤[/] Scanning single IP: {address}:{config.port}")
    cli = cli_module()
    outcome = cli.safe_async_run(cli.probe_address(config, address))
    if outcome.qualifies:
        record_text = f"Status: {outcome.status}"
        if outcome.content_matched:
            record_text += ", Content matched"
        console.print(f"[green]✓[/] {address} - {record_text}")
    else:
        console.print(f"[red]✗[/] No matching response from {address}")


@app.command()
def scan(
    domain: str = typer.Argument(..., help="Target domain to scan for"),
    ranges: list[str] | None = typer.Option(
        None,
        "--ranges",
        "-r",
        help="IP ranges to scan in CIDR notation (comma-separated, repeatable)",
    ),
    ip_file: Path | None = typer.Option(
        None,
        "--ip-file",
        "-f",
        help="File containing IP ranges (one CIDR per line)",
    ),
    single_ip: str | None = typer.Option(None, "--single-ip", help="Scan a single IP address"),
    method: str | None = typer.Option(
        None, "--method", "-m", help="HTTP method to use: HEAD, GET or POST [default: HEAD]"
    ),
    status_code: int | None = typer.Option(
        None, "--status-code", help=f"HTTP status code to match [default: {DEFAULT_STATUS_CODE}]"
    ),
    content_match: str | None = typer.Option(
        None,
        "--content-match",
        "-c",
        help="Regex that must occur in the response (status line, headers, body prefix)",
    ),
    post_body: str | None = typer.Option(None, "--post-body", help="POST request body"),
    headers: list[str] | None = typer.Option(
        None, "--header", help="Custom header 'Name: Value' (repeatable)"
    ),
    timeout: int | None = typer.Option(
        None, "--timeout", "-t", help="Per-probe timeout in milliseconds (auto-detected if unset)"
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Maximum concurrent probes (auto-detected if unset)"
    ),
    stop_on_find: bool = typer.Option(
        True,
        "--stop-on-find/--no-stop-on-find",
        help="Stop immediately after the first match",
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help=f"Port to probe [default: {DEFAULT_PORT}]"
    ),
    https: bool = typer.Option(False, "--https", help="Use HTTPS instead of HTTP"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output for debugging"),
) -> None:
    """Probe candidate IPs with the domain's Host header to find its backend."""
    cli = cli_module()
    effective_verbose = verbose or get_verbose()
    cli.setup_logging(level=get_log_level(), verbose=effective_verbose)

    print_banner(f"OriginProbe v{VERSION_LABEL}", "Reverse proxy backend IP scanner")

    method_name = normalize_method(method or get_method())
    if method_name == "POST" and post_body is None and effective_verbose:
        console.print("[bright_yellow]⚠[/] Using POST method without a body")
    if method_name == "HEAD" and content_match:
        console.print(
            "[bright_yellow]⚠[/] HEAD responses carry no body; "
            "the content pattern is matched against the status line and headers only"
        )

    try:
        tuning = _resolve_tuning(workers, timeout)
        config = build_scan_config(
            domain,
            port=_first_set(port, get_port(), DEFAULT_PORT),
            https=https,
            method=method_name,
            status_code=_first_set(status_code, get_status_code(), DEFAULT_STATUS_CODE),
            content_match=content_match,
            headers=parse_headers(headers),
            body=post_body,
            workers=tuning.workers,
            timeout=tuning.timeout,
            stop_on_find=stop_on_find,
            user_agent=_first_set(get_user_agent(), DEFAULT_USER_AGENT),
        )
    except ConfigurationError as exc:
        raise _fail(f"Failed to create scanner: {exc}") from exc

    if single_ip:
        _scan_single(config, single_ip)
        return

    try:
        if ip_file is not None:
            console.print(f"[bright_blue]ℹ[/] Loading IP ranges from: {escape(str(ip_file))}")
            range_list = load_ranges_file(ip_file)
            console.print(f"[bright_green]✓[/] Loaded {len(range_list)} IP range(s) from file")
        else:
            range_list = split_ranges(ranges)
        if not range_list:
            console.print("[red]✗ Error: No IP ranges specified![/]\n")
            console.print("Please provide IP ranges using one of these methods:")
            console.print("  1. File:       --ip-file ips.txt")
            console.print("  2. CLI args:   --ranges 35.207.0.0/16,10.0.0.0/24")
            console.print("  3. Single IP:  --single-ip 35.207.76.249\n")
            console.print("Example: originprobe scan example.com --ip-file ips.txt")
            raise typer.Exit(1)
        expander = RangeExpander(range_list)
    except ConfigurationError as exc:
        raise _fail(str(exc)) from exc

    _print_configuration(config, len(expander.networks), expander.total)

    try:
        with RichResultSink(console, stop_on_find=config.stop_on_find) as sink:
            report = cli.safe_async_run(cli.run_scan(config, expander, sink=sink))
    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted[/yellow]")
        raise typer.Exit(130)

    _print_summary(report)
