"""Version and autotune CLI commands."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from originprobe.modules.autotune import recommend_settings

from .deps import cli_module
from .scan_helpers import format_bytes_gib
from .shared import app, console, print_item


@app.command()
def version() -> None:
    """Show the installed originprobe version."""
    try:
        current_version = pkg_version("originprobe")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"originprobe {current_version}")


@app.command()
def autotune() -> None:
    """Show detected host resources and the settings a scan would use."""
    metrics = cli_module().collect_host_metrics()
    tuned = recommend_settings(metrics)

    console.print("[bold]Host resources:[/bold]")
    print_item("CPU Cores", metrics.cpu_count if metrics.cpu_count is not None else "unknown")
    print_item("RAM", format_bytes_gib(metrics.total_memory))
    print_item("Open file limit", metrics.fd_limit if metrics.fd_limit is not None else "unlimited")
    console.print("[bold]Recommended settings:[/bold]")
    print_item("Concurrent Workers", tuned.workers)
    print_item("Connection Timeout", f"{tuned.timeout_ms}ms")
    console.print(
        "[dim]Override with --workers/--timeout or ORIGINPROBE_WORKERS/ORIGINPROBE_TIMEOUT_MS.[/dim]"
    )
