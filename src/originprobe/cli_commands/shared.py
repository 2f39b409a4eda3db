"""Shared CLI app objects and console helpers."""

import typer
from rich.console import Console
from rich.markup import escape

app = typer.Typer(
    name="originprobe",
    help="Find the backend IP behind a CDN or reverse proxy by probing candidate ranges",
    no_args_is_help=True,
)
console = Console()

RULE = "=" * 60


def print_banner(title: str, subtitle: str) -> None:
    console.print(f"\n[bright_cyan]{RULE}[/]")
    console.print(f"🔍 [bold bright_yellow]{title}[/]")
    console.print(f"⚡ {subtitle}")
    console.print(f"[bright_cyan]{RULE}[/]")


def print_section(title: str) -> None:
    console.print(f"\n[bright_cyan]{RULE}[/]\n{title}\n[bright_cyan]{RULE}[/]")


def print_item(label: str, value: object) -> None:
    console.print(f"  [bright_cyan]→[/] {label}: [bright_yellow]{escape(str(value))}[/]")
