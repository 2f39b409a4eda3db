"""Helpers for the scan command: input loading and normalization."""

import logging
from pathlib import Path

from originprobe.modules.errors import ConfigurationError

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = ("#", "//")


def parse_header(raw: str) -> tuple[str, str]:
    """Split a ``Name: Value`` header argument."""
    if ":" not in raw:
        raise ConfigurationError("Invalid header format, expected 'Header: Value'", raw)
    name, value = raw.split(":", 1)
    name = name.strip()
    if not name or any(ch.isspace() for ch in name):
        raise ConfigurationError("Invalid header name", raw)
    return name, value.strip()


def parse_headers(raw_headers: list[str] | None) -> list[tuple[str, str]]:
    """Parse repeated --header options, keeping order and duplicates."""
    return [parse_header(raw) for raw in raw_headers or []]


def split_ranges(raw_ranges: list[str] | None) -> list[str]:
    """Flatten repeated and comma-separated --ranges values."""
    ranges: list[str] = []
    for raw in raw_ranges or []:
        ranges.extend(part.strip() for part in raw.split(",") if part.strip())
    return ranges


def load_ranges_file(path: Path) -> list[str]:
    """Read one CIDR per line, skipping blanks and ``#`` or ``//`` comments.

    Entries are returned verbatim; validation happens in RangeExpander so a
    bad line aborts the scan instead of being skipped.
    """
    try:
        content = path.read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read IP range file ({exc})", str(path)) from exc

    ranges: list[str] = []
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(COMMENT_PREFIXES):
            continue
        ranges.append(trimmed)

    if not ranges:
        raise ConfigurationError("No IP ranges found in file", str(path))
    logger.debug("Loaded %d range(s) from %s", len(ranges), path)
    return ranges


def normalize_method(method: str | None, default: str = "HEAD") -> str:
    """Upper-case the method name; validation happens in build_scan_config."""
    if not isinstance(method, str) or not method.strip():
        return default
    return method.strip().upper()


def format_bytes_gib(total_memory: int | None) -> str:
    if total_memory is None:
        return "unknown"
    return f"{total_memory // (1024 ** 3)} GB"
