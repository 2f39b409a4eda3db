"""HTTP helpers for originprobe."""

from .client import ProbeHTTPClient

__all__ = ["ProbeHTTPClient"]
