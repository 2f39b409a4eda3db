"""Utility helpers for originprobe."""
