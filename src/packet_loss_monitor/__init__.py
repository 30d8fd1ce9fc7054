"""Continuous packet loss, latency and jitter monitoring for a fixed host set."""

__version__ = "0.1.0"
