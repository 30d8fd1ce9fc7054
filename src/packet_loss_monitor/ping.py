from __future__ import annotations

import enum
import logging
import platform
import re
import subprocess
from math import ceil
from typing import Optional

logger = logging.getLogger(__name__)

PING_RTT_RE = re.compile(r"time\s*=\s*([0-9]*\.?[0-9]+)\s*ms", re.IGNORECASE)
PING_RTT_BELOW_RE = re.compile(r"time\s*<\s*([0-9]+)\s*ms", re.IGNORECASE)

_RESOLUTION_MARKERS = (
    "unknown host",
    "name or service not known",
    "temporary failure in name resolution",
    "could not find host",
    "cannot resolve",
    "no address associated with hostname",
)
_TIMEOUT_MARKERS = (
    "100% packet loss",
    "100.0% packet loss",
    "request timed out",
    "(100% loss)",
)


class FailureReason(enum.Enum):
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    RESOLUTION = "resolution"
    ERROR = "error"


class ProbeResult:
    """Outcome of one echo attempt.

    ``rtt_ms`` is only meaningful for successful probes; failures carry 0.0.
    """

    __slots__ = ("host", "ok", "rtt_ms", "reason")

    def __init__(
        self,
        host: str,
        ok: bool,
        rtt_ms: float = 0.0,
        reason: Optional[FailureReason] = None,
    ):
        if rtt_ms < 0:
            raise ValueError("rtt_ms must be non-negative")
        self.host = host
        self.ok = ok
        self.rtt_ms = float(rtt_ms) if ok else 0.0
        self.reason = None if ok else (reason or FailureReason.ERROR)

    @classmethod
    def success(cls, host: str, rtt_ms: float) -> "ProbeResult":
        return cls(host, True, rtt_ms)

    @classmethod
    def failure(cls, host: str, reason: FailureReason) -> "ProbeResult":
        return cls(host, False, 0.0, reason)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"ProbeResult(host={self.host!r}, ok={self.ok}, rtt_ms={self.rtt_ms}, reason={self.reason})"


def parse_rtt_ms(output: str) -> Optional[float]:
    """Extract the round-trip time from ``ping`` output.

    Handles "time=12.3 ms" (Linux/macOS) and "time=12ms" / "time<1ms"
    (Windows). "time<N ms" is read as N/2.
    """
    if not output:
        return None
    match = PING_RTT_BELOW_RE.search(output)
    if match:
        return float(match.group(1)) / 2.0
    match = PING_RTT_RE.search(output)
    if match:
        return float(match.group(1))
    return None


def classify_failure(output: str) -> FailureReason:
    text = (output or "").lower()
    if any(marker in text for marker in _RESOLUTION_MARKERS):
        return FailureReason.RESOLUTION
    if any(marker in text for marker in _TIMEOUT_MARKERS):
        return FailureReason.TIMEOUT
    return FailureReason.UNREACHABLE


def build_ping_command(host: str, timeout: float, system: Optional[str] = None) -> list[str]:
    system = system or platform.system()
    if system == "Windows":
        # -w is in milliseconds
        return ["ping", "-n", "1", "-w", str(int(timeout * 1000)), host]
    if system == "Linux":
        # -n : numeric output (avoid DNS reverse lookups slowing us)
        return ["ping", "-n", "-c", "1", "-W", str(max(1, ceil(timeout))), host]
    # macOS/BSD: -W semantics differ, rely on the subprocess timeout
    return ["ping", "-n", "-c", "1", host]


def ping_host(host: str, timeout: float) -> ProbeResult:
    """Ping a host once using the system 'ping' command.

    Blocks until the reply arrives or the timeout elapses. Never raises for
    network conditions: timeouts, unreachable hosts and resolution errors
    come back as failed results.
    """
    cmd = build_ping_command(host, timeout)
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout + 0.5,
        )
    except subprocess.TimeoutExpired:
        logger.debug("Ping timeout: host=%s, timeout=%.1fs", host, timeout)
        return ProbeResult.failure(host, FailureReason.TIMEOUT)
    except OSError as e:
        # e.g. ping binary missing or not permitted
        logger.warning("Ping could not run: host=%s, error=%s", host, e)
        return ProbeResult.failure(host, FailureReason.ERROR)

    stdout = proc.stdout or ""
    if proc.returncode == 0:
        rtt_ms = parse_rtt_ms(stdout)
        if rtt_ms is not None:
            return ProbeResult.success(host, rtt_ms)
        # Windows reports "Destination host unreachable" with exit code 0
        logger.debug("No RTT in ping output: host=%s, output=%s", host, stdout[:100])
        return ProbeResult.failure(host, classify_failure(stdout))

    reason = classify_failure(stdout)
    logger.debug("Ping failed: host=%s, returncode=%d, reason=%s", host, proc.returncode, reason.value)
    return ProbeResult.failure(host, reason)
