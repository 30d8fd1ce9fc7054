"""Statistics derived from host logs.

Everything here is a pure function of the results handed in; a snapshot of
the registry is taken once per report so all numbers in it agree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from . import config
from .ping import ProbeResult
from .registry import HostRegistry

# Jitter window sentinel: use every entry of the log
ENTIRE_LOG = -1


def total_count(results: Sequence[ProbeResult]) -> int:
    return len(results)


def success_count(results: Sequence[ProbeResult]) -> int:
    return sum(1 for r in results if r.ok)


def failure_count(results: Sequence[ProbeResult]) -> int:
    return total_count(results) - success_count(results)


def loss_pct(failures: int, total: int) -> float:
    if total == 0:
        return 0.0
    return failures / total * 100.0


def packet_loss_pct(results: Sequence[ProbeResult]) -> float:
    return loss_pct(failure_count(results), total_count(results))


def average_rtt(results: Iterable[ProbeResult]) -> float:
    """Mean RTT of successful probes; 0 when there are none."""
    rtts = [r.rtt_ms for r in results if r.ok]
    if not rtts:
        return 0.0
    return sum(rtts) / len(rtts)


def std_dev(values: Iterable[float]) -> float:
    """Sample standard deviation (n - 1) using Welford's online algorithm.

    Returns 0 for fewer than two values.
    """
    n = 0
    mean = 0.0
    m2 = 0.0
    for value in values:
        n += 1
        delta = value - mean
        mean += delta / n
        m2 += delta * (value - mean)
    if n < 2:
        return 0.0
    return math.sqrt(m2 / (n - 1))


def jitter(results: Sequence[ProbeResult], window: int = config.JITTER_WINDOW) -> float:
    """Standard deviation of RTT over the earliest ``window`` log entries.

    ``window=ENTIRE_LOG`` uses the whole log. Failed probes inside the window
    carry no RTT and are skipped.
    """
    if window != ENTIRE_LOG:
        if window < 0:
            raise ValueError("window must be non-negative or ENTIRE_LOG")
        results = results[:window]
    return std_dev(r.rtt_ms for r in results if r.ok)


@dataclass(frozen=True)
class HostStats:
    host: str
    count: int
    success_count: int
    failure_count: int
    average_rtt_ms: float
    jitter_ms: float
    loss_pct: float


@dataclass(frozen=True)
class Snapshot:
    hosts: tuple[HostStats, ...]
    total_requests: int
    total_success: int
    total_failures: int
    total_loss_pct: float
    elapsed_seconds: float
    interval_ms: int

    def host(self, host: str) -> HostStats:
        for st in self.hosts:
            if st.host == host:
                return st
        raise KeyError(host)


def host_stats(
    host: str, results: Sequence[ProbeResult], jitter_window: int = config.JITTER_WINDOW
) -> HostStats:
    total = total_count(results)
    successes = success_count(results)
    failures = total - successes
    return HostStats(
        host=host,
        count=total,
        success_count=successes,
        failure_count=failures,
        average_rtt_ms=average_rtt(results),
        jitter_ms=jitter(results, jitter_window),
        loss_pct=loss_pct(failures, total),
    )


def aggregate(
    per_host: Iterable[HostStats], elapsed_seconds: float = 0.0, interval_ms: int = 0
) -> Snapshot:
    hosts = tuple(per_host)
    total = sum(st.count for st in hosts)
    failures = sum(st.failure_count for st in hosts)
    return Snapshot(
        hosts=hosts,
        total_requests=total,
        total_success=total - failures,
        total_failures=failures,
        total_loss_pct=loss_pct(failures, total),
        elapsed_seconds=elapsed_seconds,
        interval_ms=interval_ms,
    )


def build_snapshot(
    registry: HostRegistry,
    elapsed_seconds: float = 0.0,
    interval_ms: int = 0,
    jitter_window: int = config.JITTER_WINDOW,
) -> Snapshot:
    """Compute fresh statistics for every registered host, in registration order."""
    return aggregate(
        (
            host_stats(host, registry.snapshot_log(host), jitter_window)
            for host in registry.hosts()
        ),
        elapsed_seconds=elapsed_seconds,
        interval_ms=interval_ms,
    )
