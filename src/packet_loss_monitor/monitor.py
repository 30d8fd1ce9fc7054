from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from . import config
from .ping import ping_host
from .prober import PingFunc, Prober
from .registry import HostRegistry
from .scheduler import Scheduler
from .stats import Snapshot, build_snapshot

logger = logging.getLogger(__name__)

Reporter = Callable[[Snapshot], None]


class PacketLossMonitor:
    """Probes a fixed host set and hands periodic snapshots to a reporter."""

    def __init__(
        self,
        hosts: Iterable[str],
        interval_ms: int = config.DEFAULT_PROBE_INTERVAL_MS,
        reporter: Optional[Reporter] = None,
        ping_func: PingFunc = ping_host,
        timeout: float = config.PING_TIMEOUT_SECONDS,
        report_interval_ms: int = config.REPORT_INTERVAL_MS,
        warmup_ms: int = config.PROBE_WARMUP_MS,
        jitter_window: int = config.JITTER_WINDOW,
    ):
        self.interval_ms = interval_ms
        self.jitter_window = jitter_window
        self.reporter = reporter
        self.registry = HostRegistry(hosts)
        self.prober = Prober(self.registry, ping_func=ping_func, timeout=timeout)
        self.scheduler = Scheduler(
            probe_interval_ms=interval_ms,
            report_interval_ms=report_interval_ms,
            warmup_ms=warmup_ms,
        )
        self.scheduler.on_probe(self.prober.dispatch)
        self.scheduler.on_report(self.report)
        self.start_ts: Optional[float] = None

    def start(self) -> None:
        self.registry.seal()
        self.start_ts = time.monotonic()
        logger.info(
            "Monitoring started: %d hosts, interval=%dms", len(self.registry), self.interval_ms
        )
        self.scheduler.start()

    def stop(self) -> None:
        was_running = self.scheduler.running
        self.scheduler.stop()
        if was_running:
            logger.info("Monitoring stopped after %.1fs", self.elapsed_seconds())

    def close(self) -> None:
        """Stop and release the probe workers; in-flight probes still finish."""
        self.stop()
        self.prober.shutdown(wait=False)

    def elapsed_seconds(self) -> float:
        if self.start_ts is None:
            return 0.0
        return time.monotonic() - self.start_ts

    def snapshot(self) -> Snapshot:
        return build_snapshot(
            self.registry,
            elapsed_seconds=self.elapsed_seconds(),
            interval_ms=self.interval_ms,
            jitter_window=self.jitter_window,
        )

    def report(self) -> None:
        if self.reporter is not None:
            self.reporter(self.snapshot())
