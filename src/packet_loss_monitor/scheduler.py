"""Two independent periodic activities: probing and reporting."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from . import config

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class RepeatingTimer(threading.Thread):
    """Calls ``fire`` after ``initial_delay`` and then every ``period`` seconds.

    Fixed-rate: the schedule does not drift with the time ``fire`` takes.
    Periods missed entirely (e.g. after a system suspend) are skipped.
    """

    def __init__(self, period: float, fire: Callback, initial_delay: Optional[float] = None, name: str = "timer"):
        super().__init__(name=name, daemon=True)
        if period <= 0:
            raise ValueError("period must be positive")
        self.period = period
        self.initial_delay = period if initial_delay is None else initial_delay
        self.fire = fire
        self._cancelled = threading.Event()

    def run(self):
        next_tick = time.monotonic() + self.initial_delay
        while not self._cancelled.wait(max(0.0, next_tick - time.monotonic())):
            self.fire()
            next_tick += self.period
            now = time.monotonic()
            if next_tick < now:
                next_tick = now + self.period

    def cancel(self):
        self._cancelled.set()


class Scheduler:
    """Drives the probe tick and the report tick.

    Each activity has its own worker, so report ticks never queue behind
    probe ticks. Probe callbacks are expected to fan out and return (see
    ``Prober.dispatch``); the probes they start may overlap freely.

    ``stop()`` closes a gate and waits for callbacks that already passed it:
    once it returns no callback is running or will start, although probes
    those callbacks issued are left to finish.
    """

    def __init__(
        self,
        probe_interval_ms: int,
        report_interval_ms: int = config.REPORT_INTERVAL_MS,
        warmup_ms: int = config.PROBE_WARMUP_MS,
    ):
        if probe_interval_ms <= 0 or report_interval_ms <= 0:
            raise ValueError("intervals must be positive")
        if warmup_ms < 0:
            raise ValueError("warmup_ms must be non-negative")
        self.probe_interval_ms = probe_interval_ms
        self.report_interval_ms = report_interval_ms
        self.warmup_ms = warmup_ms

        self._callbacks: dict[str, list[Callback]] = {"probe": [], "report": []}
        self._gate = threading.Condition()
        self._started = False
        self._stopped = False
        self._active: set[int] = set()
        self._executors: dict[str, ThreadPoolExecutor] = {}
        self._timers: list[RepeatingTimer] = []

    def on_probe(self, callback: Callback) -> None:
        self._callbacks["probe"].append(callback)

    def on_report(self, callback: Callback) -> None:
        self._callbacks["report"].append(callback)

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    def start(self) -> None:
        with self._gate:
            if self._started:
                raise RuntimeError("scheduler can only be started once")
            self._started = True
            self._executors = {
                kind: ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{kind}-tick")
                for kind in self._callbacks
            }
            self._timers = [
                RepeatingTimer(
                    self.report_interval_ms / 1000.0,
                    lambda: self._submit("report"),
                    name="report-timer",
                ),
                RepeatingTimer(
                    self.probe_interval_ms / 1000.0,
                    lambda: self._submit("probe"),
                    initial_delay=self.warmup_ms / 1000.0,
                    name="probe-timer",
                ),
            ]
            for timer in self._timers:
                timer.start()
        logger.info(
            "Scheduler started: probe=%dms, report=%dms, warmup=%dms",
            self.probe_interval_ms,
            self.report_interval_ms,
            self.warmup_ms,
        )

    def stop(self) -> None:
        me = threading.get_ident()
        with self._gate:
            if self._stopped or not self._started:
                self._stopped = True
                return
            self._stopped = True
            for timer in self._timers:
                timer.cancel()
            # a callback calling stop() must not wait for itself
            self._gate.wait_for(lambda: not (self._active - {me}))
            executors = list(self._executors.values())
        for timer in self._timers:
            timer.join()
        for executor in executors:
            executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Scheduler stopped")

    def _submit(self, kind: str) -> None:
        with self._gate:
            if self._stopped:
                return
            self._executors[kind].submit(self._run, kind)

    def _run(self, kind: str) -> None:
        me = threading.get_ident()
        with self._gate:
            if self._stopped:
                return
            self._active.add(me)
        try:
            for callback in list(self._callbacks[kind]):
                try:
                    callback()
                except Exception:
                    logger.exception("%s tick callback failed", kind.capitalize())
        finally:
            with self._gate:
                self._active.discard(me)
                self._gate.notify_all()
