"""Parallel echo probing of every configured host."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import wait as wait_all
from typing import Callable, Iterable, Optional

from . import config
from .ping import FailureReason, ProbeResult, ping_host
from .registry import HostRegistry

logger = logging.getLogger(__name__)

PingFunc = Callable[[str, float], ProbeResult]


class Prober:
    """Issues one echo per host per tick and records each outcome.

    Every probe runs on a thread of its own, started by the tick that issued
    it, so a host that times out never delays another host or a later tick.
    Any exception raised while probing a host is recorded as a failed result
    for that host; nothing escapes to the caller.

    Overlapping ticks are not prevented. Parallelism is not capped: a tick
    starts one thread per host and a slow host may have several probes in
    flight at once.
    """

    def __init__(
        self,
        registry: HostRegistry,
        ping_func: PingFunc = ping_host,
        timeout: float = config.PING_TIMEOUT_SECONDS,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.registry = registry
        self.ping_func = ping_func
        self.timeout = timeout
        self._lock = threading.Lock()
        self._threads: set[threading.Thread] = set()
        self._closed = False

    def _probe(self, host: str) -> ProbeResult:
        try:
            result = self.ping_func(host, self.timeout)
        except Exception as e:
            logger.warning("Probe error: host=%s, error=%s", host, e, exc_info=True)
            result = ProbeResult.failure(host, FailureReason.ERROR)
        self.registry.append(host, result)
        if not result.ok:
            logger.debug("Probe failed: host=%s, reason=%s", host, result.reason.value)
        return result

    def _run(self, host: str, future: Future) -> None:
        try:
            future.set_result(self._probe(host))
        except Exception as e:
            # registry wiring errors (UnknownHostError) surface through the future
            future.set_exception(e)
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def _start(self, host: str) -> Future:
        future: Future = Future()
        future.set_running_or_notify_cancel()
        thread = threading.Thread(target=self._run, args=(host, future), name=f"probe-{host}")
        self._threads.add(thread)
        thread.start()
        return future

    def dispatch(self, hosts: Optional[Iterable[str]] = None) -> list[Future]:
        """Start one probe per host and return without waiting."""
        targets = list(self.registry.hosts() if hosts is None else hosts)
        with self._lock:
            if self._closed:
                raise RuntimeError("cannot probe after shutdown")
            return [self._start(host) for host in targets]

    def probe_once(self, hosts: Optional[Iterable[str]] = None) -> list[ProbeResult]:
        """Probe every host once and wait until all results are recorded."""
        futures = self.dispatch(hosts)
        wait_all(futures)
        return [f.result() for f in futures]

    def in_flight(self) -> int:
        with self._lock:
            return len(self._threads)

    def shutdown(self, wait: bool = False) -> None:
        """Refuse further ticks. In-flight probes still land in the registry."""
        with self._lock:
            self._closed = True
            pending = list(self._threads)
        if wait:
            for thread in pending:
                thread.join()
