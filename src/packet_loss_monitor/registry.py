from __future__ import annotations

import logging
import threading
from typing import Iterable, Iterator

from .errors import DuplicateHostError, UnknownHostError
from .ping import ProbeResult

logger = logging.getLogger(__name__)


class HostLog:
    """Append-only, ordered probe results for one host."""

    __slots__ = ("host", "_results", "_lock")

    def __init__(self, host: str):
        self.host = host
        self._results: list[ProbeResult] = []
        self._lock = threading.Lock()

    def append(self, result: ProbeResult) -> None:
        with self._lock:
            self._results.append(result)

    def snapshot(self) -> tuple[ProbeResult, ...]:
        with self._lock:
            return tuple(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


class HostRegistry:
    """Thread-safe mapping from host to its HostLog.

    The key set is fixed once the registry is sealed (when monitoring
    starts). After that the mapping itself is never mutated, so lookups need
    no lock; each log serializes its own appends.
    """

    def __init__(self, hosts: Iterable[str] = ()):
        self._logs: dict[str, HostLog] = {}
        self._lock = threading.Lock()
        self._sealed = False
        for host in hosts:
            self.register(host)

    def register(self, host: str) -> None:
        with self._lock:
            if self._sealed:
                raise RuntimeError(f"cannot register {host!r}: registry is sealed")
            if host in self._logs:
                raise DuplicateHostError(host)
            self._logs[host] = HostLog(host)
        logger.debug("Host registered: %s (total: %d)", host, len(self._logs))

    def seal(self) -> None:
        with self._lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _log(self, host: str) -> HostLog:
        try:
            return self._logs[host]
        except KeyError:
            raise UnknownHostError(host) from None

    def append(self, host: str, result: ProbeResult) -> None:
        self._log(host).append(result)

    def snapshot_log(self, host: str) -> tuple[ProbeResult, ...]:
        return self._log(host).snapshot()

    def hosts(self) -> list[str]:
        with self._lock:
            return list(self._logs)

    def __contains__(self, host: object) -> bool:
        return host in self._logs

    def __len__(self) -> int:
        return len(self._logs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.hosts())
