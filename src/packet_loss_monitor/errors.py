from __future__ import annotations


class MonitorError(Exception):
    """Base class for setup and wiring errors of the monitor."""


class DuplicateHostError(MonitorError):
    def __init__(self, host: str):
        super().__init__(f"host already registered: {host!r}")
        self.host = host


class UnknownHostError(MonitorError):
    """Raised when a result is recorded for a host that was never registered.

    This points at a wiring bug between the scheduler and the prober, not at a
    network condition.
    """

    def __init__(self, host: str):
        super().__init__(f"host not registered: {host!r}")
        self.host = host
