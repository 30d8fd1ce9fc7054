from __future__ import annotations

import logging
import signal
import threading
from typing import Iterable, Optional

from rich.console import Console
from rich.live import Live

from . import config
from .logging_config import configure_logging
from .monitor import PacketLossMonitor
from .ui import build_view

logger = logging.getLogger(__name__)

console = Console()


def parse_interval_ms(text: Optional[str], default: int = config.DEFAULT_PROBE_INTERVAL_MS) -> int:
    """Operator input to a probe interval; anything but a positive integer gives ``default``."""
    try:
        value = int(str(text).strip())
    except ValueError:
        return default
    return value if value > 0 else default


def read_interval() -> int:
    try:
        text = console.input("Enter timing interval (ms): ")
    except EOFError:
        text = ""
    interval_ms = parse_interval_ms(text, default=0)
    if not interval_ms:
        logger.info("Invalid interval %r, using default %dms", text, config.DEFAULT_PROBE_INTERVAL_MS)
        interval_ms = config.DEFAULT_PROBE_INTERVAL_MS
    return interval_ms


def run(interval_ms: int, hosts: Iterable[str] = config.HOSTS) -> PacketLossMonitor:
    """Monitor ``hosts`` until SIGINT/SIGTERM, rendering live statistics."""
    stop_event = threading.Event()

    def _signal_handler(signum, frame):
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _signal_handler)

    monitor = PacketLossMonitor(hosts, interval_ms)
    with Live(
        build_view(monitor.snapshot()),
        console=console,
        auto_refresh=False,
        screen=False,
    ) as live:
        monitor.reporter = lambda snapshot: live.update(build_view(snapshot), refresh=True)
        monitor.start()
        try:
            while not stop_event.wait(0.25):
                pass
        finally:
            monitor.stop()
        # Final screen
        live.update(build_view(monitor.snapshot(), hint=""), refresh=True)

    monitor.close()
    return monitor


def main():
    configure_logging()
    interval_ms = read_interval()
    try:
        run(interval_ms)
    except KeyboardInterrupt:
        pass

    console.print("Press ENTER to close.")
    try:
        input()
    except (EOFError, KeyboardInterrupt):
        pass


if __name__ == "__main__":  # pragma: no cover
    main()
