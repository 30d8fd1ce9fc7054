from __future__ import annotations

from rich import box
from rich.console import Group
from rich.table import Table
from rich.text import Text

from . import config
from .stats import HostStats, Snapshot


def format_duration(seconds: float) -> str:
    seconds = max(0, int(seconds))
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def latency_style(st: HostStats) -> str:
    if st.success_count == 0:
        return "red"
    if st.average_rtt_ms < config.LATENCY_GREEN_MS:
        return "green"
    if st.average_rtt_ms < config.LATENCY_YELLOW_MS:
        return "yellow"
    return "red"


def loss_style(loss: float) -> str:
    if loss >= config.LOSS_RED_PCT:
        return "red"
    if loss >= config.LOSS_YELLOW_PCT:
        return "yellow"
    return "green"


def build_table(snapshot: Snapshot) -> Table:
    table = Table(
        title=f"Test timing interval: {snapshot.interval_ms} ms ({snapshot.interval_ms / 1000:.2f} s)",
        title_style="dark_orange",
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=True,
    )
    table.add_column("Host", style="bold")
    table.add_column("Succ", justify="right")
    table.add_column("Fail", justify="right")
    table.add_column("Avg (ms)", justify="right")
    table.add_column("Loss %", justify="right")
    table.add_column("Jitter (ms)", justify="right")

    for st in snapshot.hosts:
        avg = f"{st.average_rtt_ms:.2f}" if st.success_count else "-"
        table.add_row(
            st.host,
            str(st.success_count),
            str(st.failure_count),
            Text(avg, style=latency_style(st)),
            Text(f"{st.loss_pct:.2f}", style=loss_style(st.loss_pct)),
            f"{st.jitter_ms:.2f}",
        )
    return table


def build_totals(snapshot: Snapshot) -> Text:
    return Text(
        f"Total Requests: {snapshot.total_requests:<10} "
        f"Total Success: {snapshot.total_success:<10} "
        f"Total Failures: {snapshot.total_failures} ({snapshot.total_loss_pct:.2f}%)",
        style="green",
    )


def build_view(snapshot: Snapshot, hint: str = "Press Ctrl+C to stop.") -> Group:
    """Everything shown on one report tick."""
    parts = [
        build_table(snapshot),
        build_totals(snapshot),
        Text(f"Elapsed Time: {format_duration(snapshot.elapsed_seconds)}", style="cyan"),
    ]
    if hint:
        parts.append(Text(hint))
    return Group(*parts)
