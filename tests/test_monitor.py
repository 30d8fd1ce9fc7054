import logging
import threading
import time

import pytest

from packet_loss_monitor.monitor import PacketLossMonitor
from packet_loss_monitor.ping import FailureReason, ProbeResult


def fixed_outcomes(host, timeout):
    if host == "a":
        return ProbeResult.success(host, 20.0)
    return ProbeResult.failure(host, FailureReason.TIMEOUT)


def test_single_tick_snapshot():
    monitor = PacketLossMonitor(["a", "b"], interval_ms=1000, ping_func=fixed_outcomes)
    try:
        monitor.prober.probe_once()
        snap = monitor.snapshot()
    finally:
        monitor.close()

    a = snap.host("a")
    assert (a.count, a.success_count, a.failure_count) == (1, 1, 0)
    assert a.average_rtt_ms == 20.0
    assert a.loss_pct == 0.0

    b = snap.host("b")
    assert (b.count, b.success_count, b.failure_count) == (1, 0, 1)
    assert b.average_rtt_ms == 0.0
    assert b.loss_pct == 100.0

    assert snap.total_requests == 2
    assert snap.total_failures == 1
    assert snap.total_loss_pct == 50.0
    assert snap.interval_ms == 1000


def test_running_monitor_reports_consistent_snapshots():
    snapshots = []
    lock = threading.Lock()

    def reporter(snap):
        with lock:
            snapshots.append(snap)

    monitor = PacketLossMonitor(
        ["a", "b"],
        interval_ms=10,
        reporter=reporter,
        ping_func=fixed_outcomes,
        report_interval_ms=25,
        warmup_ms=0,
    )
    monitor.start()
    try:
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            with lock:
                if len(snapshots) >= 4 and snapshots[-1].total_requests >= 6:
                    break
            time.sleep(0.01)
    finally:
        monitor.close()

    with lock:
        taken = list(snapshots)
    assert len(taken) >= 4
    totals = [s.total_requests for s in taken]
    assert totals == sorted(totals)
    for snap in taken:
        for st in snap.hosts:
            assert st.success_count + st.failure_count == st.count
            assert 0.0 <= st.loss_pct <= 100.0
        assert snap.total_requests == sum(st.count for st in snap.hosts)
        assert snap.total_failures == sum(st.failure_count for st in snap.hosts)
    assert taken[-1].elapsed_seconds > 0


def test_hosts_cannot_be_added_after_start():
    monitor = PacketLossMonitor(["a"], interval_ms=1000, ping_func=fixed_outcomes)
    monitor.start()
    try:
        with pytest.raises(RuntimeError):
            monitor.registry.register("b")
    finally:
        monitor.close()


def test_no_report_before_start():
    reports = []
    monitor = PacketLossMonitor(["a"], reporter=reports.append, ping_func=fixed_outcomes)
    assert monitor.elapsed_seconds() == 0.0
    monitor.report()
    assert len(reports) == 1
    assert reports[0].total_requests == 0
    monitor.close()


def test_timing_out_hosts_do_not_stall_fast_host_or_reports():
    def ping_func(host, timeout):
        if host.startswith("slow"):
            time.sleep(0.5)
            return ProbeResult.failure(host, FailureReason.TIMEOUT)
        return ProbeResult.success(host, 3.0)

    report_times = []
    monitor = PacketLossMonitor(
        ["slow1", "slow2", "fast"],
        interval_ms=50,
        reporter=lambda snap: report_times.append(time.monotonic()),
        ping_func=ping_func,
        report_interval_ms=100,
        warmup_ms=0,
    )
    monitor.start()
    started = time.monotonic()
    time.sleep(1.5)
    monitor.close()

    # ~30 ticks in 1.5s; the slow hosts always have several probes in flight
    assert len(monitor.registry.snapshot_log("fast")) >= 20
    late_reports = [t for t in report_times if t - started >= 0.75]
    assert len(late_reports) >= 4


def test_in_flight_probe_lands_after_close():
    entered = threading.Event()
    release = threading.Event()

    def ping_func(host, timeout):
        entered.set()
        release.wait(5)
        return ProbeResult.success(host, 9.0)

    monitor = PacketLossMonitor(["a"], interval_ms=1000, ping_func=ping_func, warmup_ms=0)
    monitor.start()
    assert entered.wait(5)
    monitor.close()
    assert monitor.registry.snapshot_log("a") == ()

    release.set()
    deadline = time.monotonic() + 5
    while not monitor.registry.snapshot_log("a") and time.monotonic() < deadline:
        time.sleep(0.01)
    log = monitor.registry.snapshot_log("a")
    assert len(log) == 1
    assert log[0].rtt_ms == 9.0


def test_stop_then_close_logs_once(caplog):
    monitor = PacketLossMonitor(["a"], interval_ms=1000, ping_func=fixed_outcomes)
    with caplog.at_level(logging.INFO, logger="packet_loss_monitor.monitor"):
        monitor.start()
        monitor.stop()
        monitor.close()
    stopped = [r for r in caplog.records if r.getMessage().startswith("Monitoring stopped")]
    assert len(stopped) == 1
