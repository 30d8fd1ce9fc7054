import math

import pytest

from packet_loss_monitor import stats
from packet_loss_monitor.ping import FailureReason, ProbeResult
from packet_loss_monitor.registry import HostRegistry


def ok(rtt, host="x"):
    return ProbeResult.success(host, rtt)


def fail(reason=FailureReason.TIMEOUT, host="x"):
    return ProbeResult.failure(host, reason)


def test_counts_add_up():
    results = [ok(10), fail(), ok(12), fail(FailureReason.UNREACHABLE), fail(FailureReason.RESOLUTION)]
    assert stats.total_count(results) == 5
    assert stats.success_count(results) == 2
    assert stats.failure_count(results) == 3
    assert stats.success_count(results) + stats.failure_count(results) == stats.total_count(results)


def test_loss_pct_bounds_and_empty_log():
    assert stats.packet_loss_pct([]) == 0.0
    assert stats.packet_loss_pct([ok(1), ok(2)]) == 0.0
    assert stats.packet_loss_pct([fail(), fail()]) == 100.0
    assert stats.packet_loss_pct([ok(1), fail(), fail(), ok(3)]) == 50.0


def test_average_rtt_ignores_failures():
    assert stats.average_rtt([ok(10), fail(), ok(30)]) == 20.0
    # failures carry no RTT and would otherwise drag the mean down
    assert stats.average_rtt([fail(), fail()]) == 0.0
    assert stats.average_rtt([]) == 0.0


def test_jitter_is_sample_std_dev():
    assert stats.jitter([ok(10), ok(20), ok(30)]) == pytest.approx(10.0)


def test_jitter_needs_two_samples():
    assert stats.jitter([]) == 0.0
    assert stats.jitter([ok(42)]) == 0.0
    assert stats.jitter([ok(42), fail(), fail()]) == 0.0


def test_jitter_uses_earliest_window():
    results = [ok(10), ok(20), ok(30)] + [ok(1000), ok(5)] * 10
    assert stats.jitter(results, window=3) == pytest.approx(10.0)
    assert stats.jitter(results, window=stats.ENTIRE_LOG) == pytest.approx(
        stats.std_dev(r.rtt_ms for r in results)
    )


def test_jitter_default_window_is_fifty():
    results = [ok(10), ok(30)] * 25 + [ok(10_000)] * 10
    assert stats.jitter(results) == pytest.approx(stats.std_dev([10, 30] * 25))


def test_jitter_rejects_negative_window():
    with pytest.raises(ValueError):
        stats.jitter([ok(1), ok(2)], window=-5)


def test_std_dev_matches_two_pass():
    values = [1e9 + 4, 1e9 + 7, 1e9 + 13, 1e9 + 16]
    mean = sum(values) / len(values)
    expected = math.sqrt(sum((v - mean) ** 2 for v in values) / (len(values) - 1))
    assert stats.std_dev(values) == pytest.approx(expected)
    assert stats.std_dev([]) == 0.0


def test_build_snapshot_globals():
    registry = HostRegistry(["a", "b", "c"])
    for r in [ok(10, "a"), fail(host="a"), ok(20, "a")]:
        registry.append("a", r)
    for r in [fail(host="b"), fail(host="b")]:
        registry.append("b", r)

    snap = stats.build_snapshot(registry, elapsed_seconds=12.5, interval_ms=1000)

    assert [st.host for st in snap.hosts] == ["a", "b", "c"]
    assert snap.total_requests == sum(st.count for st in snap.hosts) == 5
    assert snap.total_failures == sum(st.failure_count for st in snap.hosts) == 3
    assert snap.total_success == 2
    assert snap.total_loss_pct == 60.0
    assert snap.elapsed_seconds == 12.5
    assert snap.interval_ms == 1000

    c = snap.host("c")
    assert (c.count, c.success_count, c.failure_count) == (0, 0, 0)
    assert c.loss_pct == 0.0
    assert c.average_rtt_ms == 0.0
    assert c.jitter_ms == 0.0
    with pytest.raises(KeyError):
        snap.host("nope")


def test_empty_registry_snapshot():
    snap = stats.build_snapshot(HostRegistry())
    assert snap.hosts == ()
    assert snap.total_requests == 0
    assert snap.total_loss_pct == 0.0
