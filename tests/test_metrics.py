import pytest

from pgmem.metrics import Metrics, StatsSnapshot


def test_empty_snapshot():
    snap = Metrics().snapshot()
    assert snap == StatsSnapshot()
    assert snap.p95_read_ms == 0.0


def test_single_read_latency_maps_to_bucket_upper_bound():
    m = Metrics()
    m.record_read_latency(0.3)
    assert m.snapshot().p95_read_ms == 0.5
    assert m.snapshot().p95_write_ms == 0.0


def test_negative_latency_goes_to_first_bucket():
    m = Metrics()
    m.record_write_latency(-5.0)
    assert m.snapshot().p95_write_ms == 0.1


def test_overflow_latency_reports_last_bound():
    m = Metrics()
    m.record_read_latency(10_000.0)
    assert m.snapshot().p95_read_ms == 3200.0


def test_p95_with_tail():
    m = Metrics()
    for _ in range(95):
        m.record_read_latency(1.0)
    for _ in range(5):
        m.record_read_latency(100.0)
    assert m.snapshot().p95_read_ms == 1.0

    m.record_read_latency(100.0)
    assert m.snapshot().p95_read_ms == 120.0


def test_token_reduction_ratio():
    m = Metrics()
    m.record_token_reduction(4, 1)
    assert m.snapshot().token_reduction_ratio == pytest.approx(0.75)


def test_token_growth_reports_zero():
    m = Metrics()
    m.record_token_reduction(1, 5)
    assert m.snapshot().token_reduction_ratio == 0.0


def test_fallback_rate():
    m = Metrics()
    m.record_fallback(True)
    m.record_fallback(False)
    assert m.snapshot().fallback_rate == 0.5
    m.record_fallback(False)
    m.record_fallback(False)
    assert m.snapshot().fallback_rate == pytest.approx(0.25)


def test_write_ack_mode_default():
    assert Metrics().snapshot().write_ack_mode == "durable"