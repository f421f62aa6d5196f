"""Latency histograms, token reduction and fallback counters."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field

LATENCY_BUCKET_UPPER_MS = (
    0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0,
    40.0, 80.0, 120.0, 200.0, 400.0, 800.0, 1600.0, 3200.0,
)


@dataclass
class IndexStats:
    segment_count: int = 0
    posting_terms: int = 0
    vector_count: int = 0
    query_cache_hit_rate: float = 0.0
    dense_probe_count_p95: float = 0.0
    cold_rehydrate_count: int = 0


@dataclass
class StatsSnapshot:
    p95_read_ms: float = 0.0
    p95_write_ms: float = 0.0
    token_reduction_ratio: float = 0.0
    fallback_rate: float = 0.0
    mem_used_bytes: int = 0
    disk_used_bytes: int = 0
    item_count: int = 0
    tombstone_count: int = 0
    gc_last_run_ms: int = 0
    gc_evicted_count: int = 0
    capacity_blocked: bool = False
    write_ack_mode: str = "durable"
    effective_backend: str = ""
    resident_used_bytes: int = 0
    resident_limit_bytes: int = 0
    resident_evicted_count: int = 0
    disk_fallback_search_count: int = 0
    index_stats: IndexStats = field(default_factory=IndexStats)


def _bucket_index(ms: float) -> int:
    if ms < 0.0:
        return 0
    for i, upper in enumerate(LATENCY_BUCKET_UPPER_MS):
        if ms <= upper:
            return i
    return len(LATENCY_BUCKET_UPPER_MS)


def _p95(hist: list[int]) -> float:
    total = sum(hist)
    if total == 0:
        return 0.0
    target = math.ceil(total * 0.95)
    cumulative = 0
    for i, count in enumerate(hist):
        cumulative += count
        if cumulative >= target:
            return LATENCY_BUCKET_UPPER_MS[min(i, len(LATENCY_BUCKET_UPPER_MS) - 1)]
    return LATENCY_BUCKET_UPPER_MS[-1]


class Metrics:
    """Thread-safe counters summarised into a StatsSnapshot."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._read_hist = [0] * (len(LATENCY_BUCKET_UPPER_MS) + 1)
        self._write_hist = [0] * (len(LATENCY_BUCKET_UPPER_MS) + 1)
        self._token_before = 0
        self._token_after = 0
        self._fallback_total = 0
        self._fallback_used = 0

    def record_read_latency(self, ms: float) -> None:
        with self._lock:
            self._read_hist[_bucket_index(ms)] += 1

    def record_write_latency(self, ms: float) -> None:
        with self._lock:
            self._write_hist[_bucket_index(ms)] += 1

    def record_token_reduction(self, before_tokens: int, after_tokens: int) -> None:
        with self._lock:
            self._token_before += before_tokens
            self._token_after += after_tokens

    def record_fallback(self, used_fallback: bool) -> None:
        with self._lock:
            self._fallback_total += 1
            if used_fallback:
                self._fallback_used += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            out = StatsSnapshot(
                p95_read_ms=_p95(self._read_hist),
                p95_write_ms=_p95(self._write_hist),
            )
            before, after = self._token_before, self._token_after
            if before > 0 and before >= after:
                out.token_reduction_ratio = (before - after) / before
            if self._fallback_total > 0:
                out.fallback_rate = self._fallback_used / self._fallback_total
        return out