"""Ranking and governance rules for eviction, expiry and pinning."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from pgmem.records import MemoryRecord

_MS_PER_HOUR = 3_600_000.0


@dataclass
class WorkspacePinStats:
    active: int = 0
    pinned: int = 0
    has_evictable: bool = False


def eviction_rank(record: MemoryRecord, now_ms: int) -> float:
    """Retention value of a record; the lowest rank is evicted first."""
    reference_ms = max(record.updated_at_ms, record.last_access_ms)
    age_hours = max(now_ms - reference_ms, 0) / _MS_PER_HOUR
    hit_signal = math.log1p(record.hit_count)
    source_weight = 2.0 if record.source == "turn" else 0.8
    pin_bias = 1500.0 if record.pinned else 0.0
    tombstone_bias = -1500.0 if record.tombstone else 0.0
    return (
        record.importance_score * 10.0
        + hit_signal * 4.0
        + source_weight
        + pin_bias
        + tombstone_bias
        - age_hours * 1.5
    )


def is_incoming_newer(current: MemoryRecord, incoming: MemoryRecord) -> bool:
    """Last-writer-wins order: update time, then version, then node id."""
    if incoming.updated_at_ms != current.updated_at_ms:
        return incoming.updated_at_ms > current.updated_at_ms
    if incoming.version != current.version:
        return incoming.version > current.version
    return incoming.node_id > current.node_id


def is_expired(record: MemoryRecord, now_ms: int) -> bool:
    """Whether the record's TTL has elapsed since its last update."""
    if record.ttl_s == 0 or record.updated_at_ms == 0:
        return False
    ttl_ms = record.ttl_s * 1000
    return now_ms > record.updated_at_ms and now_ms - record.updated_at_ms >= ttl_ms


def compute_workspace_pin_stats(
    records: Iterable[MemoryRecord], workspace_id: str
) -> WorkspacePinStats:
    """Count active and pinned records of one workspace."""
    stats = WorkspacePinStats()
    for rec in records:
        if rec.workspace_id != workspace_id or rec.tombstone:
            continue
        stats.active += 1
        if rec.pinned:
            stats.pinned += 1
        else:
            stats.has_evictable = True
    return stats


def pinned_ratio(pinned: int, active: int) -> float:
    if active == 0:
        return 0.0
    return pinned / active


def is_pin_blocked_by_ratio(pinned: int, active: int, max_ratio: float) -> bool:
    """Whether pinned/active exceeds the allowed ratio."""
    if active == 0:
        return False
    if max_ratio <= 0.0:
        return True
    if max_ratio >= 1.0:
        return False
    return pinned_ratio(pinned, active) > max_ratio