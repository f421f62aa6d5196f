"""Memory records and their JSON serialisation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

_RECORD_OVERHEAD_BYTES = 384


class RecordDecodeError(ValueError):
    """Raised when a stored record cannot be decoded."""


@dataclass
class MemoryRecord:
    id: str = ""
    workspace_id: str = ""
    session_id: str = ""
    source: str = ""
    content: str = ""
    pinned: bool = False
    tombstone: bool = False
    created_at_ms: int = 0
    updated_at_ms: int = 0
    version: int = 0
    size_bytes: int = 0
    last_access_ms: int = 0
    hit_count: int = 0
    importance_score: float = 1.0
    tier: str = ""
    node_id: str = ""
    ttl_s: int = 0
    dedup_key: str = ""
    shard_id: str = ""
    replica_role: str = ""
    routing_epoch: int = 0
    shard_hint: str = ""
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)


def _nbytes(text: str) -> int:
    return len(text.encode("utf-8"))


def compute_record_size_bytes(record: MemoryRecord) -> int:
    """Approximate stored size of a record: its text fields plus a fixed overhead."""
    total = sum(
        _nbytes(text)
        for text in (
            record.id,
            record.workspace_id,
            record.session_id,
            record.source,
            record.content,
            record.node_id,
            record.tier,
            record.dedup_key,
            record.shard_id,
            record.replica_role,
            record.shard_hint,
        )
    )
    total += sum(_nbytes(tag) for tag in record.tags)
    total += sum(_nbytes(k) + _nbytes(v) for k, v in record.metadata.items())
    return total + _RECORD_OVERHEAD_BYTES


def record_map_key(workspace_id: str, memory_id: str) -> str:
    """Key of a record in the in-memory record map."""
    return f"{workspace_id}:{memory_id}"


def serialize_record(record: MemoryRecord) -> str:
    """Compact JSON text of a record."""
    payload = {
        "id": record.id,
        "workspace_id": record.workspace_id,
        "session_id": record.session_id,
        "source": record.source,
        "content": record.content,
        "pinned": record.pinned,
        "tombstone": record.tombstone,
        "created_at_ms": record.created_at_ms,
        "updated_at_ms": record.updated_at_ms,
        "version": record.version,
        "size_bytes": record.size_bytes,
        "last_access_ms": record.last_access_ms,
        "hit_count": record.hit_count,
        "importance_score": record.importance_score,
        "tier": record.tier,
        "node_id": record.node_id,
        "ttl_s": record.ttl_s,
        "dedup_key": record.dedup_key,
        "shard_id": record.shard_id,
        "replica_role": record.replica_role,
        "routing_epoch": record.routing_epoch,
        "shard_hint": record.shard_hint,
        "tags": list(record.tags),
        "metadata": dict(record.metadata),
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def _as_str(value: Any, fallback: str | None) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return fallback


def _get_str(data: dict, key: str, fallback: str) -> str:
    return _as_str(data.get(key), fallback)


def _get_uint(data: dict, key: str, fallback: int = 0) -> int:
    value = data.get(key)
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value if value >= 0 else fallback
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return fallback


def _get_float(data: dict, key: str, fallback: float) -> float:
    value = data.get(key)
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return fallback
    return fallback


def _get_bool(data: dict, key: str, fallback: bool) -> bool:
    value = data.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    return fallback


def _read_tags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    tags = []
    for item in value:
        text = _as_str(item, None)
        if text is not None:
            tags.append(text)
    return tags


def _read_metadata(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): _as_str(v, "") for k, v in value.items()}


def deserialize_record(text: str) -> MemoryRecord:
    """Decode a record from JSON; missing fields take their defaults."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise RecordDecodeError(f"invalid record JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise RecordDecodeError("record JSON must be an object")

    record = MemoryRecord(
        id=_get_str(data, "id", ""),
        workspace_id=_get_str(data, "workspace_id", ""),
        session_id=_get_str(data, "session_id", ""),
        source=_get_str(data, "source", ""),
        content=_get_str(data, "content", ""),
        pinned=_get_bool(data, "pinned", False),
        tombstone=_get_bool(data, "tombstone", False),
        created_at_ms=_get_uint(data, "created_at_ms"),
        updated_at_ms=_get_uint(data, "updated_at_ms"),
        version=_get_uint(data, "version"),
        size_bytes=_get_uint(data, "size_bytes"),
        last_access_ms=_get_uint(data, "last_access_ms"),
        hit_count=_get_uint(data, "hit_count"),
        importance_score=_get_float(data, "importance_score", 1.0),
        tier=_get_str(data, "tier", "hot"),
        node_id=_get_str(data, "node_id", ""),
        ttl_s=_get_uint(data, "ttl_s"),
        dedup_key=_get_str(data, "dedup_key", ""),
        shard_id=_get_str(data, "shard_id", ""),
        replica_role=_get_str(data, "replica_role", ""),
        routing_epoch=_get_uint(data, "routing_epoch"),
        shard_hint=_get_str(data, "shard_hint", ""),
        tags=_read_tags(data.get("tags")),
        metadata=_read_metadata(data.get("metadata")),
    )
    if record.size_bytes == 0:
        record.size_bytes = compute_record_size_bytes(record)
    return record