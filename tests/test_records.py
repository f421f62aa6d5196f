import json

import pytest

from pgmem.records import (
    MemoryRecord,
    RecordDecodeError,
    compute_record_size_bytes,
    deserialize_record,
    record_map_key,
    serialize_record,
)


def _sample() -> MemoryRecord:
    return MemoryRecord(
        id="m-1",
        workspace_id="ws",
        session_id="s",
        source="turn",
        content="hello world",
        pinned=True,
        created_at_ms=10,
        updated_at_ms=20,
        version=3,
        size_bytes=500,
        last_access_ms=30,
        hit_count=2,
        importance_score=2.5,
        tier="hot",
        node_id="node",
        ttl_s=60,
        dedup_key="d",
        routing_epoch=7,
        tags=["a", "b"],
        metadata={"shard_id": "s1"},
    )


def test_round_trip():
    rec = _sample()
    assert deserialize_record(serialize_record(rec)) == rec


def test_serialize_is_compact_json_object():
    text = serialize_record(_sample())
    assert " " not in text.replace("hello world", "")
    data = json.loads(text)
    assert data["tags"] == ["a", "b"]
    assert data["metadata"] == {"shard_id": "s1"}


def test_empty_record_size_is_overhead():
    assert compute_record_size_bytes(MemoryRecord()) == 384


def test_size_grows_with_content_tags_and_metadata():
    base = compute_record_size_bytes(MemoryRecord())
    with_content = compute_record_size_bytes(MemoryRecord(content="hello"))
    assert with_content - base == len("hello")
    with_meta = compute_record_size_bytes(MemoryRecord(metadata={"k": "vv"}, tags=["t"]))
    assert with_meta - base == len("k") + len("vv") + len("t")


def test_deserialize_defaults():
    rec = deserialize_record("{}")
    assert rec.tier == "hot"
    assert rec.importance_score == 1.0
    assert rec.pinned is False
    assert rec.size_bytes == compute_record_size_bytes(rec)


def test_deserialize_string_typed_values():
    text = json.dumps(
        {"id": "x", "pinned": "true", "tombstone": "0", "version": "5", "importance_score": "3.5"}
    )
    rec = deserialize_record(text)
    assert rec.pinned is True
    assert rec.tombstone is False
    assert rec.version == 5
    assert rec.importance_score == 3.5


def test_deserialize_bad_numbers_fall_back():
    rec = deserialize_record(json.dumps({"version": "abc", "hit_count": -4}))
    assert rec.version == 0
    assert rec.hit_count == 0


@pytest.mark.parametrize("text", ["not json", "[1, 2]", ""])
def test_deserialize_invalid(text):
    with pytest.raises(RecordDecodeError):
        deserialize_record(text)


def test_record_map_key():
    assert record_map_key("ws", "m") == "ws:m"