"""Coercion of string-typed scalar fields in daemon responses to their JSON types."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_C_SPACE = " \t\n\v\f\r"
_INT_RE = re.compile(r"[ \t\n\v\f\r]*[+-]?[0-9]+")

_DESCRIBE_INT_KEYS = frozenset({"generated_at_ms", "code", "status"})


def _parse_bool(text: str) -> bool | None:
    lowered = text.lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    return None


def _parse_int(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def _parse_float(text: str) -> float | None:
    if not text or text[-1] in _C_SPACE or "_" in text:
        return None
    stripped = text.lstrip(_C_SPACE)
    try:
        value = float(stripped)
    except ValueError:
        try:
            value = float.fromhex(stripped)
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    return value


def _coerce(parser: Callable[[str], Any]) -> Callable[[Any], Any]:
    def convert(value: Any) -> Any:
        if not isinstance(value, str):
            return value
        parsed = parser(value)
        return value if parsed is None else parsed

    return convert


_to_bool = _coerce(_parse_bool)
_to_int = _coerce(_parse_int)
_to_float = _coerce(_parse_float)


def _convert(obj: Any, key: str, converter: Callable[[Any], Any]) -> None:
    if isinstance(obj, dict) and key in obj:
        obj[key] = converter(obj[key])


def _convert_all(obj: Any, keys, converter: Callable[[Any], Any]) -> None:
    for key in keys:
        _convert(obj, key, converter)


def _ensure_array(obj: Any, key: str) -> None:
    if not isinstance(obj, dict) or key not in obj:
        return
    value = obj[key]
    if isinstance(value, str):
        obj[key] = [value] if value else []


def _ensure_object(obj: Any, key: str) -> None:
    if isinstance(obj, dict) and obj.get(key) == "":
        obj[key] = {}


def _normalize_schema_default(node: dict) -> None:
    if "default" not in node:
        return
    type_name = node.get("type")
    if type_name == "boolean":
        node["default"] = _to_bool(node["default"])
    elif type_name == "integer":
        node["default"] = _to_int(node["default"])
    elif type_name == "number":
        node["default"] = _to_float(node["default"])


def normalize_describe_node(node: Any) -> Any:
    """Coerce schema flags, defaults and numeric markers throughout a describe tree, in place."""
    if isinstance(node, dict):
        _convert(node, "additionalProperties", _to_bool)
        _normalize_schema_default(node)
        for key in list(node):
            if key in _DESCRIBE_INT_KEYS:
                node[key] = _to_int(node[key])
            elif key == "sync_routes_available":
                node[key] = _to_bool(node[key])
            normalize_describe_node(node[key])
    elif isinstance(node, list):
        for item in node:
            normalize_describe_node(item)
    return node


def _normalize_query_result(result: dict) -> None:
    _ensure_array(result, "hits")
    hits = result.get("hits")
    if isinstance(hits, list):
        for hit in hits:
            if not isinstance(hit, dict):
                continue
            _ensure_array(hit, "tags")
            _ensure_object(hit, "metadata")
            _convert(hit, "updated_at_ms", _to_int)
            _convert(hit, "pinned", _to_bool)
            scores = hit.get("scores")
            if isinstance(scores, dict):
                _convert_all(scores, ("sparse", "dense", "freshness", "pin", "final"), _to_float)

    debug = result.get("debug_stats")
    if isinstance(debug, dict):
        _convert_all(debug, ("sparse_candidates", "dense_candidates", "merged_candidates"), _to_int)
        latency = debug.get("latency_ms")
        if isinstance(latency, dict):
            _convert_all(latency, ("sparse", "dense", "rerank", "total"), _to_float)


def normalize_result_by_method(result: Any, method: str) -> Any:
    """Coerce the fields a method's result is known to carry, in place."""
    if not isinstance(result, dict):
        return result

    if method == "memory.write":
        _convert(result, "ok", _to_bool)
        _convert(result, "index_generation", _to_int)
        for key in ("stored_ids", "deduped_ids", "warnings"):
            _ensure_array(result, key)
    elif method == "memory.query":
        _normalize_query_result(result)
    elif method == "memory.pin":
        _convert(result, "ok", _to_bool)
    elif method == "memory.stats":
        _convert_all(
            result,
            ("p95_read_ms", "p95_write_ms", "token_reduction_ratio", "fallback_rate"),
            _to_float,
        )
        _convert_all(
            result,
            (
                "mem_used_bytes",
                "disk_used_bytes",
                "resident_used_bytes",
                "resident_limit_bytes",
                "resident_evicted_count",
                "disk_fallback_search_count",
                "item_count",
                "tombstone_count",
                "gc_last_run_ms",
                "gc_evicted_count",
            ),
            _to_int,
        )
        _convert(result, "capacity_blocked", _to_bool)
        index_stats = result.get("index_stats")
        if isinstance(index_stats, dict):
            _convert_all(index_stats, ("segment_count", "posting_terms", "vector_count"), _to_int)
            _convert_all(index_stats, ("query_cache_hit_rate", "dense_probe_count_p95"), _to_float)
            _convert(index_stats, "cold_rehydrate_count", _to_int)
    elif method == "memory.compact":
        _convert_all(result, ("triggered", "capacity_blocked"), _to_bool)
        _convert_all(
            result,
            (
                "mem_before_bytes",
                "disk_before_bytes",
                "mem_after_bytes",
                "disk_after_bytes",
                "summarized_count",
                "tombstoned_count",
                "deleted_count",
                "segments_before",
                "segments_after",
                "postings_reclaimed",
                "vectors_reclaimed",
            ),
            _to_int,
        )
    elif method == "store.compact":
        _convert_all(result, ("triggered", "noop", "busy", "async"), _to_bool)
        _convert(result, "partition_count", _to_int)
    elif method in ("memory.describe", "tools.list"):
        normalize_describe_node(result)
    return result


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _load_object(raw_json: str) -> dict | None:
    try:
        doc = json.loads(raw_json, parse_constant=_reject_constant)
    except ValueError:
        return None
    return doc if isinstance(doc, dict) else None


def _dump(doc: Any) -> str:
    return json.dumps(doc, separators=(",", ":"), ensure_ascii=False)


def normalize_result_json(raw_json: str, method: str) -> str:
    """Normalise a bare result object; text that is not a JSON object is returned unchanged."""
    doc = _load_object(raw_json)
    if doc is None:
        return raw_json
    normalize_result_by_method(doc, method)
    return _dump(doc)


def normalize_response_json(raw_json: str, method: str) -> str:
    """Normalise a full response envelope: id, result and error code."""
    doc = _load_object(raw_json)
    if doc is None:
        return raw_json
    _convert(doc, "id", _to_int)
    if "result" in doc:
        normalize_result_by_method(doc["result"], method)
    error = doc.get("error")
    if isinstance(error, dict):
        _convert(error, "code", _to_int)
    return _dump(doc)