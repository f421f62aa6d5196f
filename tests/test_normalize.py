import json

import pytest

from pgmem.normalize import (
    normalize_describe_node,
    normalize_response_json,
    normalize_result_by_method,
    normalize_result_json,
)


def test_write_result_fields():
    raw = '{"ok":"true","index_generation":"7","stored_ids":"m-1","deduped_ids":"","warnings":["w"]}'
    out = json.loads(normalize_result_json(raw, "memory.write"))
    assert out == {
        "ok": True,
        "index_generation": 7,
        "stored_ids": ["m-1"],
        "deduped_ids": [],
        "warnings": ["w"],
    }


def test_output_is_compact():
    out = normalize_result_json('{ "ok" : "1" }', "memory.pin")
    assert out == '{"ok":true}'


def test_invalid_json_is_returned_unchanged():
    assert normalize_result_json("not json", "memory.write") == "not json"
    assert normalize_result_json("[1,2]", "memory.write") == "[1,2]"
    assert normalize_response_json("{broken", "memory.write") == "{broken"


def test_query_hits_are_coerced():
    raw = json.dumps(
        {
            "hits": [
                {
                    "tags": "",
                    "metadata": "",
                    "updated_at_ms": "12",
                    "pinned": "false",
                    "scores": {"sparse": "0.5", "final": "x"},
                }
            ],
            "debug_stats": {"dense_candidates": "3", "latency_ms": {"total": "1.25"}},
        }
    )
    out = json.loads(normalize_result_json(raw, "memory.query"))
    hit = out["hits"][0]
    assert hit["tags"] == []
    assert hit["metadata"] == {}
    assert hit["updated_at_ms"] == 12
    assert hit["pinned"] is False
    assert hit["scores"] == {"sparse": 0.5, "final": "x"}
    assert out["debug_stats"]["dense_candidates"] == 3
    assert out["debug_stats"]["latency_ms"]["total"] == 1.25


def test_empty_hits_string_becomes_list():
    assert json.loads(normalize_result_json('{"hits":""}', "memory.query")) == {"hits": []}


def test_integer_parse_rejects_fraction():
    out = json.loads(normalize_result_json('{"item_count":"1.5"}', "memory.stats"))
    assert out["item_count"] == "1.5"


def test_stats_fields():
    result = {
        "p95_read_ms": "2.5",
        "item_count": "4",
        "capacity_blocked": "FALSE",
        "index_stats": {"vector_count": "4", "query_cache_hit_rate": "0.25"},
    }
    normalize_result_by_method(result, "memory.stats")
    assert result["p95_read_ms"] == 2.5
    assert result["item_count"] == 4
    assert result["capacity_blocked"] is False
    assert result["index_stats"] == {"vector_count": 4, "query_cache_hit_rate": 0.25}


def test_store_compact_fields():
    result = {"triggered": "true", "async": "0", "partition_count": "8"}
    normalize_result_by_method(result, "store.compact")
    assert result == {"triggered": True, "async": False, "partition_count": 8}


def test_unknown_method_leaves_values():
    result = {"ok": "true"}
    assert normalize_result_by_method(result, "memory.unknown") == {"ok": "true"}


def test_describe_node_schema_defaults():
    node = {
        "generated_at_ms": "100",
        "methods": {
            "memory.query": {
                "input_schema": {
                    "additionalProperties": "false",
                    "properties": {
                        "top_k": {"type": "integer", "default": "8"},
                        "pinned_only": {"type": "boolean", "default": "false"},
                        "weight": {"type": "number", "default": "0.55"},
                    },
                }
            }
        },
        "sync_routes_available": "true",
    }
    normalize_describe_node(node)
    schema = node["methods"]["memory.query"]["input_schema"]
    assert node["generated_at_ms"] == 100
    assert node["sync_routes_available"] is True
    assert schema["additionalProperties"] is False
    assert schema["properties"]["top_k"]["default"] == 8
    assert schema["properties"]["pinned_only"]["default"] is False
    assert schema["properties"]["weight"]["default"] == 0.55


def test_describe_node_walks_arrays():
    node = [{"code": "-32601"}, {"status": "200"}]
    assert normalize_describe_node(node) == [{"code": -32601}, {"status": 200}]


def test_tools_list_uses_describe_rules():
    raw = '{"tools":[{"inputSchema":{"type":"object","additionalProperties":"true"}}]}'
    out = json.loads(normalize_result_json(raw, "tools.list"))
    assert out["tools"][0]["inputSchema"]["additionalProperties"] is True


def test_response_envelope_id_and_error_code():
    raw = '{"id":"3","error":{"code":"-32601","message":"method not found"}}'
    out = json.loads(normalize_response_json(raw, "memory.write"))
    assert out == {"id": 3, "error": {"code": -32601, "message": "method not found"}}


def test_response_envelope_result():
    raw = '{"id":"req-1","result":{"ok":"true"}}'
    out = json.loads(normalize_response_json(raw, "memory.pin"))
    assert out == {"id": "req-1", "result": {"ok": True}}


@pytest.mark.parametrize("text", ["nan", "inf", "1_0", "1.0 "])
def test_float_parse_rejects_odd_literals(text):
    out = json.loads(normalize_result_json(json.dumps({"fallback_rate": text}), "memory.stats"))
    assert out["fallback_rate"] == text