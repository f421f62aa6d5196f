# pgmem

`pgmem` holds the building blocks of a per-workspace memory store for coding
assistants: a tokenizer, an in-memory vector index, the storage key layout,
the JSON record format, eviction and pin-governance rules, latency metrics, a
rolling conversation summary, and the handling of MCP JSON-RPC requests. It
has no third-party runtime dependencies.

## Modules

- `pgmem.analyzer` – `tokenize(text)` (lower-cased alphanumeric tokens),
  `estimate_token_count(text)` (about four characters per token),
  `stable_hash(text)` (64-bit FNV-1a of the UTF-8 bytes) and
  `DefaultAnalyzer`.
- `pgmem.vector_index` – `LshVectorIndex` with `upsert`, `remove`, `search`
  and `estimated_bytes`; `search` takes a `VectorSearchRequest` and returns
  `VectorSearchResult`s ranked by dot product, with a 0.05 bonus for vectors
  whose first 64 sign bits match the query's (`bucket_for_vector`). Ties are
  broken by memory id; `top_k` of 0 returns everything.
- `pgmem.keys` – storage keys such as `build_doc_key`, `build_posting_key`,
  `build_event_key` (20-digit zero-padded timestamp and sequence), the
  reverse parsers `workspace_from_doc_key`, `memory_id_from_doc_key`,
  `workspace_from_event_key`, and `posting_bucket` (one of 16).
- `pgmem.records` – the `MemoryRecord` dataclass, `serialize_record` /
  `deserialize_record` (compact JSON; lenient about field types, raising
  `RecordDecodeError` for text that is not a JSON object),
  `compute_record_size_bytes` and `record_map_key`.
- `pgmem.eviction` – `eviction_rank`, `is_incoming_newer` (update time, then
  version, then node id), `is_expired` (TTL), `compute_workspace_pin_stats`,
  `pinned_ratio` and `is_pin_blocked_by_ratio`.
- `pgmem.metrics` – `Metrics`, a thread-safe collector of read/write latency
  histograms, token reduction and fallback counts, summarised by
  `snapshot()` into a `StatsSnapshot` (with an `IndexStats` part).
- `pgmem.summary` – `SummaryEngine.update`, which appends the latest turn
  and drops the oldest lines while the summary is over its token budget.
- `pgmem.normalize` – coerces string-typed fields in results to booleans,
  integers and numbers per method (`normalize_result_by_method`,
  `normalize_result_json`, `normalize_response_json`,
  `normalize_describe_node`).
- `pgmem.mcp_protocol` – JSON-RPC envelopes and MCP fragments
  (`json_rpc_error`, `json_rpc_result`, `initialize_result_json`,
  `tools_list_result_json`, `tool_call_result_json`, `json_quote`,
  `json_rpc_id_literal`).
- `pgmem.jsonrpc` – `handle_mcp_jsonrpc(body, dispatcher)`, returning an
  `RpcResponse` with a status code and body.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

Tokens and vector search:

```python
from pgmem.analyzer import tokenize
from pgmem.vector_index import LshVectorIndex, VectorSearchRequest

print(tokenize("Fix the flaky retry loop"))  # ['fix', 'the', 'flaky', 'retry', 'loop']

index = LshVectorIndex()
index.upsert("ws1", "m1", [0.6, 0.8, 0.0])
index.upsert("ws1", "m2", [0.0, 0.0, 1.0])

for result in index.search(VectorSearchRequest("ws1", [0.6, 0.8, 0.0], top_k=1)):
    print(result.memory_id, result.score)  # m1, about 1.05
```

Records and keys:

```python
from pgmem.keys import build_doc_key
from pgmem.records import MemoryRecord, deserialize_record, serialize_record

record = MemoryRecord(id="m1", workspace_id="ws1", content="use pytest -k")
assert deserialize_record(serialize_record(record)).content == "use pytest -k"
print(build_doc_key("ws1", "m1"))  # ws/ws1/doc/m1
```

A rolling summary:

```python
from pgmem.summary import SummaryEngine

summary = SummaryEngine().update(
    "",
    "How do I rerun the failing test?",
    "Use pytest with -k and the test name.",
    [],
    ["pytest -k test_retry"],
    256,
)
print(summary)
```

JSON-RPC handling:

```python
from pgmem.jsonrpc import handle_mcp_jsonrpc

resp = handle_mcp_jsonrpc('{"jsonrpc":"2.0","id":1,"method":"ping"}', None)
print(resp.status_code, resp.body)  # 200 {"jsonrpc":"2.0","id":1,"result":{}}
```

A body that is not a JSON object gives status 400; a JSON object without a
`jsonrpc` member gives `None`. `initialize`, `ping`, and `tools/list` with a
`None` dispatcher are answered directly; `tools/call`, `memory.*` and
`store.compact` are passed to the dispatcher, an object with `describe()` and
`handle(request)` methods that return plain dicts.

## What this package does not do

- It provides no dispatcher, memory engine, storage backend, embedding
  provider or hybrid retriever; `handle_mcp_jsonrpc` needs a dispatcher
  supplied by the caller for any `memory.*` call.
- It runs no HTTP server or daemon and installs no service; it has no
  command-line programs.
- Nothing is persisted: the vector index and metrics live in memory only.