"""JSON-RPC and MCP message fragments produced by the daemon."""

from __future__ import annotations

import json
from typing import Any

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "poorguy-mem"
SERVER_VERSION = "2.0.0"
TOOL_PREFIX = "memory."

_INT64_MIN = -(2**63)
_UINT64_MAX = 2**64 - 1

_ESCAPE_TABLE = {code: f"\\u{code:04x}" for code in range(0x20)}
_ESCAPE_TABLE.update(
    {
        ord('"'): '\\"',
        ord("\\"): "\\\\",
        ord("\b"): "\\b",
        ord("\f"): "\\f",
        ord("\n"): "\\n",
        ord("\r"): "\\r",
        ord("\t"): "\\t",
    }
)


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def json_quote(text: str) -> str:
    """Quote text as a JSON string, escaping only quotes, backslashes and control characters."""
    return '"' + text.translate(_ESCAPE_TABLE) + '"'


def json_rpc_id_literal(request: Any) -> str:
    """JSON text of a request's id; "null" when it is absent or not a scalar."""
    if not isinstance(request, dict):
        return "null"
    value = request.get("id")
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        if _INT64_MIN <= value <= _UINT64_MAX:
            return str(value)
        return format(float(value), "g")
    if isinstance(value, float):
        return format(value, "g")
    if isinstance(value, str):
        return json_quote(value)
    return "null"


def json_rpc_error(id_literal: str, code: int, message: str) -> str:
    """JSON-RPC 2.0 error envelope."""
    return (
        f'{{"jsonrpc":"2.0","id":{id_literal},"error":{{"code":{code},'
        f'"message":{json_quote(message)}}}}}'
    )


def json_rpc_result(id_literal: str, result_json: str) -> str:
    """JSON-RPC 2.0 result envelope around an already encoded result."""
    return f'{{"jsonrpc":"2.0","id":{id_literal},"result":{result_json}}}'


def initialize_result_json() -> str:
    """Result of the MCP initialize handshake."""
    return _dumps(
        {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            "instructions": (
                "Use tools memory.write/query/pin/stats/compact. "
                "Call memory.describe for full schema."
            ),
        }
    )


def tools_list_result_json(dispatcher) -> str:
    """MCP tools/list result built from the dispatcher's describe document."""
    if dispatcher is None:
        return '{"tools":[]}'

    describe = dispatcher.describe()
    method_names = describe.get("method_names") if isinstance(describe, dict) else None
    methods = describe.get("methods") if isinstance(describe, dict) else None

    tools = []
    if isinstance(method_names, list) and isinstance(methods, dict):
        for name in method_names:
            if not isinstance(name, str) or not name.startswith(TOOL_PREFIX):
                continue
            spec = methods.get(name)
            if not isinstance(spec, dict):
                continue
            summary = spec.get("summary", "")
            schema = spec.get("input_schema")
            tools.append(
                {
                    "name": name,
                    "description": summary if isinstance(summary, str) else str(summary),
                    "inputSchema": schema if schema is not None else {"type": "object"},
                }
            )
    return _dumps({"tools": tools})


def tool_call_result_json(text: str, is_error: bool) -> str:
    """MCP tools/call result wrapping text content."""
    flag = "true" if is_error else "false"
    return f'{{"content":[{{"type":"text","text":{json_quote(text)}}}],"isError":{flag}}}'