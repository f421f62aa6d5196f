"""Handling of JSON-RPC 2.0 and MCP requests posted to the daemon."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pgmem.mcp_protocol import (
    TOOL_PREFIX,
    initialize_result_json,
    json_rpc_error,
    json_rpc_id_literal,
    json_rpc_result,
    tool_call_result_json,
    tools_list_result_json,
)
from pgmem.normalize import normalize_result_json

INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


@dataclass
class RpcResponse:
    status_code: int
    body: str = ""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _child_json(out: Any, key: str) -> str:
    if isinstance(out, dict) and key in out:
        return _dumps(out[key])
    return "{}"


def _int_or(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return fallback
    return fallback


def _ok(body: str) -> RpcResponse:
    return RpcResponse(200, body)


def _handle_tool_call(doc: dict, id_literal: str, dispatcher) -> RpcResponse:
    params = doc.get("params")
    if not isinstance(params, dict):
        return _ok(json_rpc_error(id_literal, INVALID_PARAMS, "invalid params: params object is required"))
    tool_name = params.get("name")
    if not isinstance(tool_name, str):
        return _ok(json_rpc_error(id_literal, INVALID_PARAMS, "invalid params: tool name is required"))
    if not tool_name.startswith(TOOL_PREFIX):
        return _ok(json_rpc_error(id_literal, METHOD_NOT_FOUND, "tool not found"))

    request: dict[str, Any] = {"id": "tool-call", "method": tool_name}
    if "arguments" in params:
        arguments = params["arguments"]
        if not isinstance(arguments, dict):
            return _ok(json_rpc_error(id_literal, INVALID_PARAMS, "invalid params: arguments must be object"))
        request["params"] = arguments

    out = dispatcher.handle(request)
    has_error = isinstance(out, dict) and "error" in out
    text = _child_json(out, "error" if has_error else "result")
    return _ok(json_rpc_result(id_literal, tool_call_result_json(text, has_error)))


def _handle_direct_call(doc: dict, method: str, id_literal: str, dispatcher) -> RpcResponse:
    request: dict[str, Any] = {"id": "jsonrpc-call", "method": method}
    if "params" in doc:
        params = doc["params"]
        if not isinstance(params, dict):
            return _ok(json_rpc_error(id_literal, INVALID_PARAMS, "invalid params: params must be object"))
        request["params"] = params

    out = dispatcher.handle(request)
    if isinstance(out, dict) and "error" in out:
        error = out["error"] if isinstance(out["error"], dict) else {}
        code = _int_or(error.get("code"), INTERNAL_ERROR)
        message = error.get("message")
        if not isinstance(message, str):
            message = "internal error"
        return _ok(json_rpc_error(id_literal, code, message))

    result = normalize_result_json(_child_json(out, "result"), method)
    return _ok(json_rpc_result(id_literal, result))


def handle_mcp_jsonrpc(body: str, dispatcher) -> RpcResponse | None:
    """Answer a JSON-RPC request; None when the body is a JSON object without "jsonrpc"."""
    try:
        doc = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, TypeError):
        doc = None
    if not isinstance(doc, dict):
        return RpcResponse(400, '{"error":"invalid JSON"}')

    if "jsonrpc" not in doc:
        return None

    id_literal = json_rpc_id_literal(doc)
    if doc["jsonrpc"] != "2.0":
        return _ok(json_rpc_error(id_literal, INVALID_REQUEST, "invalid request: jsonrpc must be 2.0"))

    method = doc.get("method")
    if not isinstance(method, str):
        return _ok(json_rpc_error(id_literal, INVALID_REQUEST, "invalid request: method must be string"))

    if method == "notifications/initialized":
        return RpcResponse(204, "")
    if method == "initialize":
        return _ok(json_rpc_result(id_literal, initialize_result_json()))
    if method == "ping":
        return _ok(json_rpc_result(id_literal, "{}"))
    if method == "tools/list":
        result = normalize_result_json(tools_list_result_json(dispatcher), "tools.list")
        return _ok(json_rpc_result(id_literal, result))
    if method == "tools/call":
        return _handle_tool_call(doc, id_literal, dispatcher)
    if method.startswith(TOOL_PREFIX) or method == "store.compact":
        return _handle_direct_call(doc, method, id_literal, dispatcher)

    return _ok(json_rpc_error(id_literal, METHOD_NOT_FOUND, "method not found"))