"""Tokenizer, vector index, record format, eviction rules, metrics, summaries and MCP JSON-RPC handling for a local memory store."""

__version__ = "0.1.0"

__all__ = ["__version__"]