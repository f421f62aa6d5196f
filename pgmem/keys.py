"""Storage key layout for memory documents, postings, vectors and events."""

from __future__ import annotations

from pgmem.analyzer import stable_hash

_PREFIX = "ws/"
_DOC_MARKER = "/doc/"
_EVENT_MARKER = "/ts/"
_POSTING_BUCKETS = 16


def zero_pad(value: int) -> str:
    """Render a non-negative integer as 20 zero-padded digits."""
    return f"{value:020d}"


def build_doc_key(workspace_id: str, memory_id: str) -> str:
    return f"ws/{workspace_id}/doc/{memory_id}"


def build_term_dict_key(workspace_id: str, term: str) -> str:
    return f"ws/{workspace_id}/term/{term}"


def build_posting_key(workspace_id: str, term: str, bucket: int, memory_id: str) -> str:
    return f"ws/{workspace_id}/term/{term}/b/{bucket}/blk/{memory_id}"


def build_vec_code_key(workspace_id: str, bucket: int, memory_id: str) -> str:
    return f"ws/{workspace_id}/vec/{bucket}/{memory_id}"


def build_vec_fp_key(workspace_id: str, memory_id: str) -> str:
    return f"ws/{workspace_id}/vecfp/{memory_id}"


def build_event_key(workspace_id: str, ts: int, seq: int) -> str:
    return f"ws/{workspace_id}/ts/{zero_pad(ts)}/seq/{zero_pad(seq)}"


def build_workspace_key(workspace_id: str) -> str:
    """Key of per-workspace singletons such as route metadata and checkpoints."""
    return f"ws/{workspace_id}"


def _workspace_before(key: str, marker: str) -> str:
    if not key.startswith(_PREFIX):
        return ""
    pos = key.find(marker)
    if pos <= len(_PREFIX):
        return ""
    return key[len(_PREFIX):pos]


def workspace_from_doc_key(doc_key: str) -> str:
    return _workspace_before(doc_key, _DOC_MARKER)


def memory_id_from_doc_key(doc_key: str) -> str:
    pos = doc_key.find(_DOC_MARKER)
    if pos < 0 or pos + len(_DOC_MARKER) >= len(doc_key):
        return ""
    return doc_key[pos + len(_DOC_MARKER):]


def workspace_from_event_key(event_key: str) -> str:
    return _workspace_before(event_key, _EVENT_MARKER)


def posting_bucket(workspace_id: str, term: str) -> int:
    return stable_hash(f"{workspace_id}:{term}") % _POSTING_BUCKETS