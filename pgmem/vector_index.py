"""In-memory vector index with a coarse sign-bit bucket bonus."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Sequence

_SAME_BUCKET_BONUS = 0.05
_FLOAT_BYTES = 4
_ENTRY_OVERHEAD = 8 + 64


@dataclass
class VectorSearchRequest:
    workspace_id: str
    query: list[float] = field(default_factory=list)
    top_k: int = 0


@dataclass(frozen=True)
class VectorSearchResult:
    memory_id: str
    score: float


def bucket_for_vector(vector: Sequence[float]) -> int:
    """Bitmask of the positive components among the first 64."""
    bucket = 0
    for i, value in enumerate(vector[:64]):
        if value > 0.0:
            bucket |= 1 << i
    return bucket


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product of two equal-length vectors (assumed normalised); 0.0 otherwise."""
    if len(a) != len(b) or not a:
        return 0.0
    return sum(x * y for x, y in zip(a, b))


@dataclass
class _Entry:
    vector: list[float]
    bucket: int


class LshVectorIndex:
    """Per-workspace vector store searched by exhaustive cosine scoring."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._workspaces: dict[str, dict[str, _Entry]] = {}

    def upsert(self, workspace_id: str, memory_id: str, vector: Sequence[float]) -> None:
        entry = _Entry(list(vector), bucket_for_vector(vector))
        with self._lock:
            self._workspaces.setdefault(workspace_id, {})[memory_id] = entry

    def remove(self, workspace_id: str, memory_id: str) -> None:
        with self._lock:
            docs = self._workspaces.get(workspace_id)
            if docs is None:
                return
            docs.pop(memory_id, None)
            if not docs:
                del self._workspaces[workspace_id]

    def search(self, request: VectorSearchRequest) -> list[VectorSearchResult]:
        with self._lock:
            docs = self._workspaces.get(request.workspace_id)
            if docs is None or not request.query:
                return []
            items = list(docs.items())

        query_bucket = bucket_for_vector(request.query)
        results = []
        for memory_id, entry in items:
            score = cosine(request.query, entry.vector)
            if entry.bucket == query_bucket:
                score += _SAME_BUCKET_BONUS
            results.append(VectorSearchResult(memory_id, score))

        results.sort(key=lambda r: (-r.score, r.memory_id))
        if request.top_k > 0:
            del results[request.top_k:]
        return results

    def estimated_bytes(self, workspace_id: str = "") -> int:
        """Approximate memory used by one workspace, or all when workspace_id is empty."""
        total = 0
        with self._lock:
            for ws, docs in self._workspaces.items():
                if workspace_id and ws != workspace_id:
                    continue
                for memory_id, entry in docs.items():
                    total += len(memory_id.encode("utf-8"))
                    total += len(entry.vector) * _FLOAT_BYTES
                    total += _ENTRY_OVERHEAD
        return total