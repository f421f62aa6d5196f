"""Text analysis: tokenization, token estimates and a stable string hash."""

from __future__ import annotations

import re

_TOKEN_RE = re.compile(r"[^\W_]+")

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def tokenize(text: str) -> list[str]:
    """Split text into lower-cased alphanumeric tokens, in order of appearance."""
    return _TOKEN_RE.findall(text.lower())


def estimate_token_count(text: str) -> int:
    """Rough token estimate of text: about four characters per token."""
    if not text:
        return 0
    return max(1, (len(text) + 3) // 4)


def stable_hash(text: str) -> int:
    """64-bit FNV-1a hash of the UTF-8 bytes of text; identical across runs."""
    value = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK64
    return value


class DefaultAnalyzer:
    """Analyzer that uses the package tokenizer."""

    def tokenize(self, text: str) -> list[str]:
        return tokenize(text)