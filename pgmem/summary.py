"""Rolling conversation summary kept within a token budget."""

from __future__ import annotations

from typing import Sequence

from pgmem.analyzer import estimate_token_count

_MIN_KEEP_CHARS = 64


class SummaryEngine:
    """Appends the latest turn to a summary and trims the oldest lines."""

    def update(
        self,
        existing_summary: str,
        user_text: str,
        assistant_text: str,
        code_snippets: Sequence[str],
        commands: Sequence[str],
        max_tokens: int,
    ) -> str:
        parts = []
        if existing_summary:
            parts.append(f"{existing_summary}\n")
        parts.append(f"User: {user_text.strip()}\n")
        parts.append(f"Assistant: {assistant_text.strip()}\n")
        if code_snippets:
            parts.append(f"Code: {code_snippets[-1].strip()}\n")
        if commands:
            parts.append(f"Cmd: {commands[-1].strip()}\n")
        out = "".join(parts)

        while estimate_token_count(out) > max_tokens and len(out) > _MIN_KEEP_CHARS:
            newline = out.find("\n")
            if newline < 0:
                break
            out = out[newline + 1:]
        return out