"""Splitting notifications to fit Discord's message length limit."""

from __future__ import annotations

DISCORD_MESSAGE_LIMIT = 2000
DISCORD_THREAD_NAME_LIMIT = 100

# Coarsest boundary first: paragraph -> line -> word
_SEPARATORS = ("\n\n", "\n", " ")


def chunk_message(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> list[str]:
    """Split text into chunks of at most ``limit`` characters.

    Splits on the coarsest boundary that works; a single word longer than the
    limit is cut hard.
    """
    if limit < 1:
        raise ValueError("limit must be positive")
    if len(text) <= limit:
        return [text]
    return [c for c in _split(text, limit, _SEPARATORS) if c.strip()] or [text[:limit]]


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def _split(text: str, limit: int, separators: tuple[str, ...]) -> list[str]:
    if len(text) <= limit:
        return [text]
    if not separators:
        return [text[i : i + limit] for i in range(0, len(text), limit)]

    sep, finer = separators[0], separators[1:]
    parts = text.split(sep)
    if len(parts) == 1:
        return _split(text, limit, finer)

    chunks: list[str] = []
    current = ""
    for part in parts:
        candidate = f"{current}{sep}{part}" if current else part
        if len(candidate) <= limit:
            current = candidate
            continue
        if current:
            chunks.append(current)
            current = ""
        if len(part) <= limit:
            current = part
        else:
            sub = _split(part, limit, finer)
            chunks.extend(sub[:-1])
            current = sub[-1] if sub else ""
    if current:
        chunks.append(current)
    return chunks
