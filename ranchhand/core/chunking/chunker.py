"""
RanchHand — Word Chunker

Splits raw text items into bounded-size chunks:
- whitespace word split
- greedy packing of chunk_words consecutive words
- optional word overlap between consecutive chunks (0 by default)
- deterministic ids: "{timestamp}:{sequence_index}"

No token awareness. The function is pure: the same items and sizes always
produce the same chunks and ids.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional


DEFAULT_MIN_WORDS = 64
DEFAULT_MAX_WORDS = 4096


@dataclass(frozen=True)
class Chunk:
    namespace: Optional[str]
    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def clamp_chunk_words(
    value: Any,
    min_words: int = DEFAULT_MIN_WORDS,
    max_words: int = DEFAULT_MAX_WORDS
) -> int:
    """
    Clamp a configured chunk size into [min_words, max_words].
    Non-numeric values fall back to min_words.
    """

    try:
        words = int(value)
    except (TypeError, ValueError):
        return min_words

    return max(min_words, min(max_words, words))


def item_timestamp(item: Mapping) -> str:
    ts = item.get("timestamp")
    if ts is None:
        ts = item.get("ts")
    return "" if ts is None else str(ts)


def item_author(item: Mapping) -> Optional[str]:
    for key in ("author", "userName", "userId"):
        if item.get(key):
            return str(item[key])
    return None


def split_words(text: str, chunk_words: int, overlap_words: int = 0) -> List[str]:

    if chunk_words < 1:
        raise ValueError("chunk_words must be >= 1")

    overlap_words = max(0, min(overlap_words, chunk_words - 1))
    step = chunk_words - overlap_words

    words = (text or "").split()
    pieces = []

    for start in range(0, len(words), step):
        piece = " ".join(words[start:start + chunk_words])
        if piece.strip():
            pieces.append(piece)
        if start + chunk_words >= len(words):
            break

    return pieces


def chunk_items(
    items: Iterable[Mapping],
    chunk_words: int,
    namespace: Optional[str] = None,
    source: Optional[str] = None,
    overlap_words: int = 0
) -> List[Chunk]:

    chunks = []

    for item in items:
        text = str(item.get("text") or "")
        timestamp = item_timestamp(item)

        metadata = {
            "source": source,
            "timestamp": timestamp,
            "author": item_author(item)
        }

        for index, piece in enumerate(split_words(text, chunk_words, overlap_words)):
            chunks.append(Chunk(
                namespace=namespace,
                id=f"{timestamp}:{index}",
                text=piece,
                metadata=dict(metadata)
            ))

    return chunks
