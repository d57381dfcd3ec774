"""
RanchHand — Chunking Module

    from ranchhand.core.chunking import chunk_items

    chunks = chunk_items(items, chunk_words=256, namespace="docs")
"""

from .chunker import (
    Chunk,
    chunk_items,
    clamp_chunk_words,
    split_words,
    DEFAULT_MIN_WORDS,
    DEFAULT_MAX_WORDS,
)


__all__ = [
    "Chunk",
    "chunk_items",
    "clamp_chunk_words",
    "split_words",
    "DEFAULT_MIN_WORDS",
    "DEFAULT_MAX_WORDS",
]
