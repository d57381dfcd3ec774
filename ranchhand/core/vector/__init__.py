"""
RanchHand — Vector Module

Components:
    - VectorEmbedder → Embeddings through the backend (profile-driven model)
    - VectorStore    → Two-operation store contract (upsert_many, query)
    - MemoryStore    → Exact, in-memory, per-namespace brute-force store

Example Usage:

    from ranchhand.core.vector import MemoryStore

    store = MemoryStore()
    store.upsert_many("docs", [{"id": "a", "vector": [1, 0], "text": "hi"}])
    store.query("docs", [1, 0], top_k=1)
"""

from .embedder import VectorEmbedder
from .store import (
    MemoryStore,
    QueryResult,
    Record,
    VectorStore,
    cosine_similarity,
)


__all__ = [
    "VectorEmbedder",
    "MemoryStore",
    "QueryResult",
    "Record",
    "VectorStore",
    "cosine_similarity",
]
