"""
RanchHand — Retrieval Module

    from ranchhand.retriever import VectorRetriever

    retriever = VectorRetriever(embedder, store)
    results = retriever.retrieve("docs", "what is a fox?", top_k=5)
"""

from .base_retriever import BaseRetriever, validate_top_k
from .vector_retriever import VectorRetriever


__all__ = ["BaseRetriever", "VectorRetriever", "validate_top_k"]
