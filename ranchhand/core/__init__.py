"""
Core package for RanchHand.

This package contains the low-level retrieval engine:
- Error taxonomy
- Backend client (OpenAI-compatible HTTP)
- Chunking
- Embedding adapter & in-memory vector store
"""
