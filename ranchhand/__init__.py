"""
RanchHand — local retrieval-augmented-generation gateway.

Chunk text, embed it through an OpenAI-compatible backend, keep the
vectors in a namespaced in-memory index, and answer questions with
citations back to the retrieved chunks.
"""

__version__ = "0.1.0"
