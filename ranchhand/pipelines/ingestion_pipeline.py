"""
RanchHand — Ingestion Pipeline

Flow:
items
   ↓
chunk_items (profile chunk size, clamped)
   ↓
VectorEmbedder.embed (one batch call)
   ↓
MemoryStore.upsert_many

Nothing reaches the store unless every stage before it succeeded.
"""

import time
from typing import Any, Dict, Mapping, Optional, Sequence

from ranchhand.config.profiles import ProfileStore
from ranchhand.core.chunking.chunker import (
    DEFAULT_MAX_WORDS,
    DEFAULT_MIN_WORDS,
    chunk_items,
    clamp_chunk_words,
)
from ranchhand.core.errors import BadRequest
from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger
from ranchhand.core.vector.embedder import VectorEmbedder
from ranchhand.core.vector.store import VectorStore


logger = get_component_logger("IngestionPipeline", component="ingestion")


class IngestionPipeline:

    def __init__(
        self,
        embedder: VectorEmbedder,
        store: VectorStore,
        profiles: ProfileStore,
        min_words: int = DEFAULT_MIN_WORDS,
        max_words: int = DEFAULT_MAX_WORDS
    ):
        self.embedder = embedder
        self.store = store
        self.profiles = profiles
        self.min_words = min_words
        self.max_words = max_words

    # =====================================================
    # CHUNK SIZE
    # =====================================================

    def resolve_chunking(self, chunk_words: Optional[int] = None):

        profile = self.profiles.current()

        if chunk_words is None:
            chunk_words = profile.get("chunking", "chunk_tokens", self.min_words)

        words = clamp_chunk_words(chunk_words, self.min_words, self.max_words)

        try:
            overlap = int(profile.get("chunking", "overlap_tokens", 0))
        except (TypeError, ValueError):
            overlap = 0

        return words, max(0, min(overlap, words - 1))

    # =====================================================
    # RUN
    # =====================================================

    def ingest(
        self,
        namespace: str,
        items: Sequence[Mapping],
        chunk_words: Optional[int] = None,
        source: str = "api",
        ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:

        namespace = namespace.strip() if isinstance(namespace, str) else ""
        if not namespace:
            raise BadRequest("namespace required", stage="ingest")

        if not items or not isinstance(items, (list, tuple)):
            raise BadRequest("items must be a non-empty list", stage="ingest")

        if not all(isinstance(item, Mapping) for item in items):
            raise BadRequest("every item must be an object", stage="ingest")

        ctx = ctx or CallContext()
        start = time.monotonic()

        # -----------------------------------------
        # STEP 1 — Chunk
        # -----------------------------------------

        words, overlap = self.resolve_chunking(chunk_words)
        chunks = chunk_items(
            items,
            words,
            namespace=namespace,
            source=source,
            overlap_words=overlap
        )

        logger.info(
            "Ingest %r | items=%d chunk_words=%d overlap=%d chunks=%d",
            namespace, len(items), words, overlap, len(chunks)
        )

        if not chunks:
            return {"chunkCount": 0, "embeddedCount": 0}

        # -----------------------------------------
        # STEP 2 — Embed (single batch)
        # -----------------------------------------

        embeddings = self.embedder.embed([c.text for c in chunks], ctx=ctx)
        ctx.check(stage="ingest")

        # -----------------------------------------
        # STEP 3 — Zip (missing embedding → empty vector)
        # -----------------------------------------

        records = []
        embedded = 0

        for i, chunk in enumerate(chunks):
            vector = embeddings[i] if i < len(embeddings) else []
            if vector:
                embedded += 1
            records.append({
                "id": chunk.id,
                "vector": vector,
                "text": chunk.text,
                "metadata": chunk.metadata
            })

        if embedded < len(chunks):
            logger.warning(
                "Backend returned %d embeddings for %d chunks; missing ones are stored empty",
                embedded, len(chunks)
            )

        # -----------------------------------------
        # STEP 4 — Upsert
        # -----------------------------------------

        self.store.upsert_many(namespace, records)

        logger.info(
            "Ingest %r completed in %.3fs (embedded=%d)",
            namespace, time.monotonic() - start, embedded
        )

        return {"chunkCount": len(chunks), "embeddedCount": embedded}
