"""
RanchHand — Vector Retriever

Query path: embed query → store.query. Read-only over the store.
"""

import time
from typing import List

from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger
from ranchhand.core.vector.embedder import VectorEmbedder
from ranchhand.core.vector.store import QueryResult, VectorStore
from ranchhand.retriever.base_retriever import BaseRetriever


# =====================================================
# LOGGER SETUP
# =====================================================

logger = get_component_logger("VectorRetriever", component="retrieval")


class VectorRetriever(BaseRetriever):

    def __init__(self, embedder: VectorEmbedder, store: VectorStore):
        self.embedder = embedder
        self.store = store

    def _retrieve_internal(
        self,
        namespace: str,
        query: str,
        top_k: int,
        include_text: bool,
        ctx: CallContext
    ) -> List[QueryResult]:

        start = time.monotonic()

        # Embed query (EmbedFailed / Timeout propagate)
        query_vector = self.embedder.embed_one(query, ctx=ctx)
        embed_time = time.monotonic() - start

        results = self.store.query(
            namespace,
            query_vector,
            top_k=top_k,
            include_text=include_text
        )

        logger.info(
            "Vector search done | embed=%.3fs total=%.3fs",
            embed_time,
            time.monotonic() - start
        )

        return results
