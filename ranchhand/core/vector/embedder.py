"""
RanchHand — Vector Embedder

Responsibilities:
- Resolve the embedding model from the current profile (embed.model)
- Batch embedding in a single backend round trip
- Translate backend failures into EmbedFailed / Timeout (stage="embed")
- Discard results that arrive after the caller cancelled

No retries: a failure aborts the calling pipeline.
"""

from typing import List, Optional, Sequence, Union

from ranchhand.config.profiles import ProfileStore
from ranchhand.core.backend.oai_client import OpenAICompatibleClient
from ranchhand.core.errors import BackendError, BackendTimeout, EmbedFailed
from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("VectorEmbedder", component="ingestion")


class VectorEmbedder:
    """
    Generates embeddings through the OpenAI-compatible /embeddings route.
    """

    def __init__(self, client: OpenAICompatibleClient, profiles: ProfileStore):
        self.client = client
        self.profiles = profiles

    @property
    def model_name(self) -> str:
        return self.profiles.current().get("embed", "model", self.client.default_model)

    # -------------------------------------------------
    # Batch Embedding
    # -------------------------------------------------

    def embed(
        self,
        texts: Union[str, Sequence[str]],
        ctx: Optional[CallContext] = None
    ) -> List[List[float]]:
        """
        One embedding per input, in input order. The backend may return
        fewer; callers decide what a missing position means.
        """

        if isinstance(texts, str):
            texts = [texts]
        texts = list(texts)

        if not texts:
            return []

        model = self.model_name
        logger.info("Embedding %d text(s) with %s", len(texts), model)

        if ctx is not None:
            ctx.check(stage="embed")

        try:
            out = self.client.embeddings(texts, model=model, ctx=ctx)
        except BackendTimeout as e:
            logger.error("Embedding timed out: %s", e.detail)
            raise BackendTimeout(e.detail, stage="embed")
        except BackendError as e:
            logger.error("Embedding failed: %s", e.detail)
            raise EmbedFailed(e.detail, stage="embed")

        if ctx is not None:
            ctx.check(stage="embed")

        data = out.get("data") if isinstance(out, dict) else None
        if not isinstance(data, list):
            raise EmbedFailed("embedding response missing 'data'", stage="embed")

        embeddings = []
        for entry in data:
            vector = entry.get("embedding") if isinstance(entry, dict) else None
            embeddings.append(list(vector) if vector else [])

        if embeddings:
            logger.info("Embedding completed (n=%d, dim=%d)", len(embeddings), len(embeddings[0]))

        return embeddings

    # -------------------------------------------------
    # Single Embedding
    # -------------------------------------------------

    def embed_one(self, text: str, ctx: Optional[CallContext] = None) -> List[float]:

        embeddings = self.embed([text], ctx=ctx)

        if not embeddings or not embeddings[0]:
            raise EmbedFailed("backend returned no embedding for query", stage="embed")

        return embeddings[0]
