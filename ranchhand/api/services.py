"""
RanchHand — Service Wiring

Builds the object graph once per app: one store, one profile store, one
backend client, and the pipelines composed over them. Everything is
injected so tests can swap any piece.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ranchhand.answering.answering_agent import AnsweringAgent
from ranchhand.answering.citation_manager import CitationManager
from ranchhand.answering.prompt_builder import PromptBuilder
from ranchhand.config.profiles import ProfileStore
from ranchhand.core.backend.oai_client import OpenAICompatibleClient
from ranchhand.core.vector.embedder import VectorEmbedder
from ranchhand.core.vector.store import MemoryStore, VectorStore
from ranchhand.pipelines.ingestion_pipeline import IngestionPipeline
from ranchhand.retriever.vector_retriever import VectorRetriever


@dataclass
class Services:
    settings: Dict[str, Any]
    store: VectorStore
    profiles: ProfileStore
    client: OpenAICompatibleClient
    retriever: VectorRetriever
    ingestion: IngestionPipeline
    agent: AnsweringAgent

    @property
    def timeout_seconds(self) -> float:
        return self.client.timeout


def build_services(
    settings: Dict[str, Any],
    store: Optional[VectorStore] = None,
    profiles: Optional[ProfileStore] = None,
    client: Optional[OpenAICompatibleClient] = None
) -> Services:

    backend_cfg = settings.get("backend", {})
    answering_cfg = settings.get("answering", {})
    chunking_cfg = settings.get("chunking", {})

    store = store if store is not None else MemoryStore()
    profiles = profiles or ProfileStore(settings.get("profiles", {}).get("path"))
    client = client or OpenAICompatibleClient(
        base_url=backend_cfg.get("base_url"),
        api_key=backend_cfg.get("api_key", ""),
        default_model=backend_cfg.get("default_model"),
        timeout_seconds=backend_cfg.get("timeout_seconds", 60)
    )

    embedder = VectorEmbedder(client, profiles)
    retriever = VectorRetriever(embedder, store)

    ingestion = IngestionPipeline(
        embedder,
        store,
        profiles,
        min_words=chunking_cfg.get("min_words", 64),
        max_words=chunking_cfg.get("max_words", 4096)
    )

    agent = AnsweringAgent(
        retriever,
        client,
        profiles,
        prompt_builder=PromptBuilder(answering_cfg.get("context_chars_per_source", 800)),
        citation_manager=CitationManager(answering_cfg.get("snippet_chars", 240))
    )

    return Services(
        settings=settings,
        store=store,
        profiles=profiles,
        client=client,
        retriever=retriever,
        ingestion=ingestion,
        agent=agent
    )
