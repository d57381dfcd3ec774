"""
RanchHand — Answering Agent

This agent:
- Embeds the question and retrieves the top-k chunks
- Builds a grounded, citation-demanding prompt
- Calls the generation backend once
- Formats the answer and attaches citations

It does NOT:
- Write to the store
- Retry failed backend calls
- Return partial answers (any stage failure aborts)
"""

import time
from typing import Any, Dict, Mapping, Optional

from ranchhand.answering.citation_manager import CitationManager
from ranchhand.answering.prompt_builder import PromptBuilder
from ranchhand.answering.response_formatter import ResponseFormatter
from ranchhand.config.profiles import ProfileStore
from ranchhand.core.backend.oai_client import OpenAICompatibleClient
from ranchhand.core.errors import BackendError, BackendTimeout, BadRequest, GenerateFailed
from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger
from ranchhand.retriever.base_retriever import BaseRetriever


# ============================================================
# LOGGER CONFIG
# ============================================================

logger = get_component_logger("AnsweringAgent", component="answering")


# ============================================================
# BUILT-IN GENERATION DEFAULTS
# ============================================================

DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 256


class AnsweringAgent:

    def __init__(
        self,
        retriever: BaseRetriever,
        client: OpenAICompatibleClient,
        profiles: ProfileStore,
        prompt_builder: Optional[PromptBuilder] = None,
        citation_manager: Optional[CitationManager] = None,
        formatter: Optional[ResponseFormatter] = None
    ):
        self.retriever = retriever
        self.client = client
        self.profiles = profiles
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.citation_manager = citation_manager or CitationManager()
        self.formatter = formatter or ResponseFormatter()

    # ============================================================
    # PARAMETER RESOLUTION
    # ============================================================

    def resolve_params(self, model_params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Per-call override > profile summarize_retrieval > built-in default.
        """

        overrides = dict(model_params or {})
        profile = self.profiles.current().section("summarize_retrieval")

        def pick(key, builtin):
            if overrides.get(key) is not None:
                return overrides[key]
            if profile.get(key) is not None:
                return profile[key]
            return builtin

        params = {
            "model": pick("model", self.client.default_model),
            "temperature": pick("temperature", DEFAULT_TEMPERATURE),
            "max_tokens": pick("max_tokens", DEFAULT_MAX_TOKENS)
        }

        try:
            params["temperature"] = float(params["temperature"])
            params["max_tokens"] = int(params["max_tokens"])
        except (TypeError, ValueError):
            raise BadRequest("temperature and max_tokens must be numeric", stage="generate")

        return params

    # ============================================================
    # PUBLIC API
    # ============================================================

    def answer(
        self,
        namespace: str,
        query: str,
        top_k: int = 5,
        model_params: Optional[Mapping[str, Any]] = None,
        ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:

        ctx = ctx or CallContext()
        params = self.resolve_params(model_params)
        start = time.monotonic()

        # 1. Retrieval (validates namespace / query / top_k)
        results = self.retriever.retrieve(
            namespace,
            query,
            top_k=top_k,
            include_text=True,
            ctx=ctx
        )

        # 2. Prompt
        messages = self.prompt_builder.build(query, results)

        # 3. Generation
        raw_text = self._call_llm(messages, params, ctx)

        # 4. Format + citations
        answer_text = self.formatter.format(raw_text)
        citations = self.citation_manager.build(results)

        logger.info(
            "Answered | namespace=%r sources=%d model=%s latency=%.3fs",
            namespace,
            len(results),
            params["model"],
            time.monotonic() - start
        )

        return {
            "answerText": answer_text,
            "citations": citations,
            "cited": self.formatter.cited_indices(answer_text, len(citations)),
            "used": {**params, "topK": int(top_k)}
        }

    # ============================================================
    # LLM CALL
    # ============================================================

    def _call_llm(self, messages, params: Dict[str, Any], ctx: CallContext) -> str:

        ctx.check(stage="generate")

        try:
            out = self.client.chat_completion(
                messages,
                model=params["model"],
                temperature=params["temperature"],
                max_tokens=params["max_tokens"],
                ctx=ctx
            )
        except BackendTimeout as e:
            logger.error("Generation timed out: %s", e.detail)
            raise BackendTimeout(e.detail, stage="generate")
        except BackendError as e:
            logger.error("Generation failed: %s", e.detail)
            raise GenerateFailed(e.detail, stage="generate")

        ctx.check(stage="generate")

        return out.get("text") or ""
