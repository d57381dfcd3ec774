"""
RanchHand — Base Retriever
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ranchhand.core.errors import BadRequest
from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger
from ranchhand.core.vector.store import QueryResult


# =====================================================
# LOGGER SETUP
# =====================================================

logger = get_component_logger("BaseRetriever", component="retrieval")


def validate_top_k(top_k) -> int:

    if isinstance(top_k, bool):
        raise BadRequest("topK must be an integer", stage="query")

    try:
        value = int(top_k)
    except (TypeError, ValueError):
        raise BadRequest("topK must be an integer", stage="query")

    if value < 1:
        raise BadRequest("topK must be >= 1", stage="query")

    return value


class BaseRetriever(ABC):
    """
    Abstract base retriever.
    Enforces:
        - Request validation
        - Sorting (descending score, stable)
        - Top-k trimming
    """

    # =====================================================
    # PUBLIC RETRIEVE ENTRY
    # =====================================================

    def retrieve(
        self,
        namespace: str,
        query: str,
        top_k: int = 5,
        include_text: bool = True,
        ctx: Optional[CallContext] = None
    ) -> List[QueryResult]:

        namespace = (namespace or "").strip() if isinstance(namespace, str) else ""
        if not namespace:
            raise BadRequest("namespace required", stage="query")

        if not isinstance(query, str) or not query.strip():
            raise BadRequest("query required", stage="query")

        top_k = validate_top_k(top_k)
        ctx = ctx or CallContext()

        results = self._retrieve_internal(namespace, query, top_k, include_text, ctx)

        results = sorted(results, key=lambda r: r.score, reverse=True)

        logger.info(
            "%s | namespace=%r top_k=%d results=%d",
            self.__class__.__name__,
            namespace,
            top_k,
            len(results)
        )

        return results[:top_k]

    # =====================================================
    # INTERNAL RETRIEVE (Child must implement)
    # =====================================================

    @abstractmethod
    def _retrieve_internal(
        self,
        namespace: str,
        query: str,
        top_k: int,
        include_text: bool,
        ctx: CallContext
    ) -> List[QueryResult]:
        pass
