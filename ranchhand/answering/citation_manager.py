"""
RanchHand — Citation Manager

One citation per ranked source, parallel to the retrieval results:
    {index, id, score, snippet, metadata}

index is the 1-based rank used as [i] in the prompt and the answer.
"""

from typing import Any, Dict, List, Sequence

from ranchhand.core.vector.store import QueryResult


DEFAULT_SNIPPET_CHARS = 240


class CitationManager:

    def __init__(self, snippet_chars: int = DEFAULT_SNIPPET_CHARS):
        self.snippet_chars = snippet_chars

    # ============================================================
    # PUBLIC METHOD
    # ============================================================

    def build(self, results: Sequence[QueryResult]) -> List[Dict[str, Any]]:

        citations = []

        for index, result in enumerate(results, 1):
            citations.append({
                "index": index,
                "id": result.id,
                "score": result.score,
                "snippet": self._snippet(result.text),
                "metadata": {
                    k: v for k, v in (result.metadata or {}).items()
                    if v not in (None, "")
                }
            })

        return citations

    def _snippet(self, text) -> str:
        if not text:
            return ""
        return " ".join(str(text).split())[:self.snippet_chars]
