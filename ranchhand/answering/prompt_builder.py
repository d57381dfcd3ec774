import textwrap
from typing import Dict, List, Sequence

from ranchhand.core.utils.logging_utils import get_component_logger
from ranchhand.core.vector.store import QueryResult


logger = get_component_logger("PromptBuilder", component="answering")


DEFAULT_CONTEXT_CHARS = 800


class PromptBuilder:
    """
    Chat-message prompt builder for grounded, cited answers.
    Each source is truncated independently, so the context block is
    bounded by top_k * context_chars characters.
    """

    SYSTEM_PROMPT = textwrap.dedent("""
    You are a grounded retrieval assistant.

    RULES:
    - Answer ONLY from the numbered sources provided by the user.
    - Do NOT use outside knowledge. Do NOT guess.
    - Cite every claim with the bracketed index of its source, e.g. [1] or [2][3].
    - If the sources do not contain the answer, say that you do not know.
    """).strip()

    _USER_TEMPLATE = textwrap.dedent("""
    Question:
    {query}

    Sources:
    {context_text}
    """).strip()

    def __init__(self, context_chars: int = DEFAULT_CONTEXT_CHARS):
        self.context_chars = context_chars

    def build(self, query: str, results: Sequence[QueryResult]) -> List[Dict[str, str]]:

        context_text = self.build_context(results)

        messages = [
            {"role": "system", "content": self.SYSTEM_PROMPT},
            {"role": "user", "content": self._USER_TEMPLATE.format(
                query=query.strip(),
                context_text=context_text
            )}
        ]

        logger.debug(
            "Prompt built (context_chars=%d, sources=%d)",
            len(context_text),
            len(results)
        )
        return messages

    # ============================================================
    # CONTEXT BUILDER
    # ============================================================

    def build_context(self, results: Sequence[QueryResult]) -> str:
        if not results:
            return "No sources available."

        blocks = []
        for idx, result in enumerate(results, 1):
            text = (result.text or "")[:self.context_chars]
            blocks.append(f"Source [{idx}]: {text}")

        return "\n\n".join(blocks)
