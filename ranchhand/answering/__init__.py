"""
RanchHand — Answering Module

Provides:
- AnsweringAgent    → Retrieval-to-answer orchestration
- CitationManager   → Citations parallel to ranked results
- PromptBuilder     → Chat messages with numbered sources
- ResponseFormatter → Answer cleanup + cited-index extraction

Usage:

    from ranchhand.answering import AnsweringAgent

    agent = AnsweringAgent(retriever, client, profiles)
    result = agent.answer("docs", "What does the fox do?", top_k=3)

Returns:
{
    "answerText": "...",
    "citations": [...],
    "cited": [1, 2],
    "used": {"model": ..., "temperature": ..., "max_tokens": ..., "topK": 3}
}
"""

from .answering_agent import AnsweringAgent
from .citation_manager import CitationManager
from .prompt_builder import PromptBuilder
from .response_formatter import ResponseFormatter


__all__ = [
    "AnsweringAgent",
    "CitationManager",
    "PromptBuilder",
    "ResponseFormatter",
]
