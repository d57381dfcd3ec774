from .oai_client import OpenAICompatibleClient, collect_stream_to_text, extract_text_from_chat

__all__ = ["OpenAICompatibleClient", "collect_stream_to_text", "extract_text_from_chat"]
