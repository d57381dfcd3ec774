"""
Shared test fixtures and configuration for pytest.
"""

import hashlib
import os
from typing import Any, Dict, List, Optional

import pytest

# Keep test runs from writing rotating log files
os.environ.setdefault("RANCHHAND_LOG_TO_FILE", "false")

from ranchhand.config.profiles import ProfileStore  # noqa: E402
from ranchhand.core.errors import BackendError, BackendTimeout  # noqa: E402
from ranchhand.core.vector.embedder import VectorEmbedder  # noqa: E402
from ranchhand.core.vector.store import MemoryStore  # noqa: E402


EMBED_DIM = 256


def bag_of_words(text: str, dim: int = EMBED_DIM) -> List[float]:
    """Deterministic, similarity-preserving stand-in for a real embedding."""

    vector = [0.0] * dim
    for word in text.lower().split():
        bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % dim
        vector[bucket] += 1.0
    return vector


class FakeBackend:
    """
    Scripted stand-in for OpenAICompatibleClient.

    - embeddings() → bag-of-words vectors (or a configured failure)
    - chat_completion() → configured answer text (or a configured failure)
    """

    def __init__(self, answer_text: str = "The fox is quick [1].", timeout: float = 60.0):
        self.default_model = "fake-model"
        self.timeout = timeout
        self.answer_text = answer_text
        self.embed_error: Optional[Exception] = None
        self.chat_error: Optional[Exception] = None
        self.drop_embeddings = 0
        self.embed_calls: List[Dict[str, Any]] = []
        self.chat_calls: List[Dict[str, Any]] = []

    def embeddings(self, input, model=None, ctx=None):
        texts = [input] if isinstance(input, str) else list(input)
        self.embed_calls.append({"input": texts, "model": model})

        if self.embed_error is not None:
            raise self.embed_error

        data = [{"embedding": bag_of_words(t)} for t in texts]
        if self.drop_embeddings:
            data = data[:len(data) - self.drop_embeddings]
        return {"data": data}

    def chat_completion(self, messages, model=None, temperature=None, top_p=None, max_tokens=None, ctx=None):
        self.chat_calls.append({
            "messages": messages,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens
        })

        if self.chat_error is not None:
            raise self.chat_error

        return {"text": self.answer_text, "raw": {}}

    def list_models(self, ctx=None):
        return {"object": "list", "data": [{"id": "fake-model"}]}


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def profiles(tmp_path):
    return ProfileStore(str(tmp_path / "profiles.yaml"))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def embedder(backend, profiles):
    return VectorEmbedder(backend, profiles)


@pytest.fixture
def backend_timeout():
    return BackendTimeout("POST /embeddings timed out", stage="backend")


@pytest.fixture
def backend_error():
    return BackendError("model not found", stage="backend")
