"""
RanchHand — Vector Store (in-memory, exact)

Responsibilities:
- Namespaced collections of (id, vector, text, metadata) records
- Append-only bulk upsert (caller-supplied ids are NOT deduplicated)
- Exact brute-force cosine top-k query
- Implicit namespace creation on first read or write

Concurrency:
- Each namespace holds an immutable tuple of fully built records.
- Writers build every record first, then swap in a new tuple under a
  lock, so a reader never sees a half-built record.
- Readers grab the current tuple without locking; that tuple is the
  snapshot they scan.

Larger corpora should get an approximate index behind the same
VectorStore interface.
"""

import hashlib
import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("MemoryStore", component="retrieval")


@dataclass(frozen=True)
class Record:
    id: str
    vector: np.ndarray
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryResult:
    id: str
    score: float
    metadata: Dict[str, Any]
    text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {"id": self.id, "score": self.score, "metadata": self.metadata}
        if self.text is not None:
            out["text"] = self.text
        return out


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """
    Cosine over the first min(len(a), len(b)) components.
    Zero norm or empty overlap scores 0.0.
    """

    n = min(len(a), len(b))
    if n == 0:
        return 0.0

    x = a[:n].astype(np.float64, copy=False)
    y = b[:n].astype(np.float64, copy=False)

    denom = float(np.linalg.norm(x)) * float(np.linalg.norm(y))
    if denom == 0.0:
        return 0.0

    return float(np.dot(x, y) / denom)


def derive_record_id(namespace: str, item: Mapping) -> str:
    salt = secrets.token_hex(8)
    seed = f"{namespace}:{item.get('ts') or ''}:{item.get('chunk') or ''}:{salt}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:16]


def to_vector(values: Optional[Iterable[float]]) -> np.ndarray:
    if values is None:
        return np.zeros(0, dtype=np.float32)
    return np.asarray(list(values), dtype=np.float32).reshape(-1)


class VectorStore(ABC):
    """Two-operation contract every store backend implements."""

    @abstractmethod
    def upsert_many(self, namespace: str, records: Sequence[Mapping]) -> Dict[str, int]:
        pass

    @abstractmethod
    def query(
        self,
        namespace: str,
        query_vector: Sequence[float],
        top_k: int = 5,
        include_text: bool = True
    ) -> List[QueryResult]:
        pass

    def size(self, namespace: str) -> int:
        raise NotImplementedError

    def namespaces(self) -> Dict[str, int]:
        raise NotImplementedError


class MemoryStore(VectorStore):

    def __init__(self):
        self._namespaces: Dict[str, Tuple[Record, ...]] = {}
        self._write_lock = threading.Lock()

    # -------------------------------------------------
    # Namespaces
    # -------------------------------------------------

    def _snapshot(self, namespace: str) -> Tuple[Record, ...]:
        records = self._namespaces.get(namespace)
        if records is None:
            with self._write_lock:
                records = self._namespaces.setdefault(namespace, ())
        return records

    def size(self, namespace: str) -> int:
        return len(self._snapshot(namespace))

    def namespaces(self) -> Dict[str, int]:
        return {name: len(records) for name, records in list(self._namespaces.items())}

    # -------------------------------------------------
    # Upsert
    # -------------------------------------------------

    def _build_record(self, namespace: str, item: Mapping) -> Record:
        record_id = item.get("id") or derive_record_id(namespace, item)
        text = item.get("text")
        return Record(
            id=str(record_id),
            vector=to_vector(item.get("vector")),
            text="" if text is None else str(text),
            metadata=dict(item.get("metadata") or {})
        )

    def upsert_many(self, namespace: str, records: Sequence[Mapping]) -> Dict[str, int]:
        """
        Append every record in input order. Returns the number just added,
        not the namespace total.
        """

        built = tuple(self._build_record(namespace, item) for item in records)

        with self._write_lock:
            current = self._namespaces.get(namespace, ())
            self._namespaces[namespace] = current + built
            total = len(current) + len(built)

        logger.info("Upserted %d records into %r (total=%d)", len(built), namespace, total)
        return {"count": len(built)}

    # -------------------------------------------------
    # Query
    # -------------------------------------------------

    def query(
        self,
        namespace: str,
        query_vector: Sequence[float],
        top_k: int = 5,
        include_text: bool = True
    ) -> List[QueryResult]:

        records = self._snapshot(namespace)
        if top_k < 1 or not records:
            return []

        q = to_vector(query_vector)

        scored = [
            QueryResult(
                id=rec.id,
                score=cosine_similarity(q, rec.vector),
                metadata=dict(rec.metadata),
                text=rec.text if include_text else None
            )
            for rec in records
        ]

        # sorted() is stable: ties keep insertion order
        scored = sorted(scored, key=lambda r: r.score, reverse=True)

        logger.debug("Scanned %d records in %r (top_k=%d)", len(records), namespace, top_k)
        return scored[:top_k]
