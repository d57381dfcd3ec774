"""
Unit tests for the in-memory vector store.

Tests for:
- Cosine similarity (zero vectors, mismatched lengths)
- Round-trip self-similarity
- Top-k bound and ranking order
- Namespace isolation and implicit creation
- Append-only upsert semantics and derived ids
- Concurrent upserts and queries
"""

import threading

import numpy as np
import pytest

from ranchhand.core.vector.store import MemoryStore, cosine_similarity


def _rec(rid, vector, text="", **metadata):
    return {"id": rid, "vector": vector, "text": text, "metadata": metadata}


class TestCosineSimilarity:

    def test_identical(self):
        v = np.array([1.0, 2.0, 3.0], dtype=np.float32)
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_opposite(self):
        a = np.array([1.0, 0.0], dtype=np.float32)
        b = np.array([-1.0, 0.0], dtype=np.float32)
        assert cosine_similarity(a, b) == pytest.approx(-1.0)

    def test_zero_vector_scores_zero(self):
        a = np.zeros(3, dtype=np.float32)
        b = np.array([1.0, 2.0, 3.0], dtype=np.float32)
        assert cosine_similarity(a, b) == 0.0
        assert cosine_similarity(b, a) == 0.0
        assert cosine_similarity(a, a) == 0.0

    def test_empty_vector_scores_zero(self):
        assert cosine_similarity(np.zeros(0, dtype=np.float32), np.ones(3, dtype=np.float32)) == 0.0

    def test_length_mismatch_uses_common_prefix(self):
        a = np.array([1.0, 0.0], dtype=np.float32)
        b = np.array([1.0, 0.0, 5.0], dtype=np.float32)
        assert cosine_similarity(a, b) == pytest.approx(1.0)


class TestQuery:

    def test_round_trip_self_similarity(self, store):
        store.upsert_many("ns", [
            _rec("a", [0.1, 0.9, 0.3], "alpha"),
            _rec("b", [0.8, 0.1, 0.0], "beta"),
            _rec("c", [0.3, 0.3, 0.3], "gamma"),
        ])

        results = store.query("ns", [0.8, 0.1, 0.0], top_k=3)

        assert results[0].id == "b"
        assert results[0].score == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("size", [0, 1, 3, 10])
    @pytest.mark.parametrize("k", [1, 2, 5, 20])
    def test_top_k_bound(self, store, size, k):
        store.upsert_many("ns", [_rec(str(i), [1.0, float(i)]) for i in range(size)])

        results = store.query("ns", [1.0, 1.0], top_k=k)

        assert len(results) == min(k, size)

    def test_monotonic_ranking(self, store):
        rng = np.random.default_rng(7)
        store.upsert_many("ns", [
            _rec(str(i), rng.normal(size=8).tolist()) for i in range(50)
        ])

        results = store.query("ns", rng.normal(size=8).tolist(), top_k=50)

        for current, nxt in zip(results, results[1:]):
            assert current.score >= nxt.score

    def test_ties_keep_insertion_order(self, store):
        store.upsert_many("ns", [
            _rec("first", [1.0, 0.0]),
            _rec("second", [2.0, 0.0]),
            _rec("third", [3.0, 0.0]),
        ])

        results = store.query("ns", [1.0, 0.0], top_k=3)

        assert [r.id for r in results] == ["first", "second", "third"]

    def test_zero_query_vector(self, store):
        store.upsert_many("ns", [_rec("a", [1.0, 2.0]), _rec("z", [0.0, 0.0])])

        results = store.query("ns", [0.0, 0.0], top_k=2)

        assert [r.score for r in results] == [0.0, 0.0]

    def test_stored_zero_vector(self, store):
        store.upsert_many("ns", [_rec("z", [0.0, 0.0]), _rec("a", [1.0, 0.0])])

        results = store.query("ns", [1.0, 0.0], top_k=2)

        assert [r.id for r in results] == ["a", "z"]
        assert results[1].score == 0.0

    def test_include_text_false_omits_text(self, store):
        store.upsert_many("ns", [_rec("a", [1.0], "secret text", source="api")])

        result = store.query("ns", [1.0], top_k=1, include_text=False)[0]

        assert result.text is None
        assert "text" not in result.to_dict()
        assert result.metadata == {"source": "api"}
        assert result.id == "a"

    def test_include_text_true(self, store):
        store.upsert_many("ns", [_rec("a", [1.0], "kept")])

        assert store.query("ns", [1.0], top_k=1)[0].to_dict()["text"] == "kept"

    def test_non_positive_top_k_returns_nothing(self, store):
        store.upsert_many("ns", [_rec("a", [1.0])])
        assert store.query("ns", [1.0], top_k=0) == []


class TestNamespaces:

    def test_isolation(self, store):
        store.upsert_many("a", [_rec("in-a", [1.0, 0.0])])
        store.upsert_many("b", [_rec("in-b", [1.0, 0.0])])

        assert [r.id for r in store.query("a", [1.0, 0.0], top_k=10)] == ["in-a"]
        assert [r.id for r in store.query("b", [1.0, 0.0], top_k=10)] == ["in-b"]

    def test_query_creates_empty_namespace(self, store):
        assert store.query("fresh", [1.0], top_k=3) == []
        assert store.namespaces() == {"fresh": 0}

    def test_size(self, store):
        store.upsert_many("ns", [_rec("a", [1.0]), _rec("b", [1.0])])
        assert store.size("ns") == 2
        assert store.size("other") == 0


class TestUpsertMany:

    def test_returns_count_of_this_call(self, store):
        assert store.upsert_many("ns", [_rec("a", [1.0]), _rec("b", [1.0])]) == {"count": 2}
        assert store.upsert_many("ns", [_rec("c", [1.0])]) == {"count": 1}
        assert store.size("ns") == 3

    def test_duplicate_ids_coexist(self, store):
        store.upsert_many("ns", [_rec("dup", [1.0], "one")])
        store.upsert_many("ns", [_rec("dup", [1.0], "two")])

        results = store.query("ns", [1.0], top_k=10)

        assert [r.text for r in results] == ["one", "two"]
        assert store.size("ns") == 2

    def test_missing_id_gets_derived_unique_id(self, store):
        store.upsert_many("ns", [
            {"vector": [1.0], "text": "x", "ts": "1", "chunk": 0},
            {"vector": [1.0], "text": "x", "ts": "1", "chunk": 0},
        ])

        ids = [r.id for r in store.query("ns", [1.0], top_k=2)]

        assert len(ids[0]) == 16
        assert ids[0] != ids[1]

    def test_missing_vector_is_empty_and_unretrievable(self, store):
        store.upsert_many("ns", [{"id": "novec", "text": "t"}, _rec("v", [1.0])])

        results = store.query("ns", [1.0], top_k=2)

        assert results[0].id == "v"
        assert results[1].score == 0.0

    def test_vectors_stored_as_float32(self, store):
        store.upsert_many("ns", [_rec("a", [1, 2, 3])])
        record = store._namespaces["ns"][0]
        assert record.vector.dtype == np.float32

    def test_append_order_preserved(self, store):
        store.upsert_many("ns", [_rec(str(i), [1.0]) for i in range(20)])
        assert [r.id for r in store._namespaces["ns"]] == [str(i) for i in range(20)]


class TestConcurrency:

    def test_concurrent_upserts_and_queries(self, store):
        writers = 8
        per_writer = 50
        errors = []

        def write(w):
            for i in range(per_writer):
                store.upsert_many("ns", [_rec(f"{w}-{i}", [1.0, float(i)], f"text {w} {i}")])

        def read():
            try:
                for _ in range(100):
                    for result in store.query("ns", [1.0, 0.5], top_k=5):
                        assert result.text is not None
                        assert result.id
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=write, args=(w,)) for w in range(writers)]
        threads += [threading.Thread(target=read) for _ in range(4)]

        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert store.size("ns") == writers * per_writer

        # each writer's own relative order is preserved
        ids = [r.id for r in store._namespaces["ns"]]
        for w in range(writers):
            mine = [i for i in ids if i.startswith(f"{w}-")]
            assert mine == [f"{w}-{i}" for i in range(per_writer)]
