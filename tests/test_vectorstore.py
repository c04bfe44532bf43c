"""Tests for the vector store and similarity ranking."""

import asyncio

import pytest

from deskrag.exceptions import StoreLockError, VectorDimensionError
from deskrag.rag import (
    ChunkRecord,
    MemoryVectorStore,
    VectorRetriever,
    cosine_similarity,
    rank_records,
    safe_cosine_similarity,
)


async def fill_store(store: MemoryVectorStore, items: list[tuple[str, list[float]]]) -> None:
    async with store.exclusive():
        store.clear()
        for text, vector in items:
            store.append(text, vector, "notes.txt")


class TestCosineSimilarity:
    """Tests for cosine similarity."""

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_symmetric_and_bounded(self):
        pairs = [
            ([0.3, -1.2, 4.0], [2.0, 0.5, -0.1]),
            ([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]),
            ([-5.0, 0.0, 2.5], [-4.0, 1.0, 3.0]),
        ]
        for a, b in pairs:
            score = cosine_similarity(a, b)
            assert score == pytest.approx(cosine_similarity(b, a))
            assert -1.0 - 1e-9 <= score <= 1.0 + 1e-9

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)

    def test_zero_magnitude(self):
        """A zero vector has no direction and scores 0."""
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0

    def test_dimension_mismatch(self):
        with pytest.raises(VectorDimensionError):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])

    def test_empty_vector(self):
        with pytest.raises(VectorDimensionError):
            cosine_similarity([], [1.0])

    def test_dimension_error_is_value_error(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [])

    def test_safe_variant_scores_zero(self):
        assert safe_cosine_similarity([1.0, 2.0], [1.0]) == 0.0
        assert safe_cosine_similarity([], []) == 0.0


class TestRankRecords:
    """Tests for ranking records against a query."""

    def make_records(self) -> list[ChunkRecord]:
        return [
            ChunkRecord(id=1, text="weak", vector=[0.2, 1.0], source_name="a.txt"),
            ChunkRecord(id=2, text="exact", vector=[1.0, 0.0], source_name="a.txt"),
            ChunkRecord(id=3, text="close", vector=[1.0, 0.3], source_name="b.txt"),
            ChunkRecord(id=4, text="opposite", vector=[-1.0, 0.0], source_name="b.txt"),
        ]

    def test_sorted_descending(self):
        results = rank_records([1.0, 0.0], self.make_records(), top_n=4)

        assert [r.record.id for r in results] == [2, 3, 1, 4]
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_top_n_limits_results(self):
        results = rank_records([1.0, 0.0], self.make_records(), top_n=2)

        assert [r.record.id for r in results] == [2, 3]

    def test_fewer_records_than_top_n(self):
        results = rank_records([1.0, 0.0], self.make_records()[:2], top_n=5)

        assert len(results) == 2

    def test_non_positive_top_n_uses_default(self):
        assert len(rank_records([1.0, 0.0], self.make_records(), top_n=0)) == 3
        assert len(rank_records([1.0, 0.0], self.make_records(), top_n=-2)) == 3

    def test_ties_keep_id_order(self):
        records = [
            ChunkRecord(id=7, text="b", vector=[2.0, 0.0], source_name="x.txt"),
            ChunkRecord(id=3, text="a", vector=[1.0, 0.0], source_name="x.txt"),
            ChunkRecord(id=5, text="c", vector=[3.0, 0.0], source_name="x.txt"),
        ]

        results = rank_records([1.0, 0.0], records, top_n=3)

        assert [r.record.id for r in results] == [3, 5, 7]

    def test_empty_vectors_skipped(self):
        records = [
            ChunkRecord(id=1, text="no vector", vector=[], source_name="x.txt"),
            ChunkRecord(id=2, text="vector", vector=[1.0, 0.0], source_name="x.txt"),
        ]

        results = rank_records([1.0, 0.0], records)

        assert [r.record.id for r in results] == [2]

    def test_zero_vector_never_wins(self):
        """An all-zero embedding scores 0 and ranks below any positive match."""
        records = [
            ChunkRecord(id=1, text="zero", vector=[0.0, 0.0], source_name="x.txt"),
            ChunkRecord(id=2, text="weak match", vector=[0.1, 1.0], source_name="x.txt"),
        ]

        results = rank_records([1.0, 0.0], records)

        assert [r.record.id for r in results] == [2, 1]
        assert results[1].score == 0.0

    def test_zero_query_scores_everything_zero(self):
        records = [
            ChunkRecord(id=2, text="b", vector=[1.0, 0.0], source_name="x.txt"),
            ChunkRecord(id=1, text="a", vector=[0.0, 1.0], source_name="x.txt"),
        ]

        results = rank_records([0.0, 0.0], records)

        assert [(r.record.id, r.score) for r in results] == [(1, 0.0), (2, 0.0)]

    def test_mismatched_dimension_scores_zero(self):
        records = [
            ChunkRecord(id=1, text="short", vector=[1.0], source_name="x.txt"),
            ChunkRecord(id=2, text="negative", vector=[-1.0, 0.0], source_name="x.txt"),
        ]

        results = rank_records([1.0, 0.0], records)

        assert [(r.record.id, r.score) for r in results] == [(1, 0.0), (2, pytest.approx(-1.0))]


class TestMemoryVectorStore:
    """Tests for memory vector store."""

    @pytest.mark.asyncio
    async def test_append_assigns_sequential_ids(self):
        store = MemoryVectorStore()

        async with store.exclusive():
            ids = [store.append(f"chunk {i}", [1.0, float(i)], "a.txt") for i in range(3)]

        assert ids == [1, 2, 3]
        assert await store.count() == 3

    @pytest.mark.asyncio
    async def test_clear_resets_ids(self):
        store = MemoryVectorStore()
        await fill_store(store, [("one", [1.0]), ("two", [2.0])])

        await fill_store(store, [("three", [3.0])])

        records = await store.snapshot()
        assert [(r.id, r.text) for r in records] == [(1, "three")]

    def test_writes_require_exclusive(self):
        store = MemoryVectorStore()

        with pytest.raises(StoreLockError):
            store.append("text", [1.0], "a.txt")
        with pytest.raises(StoreLockError):
            store.clear()

    @pytest.mark.asyncio
    async def test_write_from_other_task_rejected(self):
        """Holding exclusive() in one task does not open writes to others."""
        store = MemoryVectorStore()

        async def intrude():
            store.append("intruder", [1.0], "x.txt")

        async with store.exclusive():
            with pytest.raises(StoreLockError):
                await asyncio.create_task(intrude())
            store.append("owner", [1.0], "a.txt")

        assert [r.text for r in await store.snapshot()] == ["owner"]

    @pytest.mark.asyncio
    async def test_write_while_reader_holds_lock_rejected(self):
        store = MemoryVectorStore()

        async with store._lock:
            with pytest.raises(StoreLockError):
                store.append("text", [1.0], "a.txt")

        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_search_empty_store(self):
        store = MemoryVectorStore()

        assert await store.search([1.0, 0.0]) == []

    @pytest.mark.asyncio
    async def test_search(self):
        store = MemoryVectorStore()
        await fill_store(store, [
            ("north", [0.0, 1.0]),
            ("east", [1.0, 0.0]),
            ("north east", [1.0, 1.0]),
        ])

        results = await store.search([1.0, 0.1], k=2)

        assert [r.record.text for r in results] == ["east", "north east"]
        assert results[0].to_source().chunk_id == 2
        assert results[0].to_source().file_name == "notes.txt"

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self):
        store = MemoryVectorStore()
        await fill_store(store, [("one", [1.0])])

        snapshot = await store.snapshot()
        await fill_store(store, [("two", [2.0]), ("three", [3.0])])

        assert [r.text for r in snapshot] == ["one"]
        assert await store.count() == 2

    @pytest.mark.asyncio
    async def test_readers_wait_for_writer(self):
        """A reader started during a reload sees only the reloaded corpus."""
        store = MemoryVectorStore()
        await fill_store(store, [("old", [1.0])])
        reader_started = asyncio.Event()

        async def reload():
            async with store.exclusive():
                store.clear()
                reader_started.set()
                await asyncio.sleep(0.01)
                store.append("new", [1.0], "b.txt")

        writer = asyncio.create_task(reload())
        await reader_started.wait()
        snapshot = await store.snapshot()
        await writer

        assert [r.text for r in snapshot] == ["new"]


class TestVectorRetriever:
    """Tests for vector retriever."""

    @pytest.mark.asyncio
    async def test_basic_retrieval(self, keyword_embedding):
        store = MemoryVectorStore()
        async with store.exclusive():
            for text in ("The sky is blue.", "Paris is the capital of France."):
                store.append(text, await keyword_embedding.embed(text), "facts.txt")
        retriever = VectorRetriever(keyword_embedding, store)

        query_vector = await keyword_embedding.embed_query("What color is the sky?")
        results = await retriever.find_relevant_chunks(query_vector, 1)

        assert len(results) == 1
        assert results[0].record.text == "The sky is blue."
        assert results[0].score > 0.5

    @pytest.mark.asyncio
    async def test_retrieve_empty_store(self, keyword_embedding):
        retriever = VectorRetriever(keyword_embedding, MemoryVectorStore())

        assert await retriever.retrieve("anything about the sky") == []
