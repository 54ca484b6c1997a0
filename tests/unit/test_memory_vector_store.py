"""Unit tests for the in-memory numpy vector store."""

from __future__ import annotations

import pytest

from vacancy_rag.models.document import DocumentChunk
from vacancy_rag.providers.vector_store.memory_vector_store import InMemoryVectorStore
from vacancy_rag.utils.errors import RepositoryError


def _chunk(
    chunk_id: str,
    sequence: int = 0,
    document_id: str = "d1",
    position_id: str = "p1",
    embedding_model: str = "model-a",
) -> DocumentChunk:
    return DocumentChunk(
        chunk_id=chunk_id,
        document_id=document_id,
        position_id=position_id,
        sequence=sequence,
        content=f"content of {chunk_id}",
        embedding_model=embedding_model,
    )


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.mark.asyncio
async def test_nearest_first_with_distances(store: InMemoryVectorStore) -> None:
    await store.append_chunk(_chunk("x"), [1.0, 0.0])
    await store.append_chunk(_chunk("y", 1), [0.0, 1.0])
    await store.append_chunk(_chunk("opposite", 2), [-1.0, 0.0])

    matches = await store.nearest_chunks("p1", [2.0, 0.0], top_k=3)

    assert [m.chunk_id for m in matches] == ["x", "y", "opposite"]
    assert matches[0].distance == pytest.approx(0.0, abs=1e-6)
    assert matches[1].distance == pytest.approx(1.0, abs=1e-6)
    assert matches[2].distance == pytest.approx(2.0, abs=1e-6)


@pytest.mark.asyncio
async def test_ties_keep_insertion_order(store: InMemoryVectorStore) -> None:
    for i in range(4):
        await store.append_chunk(_chunk(f"c{i}", i), [1.0, 1.0])
    matches = await store.nearest_chunks("p1", [1.0, 1.0], top_k=4)
    assert [m.sequence for m in matches] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_top_k_and_scope(store: InMemoryVectorStore) -> None:
    for i in range(5):
        await store.append_chunk(_chunk(f"c{i}", i), [1.0, float(i)])
    await store.append_chunk(_chunk("other", position_id="p2", document_id="d2"), [1.0, 0.0])

    assert len(await store.nearest_chunks("p1", [1.0, 0.0], top_k=2)) == 2
    assert all(m.document_id == "d1" for m in await store.nearest_chunks("p1", [1.0, 0.0]))
    assert await store.nearest_chunks("p1", [1.0, 0.0], top_k=0) == []
    assert await store.nearest_chunks("nobody", [1.0, 0.0]) == []


@pytest.mark.asyncio
async def test_embedding_model_filter(store: InMemoryVectorStore) -> None:
    await store.append_chunk(_chunk("a"), [1.0, 0.0])
    await store.append_chunk(_chunk("b", 1, embedding_model="model-b"), [1.0, 0.0])

    matches = await store.nearest_chunks("p1", [1.0, 0.0], embedding_model="model-b")
    assert [m.chunk_id for m in matches] == ["b"]


@pytest.mark.asyncio
async def test_list_and_count(store: InMemoryVectorStore) -> None:
    await store.append_chunk(_chunk("late", 2), [1.0, 0.0])
    await store.append_chunk(_chunk("early", 0), [1.0, 0.0])
    await store.append_chunk(_chunk("middle", 1), [1.0, 0.0])

    assert [c.chunk_id for c in await store.list_chunks("d1")] == ["early", "middle", "late"]
    assert await store.count_chunks("d1") == 3
    assert await store.count_chunks("d9") == 0


@pytest.mark.asyncio
async def test_rejects_bad_vectors(store: InMemoryVectorStore) -> None:
    with pytest.raises(RepositoryError):
        await store.append_chunk(_chunk("empty"), [])

    await store.append_chunk(_chunk("first"), [1.0, 0.0, 0.0])
    with pytest.raises(RepositoryError, match="dimension"):
        await store.append_chunk(_chunk("second", 1), [1.0, 0.0])
    with pytest.raises(RepositoryError, match="Duplicate"):
        await store.append_chunk(_chunk("first", 2), [1.0, 0.0, 0.0])
    with pytest.raises(RepositoryError, match="Query dimension"):
        await store.nearest_chunks("p1", [1.0, 0.0])
