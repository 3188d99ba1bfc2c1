#!/usr/bin/env python3
"""
Tests for the in-process vector index and its backends
"""
import asyncio
from unittest.mock import MagicMock

import pytest

from app.rag.chunker import KnowledgeChunk
from app.rag.vector_index import (
    ChromaBackend,
    InMemoryBackend,
    IndexNotLoadedError,
    VectorIndex,
    cosine_similarity,
    get_backend_factory,
)
from fakes import FailingEmbedder, KeywordEmbedder

CHUNKS = [
    KnowledgeChunk("Pendaftaran mitra dibuka 1 Januari 2026."),
    KnowledgeChunk("Tes kompetensi dikerjakan lewat akun SOBAT."),
    KnowledgeChunk("Pakta integritas wajib ditandatangani."),
    KnowledgeChunk("Login ke akun SOBAT memakai email."),
]


def test_cosine_similarity():
    assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([0, 0], [1, 1]) == 0.0


def test_build_embeds_all_chunks_in_one_call():
    embedder = KeywordEmbedder()
    index = VectorIndex(embedder)
    count = asyncio.run(index.build(CHUNKS))
    assert count == 4
    assert len(index) == 4
    assert index.is_loaded
    assert embedder.text_calls == 1


def test_query_ranks_most_similar_first():
    embedder = KeywordEmbedder()
    index = VectorIndex(embedder)
    asyncio.run(index.build(CHUNKS))

    results = asyncio.run(index.query("kapan pendaftaran mitra dibuka?", k=2))
    assert results[0] is CHUNKS[0]
    assert len(results) == 2
    assert embedder.query_calls == 1


def test_query_returns_all_when_fewer_than_k():
    index = VectorIndex(KeywordEmbedder())
    asyncio.run(index.build(CHUNKS[:2]))
    assert len(asyncio.run(index.query("mitra", k=3))) == 2


def test_ties_keep_original_order():
    index = VectorIndex(KeywordEmbedder())
    same = [KnowledgeChunk("jadwal A"), KnowledgeChunk("jadwal B"), KnowledgeChunk("jadwal C")]
    asyncio.run(index.build(same))
    results = asyncio.run(index.query("jadwal", k=3))
    assert [c.text for c in results] == ["jadwal A", "jadwal B", "jadwal C"]


def test_query_before_build_raises():
    index = VectorIndex(KeywordEmbedder())
    with pytest.raises(IndexNotLoadedError):
        asyncio.run(index.query("mitra"))


def test_failed_build_leaves_index_unloaded():
    index = VectorIndex(FailingEmbedder())
    with pytest.raises(RuntimeError):
        asyncio.run(index.build(CHUNKS))
    assert not index.is_loaded
    assert len(index) == 0


def test_failed_rebuild_keeps_previous_contents():
    embedder = KeywordEmbedder()
    index = VectorIndex(embedder)
    asyncio.run(index.build(CHUNKS))

    async def broken(texts):
        raise RuntimeError("down")

    embedder.embed_texts = broken
    with pytest.raises(RuntimeError):
        asyncio.run(index.build(CHUNKS[:1]))
    assert len(index) == 4


def test_vector_count_mismatch_is_rejected():
    embedder = KeywordEmbedder()

    async def short(texts):
        return [[1.0]]

    embedder.embed_texts = short
    index = VectorIndex(embedder)
    with pytest.raises(ValueError):
        asyncio.run(index.build(CHUNKS))
    assert not index.is_loaded


def test_build_requires_chunks():
    with pytest.raises(ValueError):
        asyncio.run(VectorIndex(KeywordEmbedder()).build([]))


def test_backend_factory_lookup():
    assert get_backend_factory("memory") is InMemoryBackend
    assert get_backend_factory("chroma") is ChromaBackend
    assert isinstance(get_backend_factory("memory")(), InMemoryBackend)
    with pytest.raises(ValueError):
        get_backend_factory("faiss")


def test_chroma_backend_maps_results_back_to_chunks():
    collection = MagicMock()
    collection.query.return_value = {
        "ids": [["1", "0"]],
        "distances": [[0.1, 0.4]],
    }
    client = MagicMock()
    client.get_or_create_collection.return_value = collection

    backend = ChromaBackend(client=client)
    backend.add(CHUNKS[:2], [[1.0, 0.0], [0.0, 1.0]])

    _, kwargs = client.get_or_create_collection.call_args
    assert kwargs["metadata"] == {"hnsw:space": "cosine"}
    _, add_kwargs = collection.add.call_args
    assert add_kwargs["ids"] == ["0", "1"]

    results = backend.search([0.0, 1.0], k=5)
    _, query_kwargs = collection.query.call_args
    assert query_kwargs["n_results"] == 2
    assert [c for c, _ in results] == [CHUNKS[1], CHUNKS[0]]
    assert results[0][1] == pytest.approx(0.9)

    backend.discard()
    client.delete_collection.assert_called_once_with(backend.collection_name)


def test_chroma_backend_against_ephemeral_client():
    pytest.importorskip("chromadb")
    vectors = [KeywordEmbedder.vectorize(c.text) for c in CHUNKS]

    backend = ChromaBackend()
    assert backend.add(CHUNKS, vectors) == 4
    assert backend.count() == 4

    results = backend.search(KeywordEmbedder.vectorize("kapan pendaftaran mitra dibuka?"), k=2)
    assert len(results) == 2
    assert results[0][0] is CHUNKS[0]
    assert results[0][1] > results[1][1]

    backend.discard()
    assert backend.count() == 0


def test_index_on_chroma_backend():
    pytest.importorskip("chromadb")
    index = VectorIndex(KeywordEmbedder(), backend_factory=ChromaBackend)
    asyncio.run(index.build(CHUNKS))
    asyncio.run(index.build(CHUNKS[:2]))
    assert len(index) == 2
    assert asyncio.run(index.query("login akun sobat", k=1)) == [CHUNKS[1]]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
