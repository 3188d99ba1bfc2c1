#!/usr/bin/env python3
"""
Tests for the knowledge base load lifecycle and startup behaviour
"""
import asyncio
import tempfile
from unittest.mock import patch

import pytest

from app.knowledge_base import KnowledgeBase, KnowledgeBaseState
from app.rag.chunker import KnowledgeSourceError
from app.rag.vector_index import VectorIndex
from fakes import FailingEmbedder, KeywordEmbedder


def _knowledge_file(content: str) -> str:
    with tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False, encoding="utf-8") as f:
        f.write(content)
        return f.name


def test_starts_unloaded():
    kb = KnowledgeBase("data/knowledge.txt", VectorIndex(KeywordEmbedder()))
    assert kb.state == KnowledgeBaseState.UNLOADED
    assert not kb.is_loaded


def test_load_transitions_to_loaded():
    kb = KnowledgeBase(_knowledge_file("Satu mitra.\n\nDua akun.\n\nTiga tes."), VectorIndex(KeywordEmbedder()))
    seen_states = []

    original_build = kb.index.build

    async def recording_build(chunks):
        seen_states.append(kb.state)
        return await original_build(chunks)

    kb.index.build = recording_build
    count = asyncio.run(kb.load())

    assert seen_states == [KnowledgeBaseState.LOADING]
    assert count == 3
    assert kb.chunk_count == 3
    assert kb.state == KnowledgeBaseState.LOADED
    assert kb.index.is_loaded


def test_missing_source_fails_and_stays_unloaded():
    kb = KnowledgeBase("/nonexistent/knowledge.txt", VectorIndex(KeywordEmbedder()))
    with pytest.raises(KnowledgeSourceError):
        asyncio.run(kb.load())
    assert kb.state == KnowledgeBaseState.UNLOADED


def test_embedding_failure_fails_and_stays_unloaded():
    kb = KnowledgeBase(_knowledge_file("Satu mitra."), VectorIndex(FailingEmbedder()))
    with pytest.raises(RuntimeError):
        asyncio.run(kb.load())
    assert kb.state == KnowledgeBaseState.UNLOADED
    assert not kb.index.is_loaded


def test_failed_reload_keeps_served_index_loaded():
    kb = KnowledgeBase(_knowledge_file("Satu mitra.\n\nDua akun."), VectorIndex(KeywordEmbedder()))
    asyncio.run(kb.load())

    kb.index.embedder = FailingEmbedder()
    with pytest.raises(RuntimeError):
        asyncio.run(kb.load())

    assert kb.state == KnowledgeBaseState.LOADED
    assert kb.chunk_count == 2
    assert len(kb.index) == 2


def test_overlapping_loads_where_the_later_one_fails():
    class SlowSecondCallEmbedder(KeywordEmbedder):
        async def embed_texts(self, texts):
            self.text_calls += 1
            if self.text_calls == 1:
                await asyncio.sleep(0)
                return [self.vectorize(t) for t in texts]
            await asyncio.sleep(0.01)
            raise RuntimeError("embedding service unavailable")

    kb = KnowledgeBase(_knowledge_file("Satu mitra.\n\nDua akun."), VectorIndex(SlowSecondCallEmbedder()))

    async def overlapping():
        return await asyncio.gather(kb.ensure_loaded(), kb.ensure_loaded(), return_exceptions=True)

    first, second = asyncio.run(overlapping())
    assert first is None
    assert isinstance(second, RuntimeError)
    assert kb.state == KnowledgeBaseState.LOADED
    assert kb.index.is_loaded


def test_ensure_loaded_only_loads_once():
    embedder = KeywordEmbedder()
    kb = KnowledgeBase(_knowledge_file("Satu mitra."), VectorIndex(embedder))
    asyncio.run(kb.ensure_loaded())
    asyncio.run(kb.ensure_loaded())
    assert embedder.text_calls == 1


def test_startup_aborts_when_knowledge_source_is_missing():
    from app import main

    kb = KnowledgeBase("/nonexistent/knowledge.txt", VectorIndex(KeywordEmbedder()))
    service = main.AnswerService(kb, None, None)

    with patch.object(main, "answer_service", service), \
         patch.object(main.conversation_log, "init_conversation_log_db"), \
         patch.object(main.conversation_log, "cleanup_old_messages", return_value=0):
        with pytest.raises(KnowledgeSourceError):
            asyncio.run(main.startup_event())


def test_startup_loads_knowledge_base():
    from app import main

    kb = KnowledgeBase(_knowledge_file("Pendaftaran mitra dibuka."), VectorIndex(KeywordEmbedder()))
    service = main.AnswerService(kb, None, None)

    with patch.object(main, "answer_service", service), \
         patch.object(main.conversation_log, "init_conversation_log_db"), \
         patch.object(main.conversation_log, "cleanup_old_messages", return_value=0):
        asyncio.run(main.startup_event())

    assert kb.state == KnowledgeBaseState.LOADED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
