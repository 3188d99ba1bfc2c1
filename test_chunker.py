#!/usr/bin/env python3
"""
Tests for splitting the knowledge file into paragraph chunks
"""
import os
import tempfile

import pytest

from app.rag.chunker import (
    KnowledgeChunk,
    KnowledgeSourceError,
    load_chunks,
    load_knowledge_text,
    split_into_chunks,
)


def _write_temp(content: str) -> str:
    with tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False, encoding="utf-8") as f:
        f.write(content)
        return f.name


def test_splits_on_blank_lines_in_order():
    text = "Satu.\n\nDua baris\nmasih dua.\n\n\n\nTiga."
    chunks = split_into_chunks(text)
    assert [c.text for c in chunks] == ["Satu.", "Dua baris\nmasih dua.", "Tiga."]


def test_chunks_are_trimmed_and_empty_segments_dropped():
    text = "\n\n   Alpha   \n\n \n\nBeta\n\n\n"
    chunks = split_into_chunks(text)
    assert [c.text for c in chunks] == ["Alpha", "Beta"]


def test_windows_line_endings():
    chunks = split_into_chunks("Alpha\r\n\r\nBeta")
    assert [c.text for c in chunks] == ["Alpha", "Beta"]


def test_single_newline_does_not_split():
    assert len(split_into_chunks("baris satu\nbaris dua")) == 1


def test_chunks_are_immutable_with_empty_metadata():
    chunk = split_into_chunks("Alpha")[0]
    assert chunk == KnowledgeChunk(text="Alpha")
    assert chunk.metadata == {}
    with pytest.raises(Exception):
        chunk.text = "changed"


def test_chunk_metadata_is_read_only():
    source = {"source": "knowledge.txt"}
    chunk = KnowledgeChunk(text="Alpha", metadata=source)
    with pytest.raises(TypeError):
        chunk.metadata["source"] = "other.txt"
    with pytest.raises(TypeError):
        split_into_chunks("Alpha")[0].metadata["page"] = 1

    source["source"] = "changed.txt"
    assert chunk.metadata["source"] == "knowledge.txt"
    assert hash(chunk) == hash(KnowledgeChunk(text="Alpha", metadata={"source": "x"}))


def test_missing_source_is_fatal():
    with pytest.raises(KnowledgeSourceError):
        load_knowledge_text("/nonexistent/knowledge.txt")


def test_whitespace_source_is_fatal():
    path = _write_temp("  \n\n\t\n  ")
    try:
        with pytest.raises(KnowledgeSourceError):
            load_chunks(path)
    finally:
        os.unlink(path)


def test_load_chunks_reads_utf8_file():
    path = _write_temp("Pendaftaran mitra BPS dibuka 1 Januari 2026.\n\nSyarat: KTP 🙏")
    try:
        chunks = load_chunks(path)
    finally:
        os.unlink(path)
    assert len(chunks) == 2
    assert chunks[1].text == "Syarat: KTP 🙏"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
