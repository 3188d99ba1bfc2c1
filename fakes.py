"""
Offline stand-ins for the OpenAI embedding and chat services used by the tests.
"""
from typing import List

from app.llm_client import LanguageModel
from app.rag.embedder import Embedder

VOCABULARY = [
    "pendaftaran", "daftar", "mitra", "januari", "dibuka", "tes", "kompetensi",
    "akun", "sobat", "login", "dokumen", "pakta", "integritas", "jadwal", "langit",
]


class KeywordEmbedder(Embedder):
    """Bag-of-words vectors over a small fixed vocabulary."""

    def __init__(self):
        self.text_calls = 0
        self.query_calls = 0

    @staticmethod
    def vectorize(text: str) -> List[float]:
        lowered = text.lower()
        # Constant last dimension keeps every vector non-zero
        return [float(lowered.count(word)) for word in VOCABULARY] + [0.1]

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        self.text_calls += 1
        return [self.vectorize(t) for t in texts]

    async def embed_query(self, text: str) -> List[float]:
        self.query_calls += 1
        return self.vectorize(text)


class FailingEmbedder(Embedder):
    """Simulates the embedding service being down."""

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        raise RuntimeError("embedding service unavailable")

    async def embed_query(self, text: str) -> List[float]:
        raise RuntimeError("embedding service unavailable")


class ScriptedLanguageModel(LanguageModel):
    """Returns a fixed answer and records every prompt it receives."""

    def __init__(self, answer: str = "Pendaftaran mitra BPS dibuka pada 1 Januari 2026."):
        self.answer = answer
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer
