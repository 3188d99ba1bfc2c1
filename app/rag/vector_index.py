"""
In-process vector index over knowledge chunks.

Holds (chunk, embedding) pairs for the lifetime of the process and answers
top-k similarity queries. The storage backend is pluggable:

    - memory: plain Python list with cosine similarity (default)
    - chroma: ChromaDB ephemeral (non-persistent) collection, cosine space

A build always fills a fresh backend and swaps it in only once every chunk
has been embedded and stored, so queries never see a partial index.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .chunker import KnowledgeChunk
from .embedder import Embedder

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3


class IndexNotLoadedError(RuntimeError):
    """Raised when querying an index that has not been built."""


@dataclass(frozen=True)
class EmbeddedChunk:
    chunk: KnowledgeChunk
    vector: Tuple[float, ...]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class InMemoryBackend:
    """List-backed store ranked by cosine similarity.

    Ranking uses a stable sort, so equal scores keep original chunk order.
    """

    name = "memory"

    def __init__(self):
        self._items: List[EmbeddedChunk] = []

    def add(self, chunks: List[KnowledgeChunk], embeddings: List[List[float]]) -> int:
        for chunk, vector in zip(chunks, embeddings):
            self._items.append(EmbeddedChunk(chunk=chunk, vector=tuple(vector)))
        return len(chunks)

    def search(self, query_vector: List[float], k: int) -> List[Tuple[KnowledgeChunk, float]]:
        if k <= 0:
            return []
        scored = [(item.chunk, cosine_similarity(query_vector, item.vector)) for item in self._items]
        ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)
        return ranked[:k]

    def count(self) -> int:
        return len(self._items)

    def discard(self) -> None:
        self._items = []


class ChromaBackend:
    """ChromaDB ephemeral collection using cosine distance.

    Each backend owns a uniquely named collection because ephemeral clients
    in one process share the same in-memory system.
    """

    name = "chroma"

    def __init__(self, client=None):
        if client is None:
            import chromadb
            client = chromadb.EphemeralClient()
        self._client = client
        self._chunks: List[KnowledgeChunk] = []
        self.collection_name = f"knowledge_chunks_{uuid.uuid4().hex[:12]}"
        self._collection = client.get_or_create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    def add(self, chunks: List[KnowledgeChunk], embeddings: List[List[float]]) -> int:
        offset = len(self._chunks)
        ids = [str(offset + i) for i in range(len(chunks))]
        self._collection.add(
            ids=ids,
            embeddings=[list(v) for v in embeddings],
            documents=[c.text for c in chunks],
        )
        self._chunks.extend(chunks)
        logger.info(f"[INDEX] Added {len(ids)} chunks to collection '{self.collection_name}'")
        return len(ids)

    def search(self, query_vector: List[float], k: int) -> List[Tuple[KnowledgeChunk, float]]:
        n_results = min(k, len(self._chunks))
        if n_results <= 0:
            return []

        results = self._collection.query(
            query_embeddings=[list(query_vector)],
            n_results=n_results,
            include=["distances"],
        )

        parsed = []
        if results and results["ids"] and results["ids"][0]:
            for i, chunk_id in enumerate(results["ids"][0]):
                distance = results["distances"][0][i]
                parsed.append((self._chunks[int(chunk_id)], 1 - distance))
        return parsed

    def count(self) -> int:
        return len(self._chunks)

    def discard(self) -> None:
        try:
            self._client.delete_collection(self.collection_name)
        except Exception as e:
            logger.warning(f"[INDEX] Could not delete collection '{self.collection_name}': {e}")
        self._chunks = []


_BACKENDS = {
    "memory": InMemoryBackend,
    "chroma": ChromaBackend,
}


def get_backend_factory(name: str) -> Callable:
    """Return the backend class registered under name."""
    factory = _BACKENDS.get(name)
    if factory is None:
        raise ValueError(f"Unknown retrieval backend: {name}")
    return factory


class VectorIndex:
    """Owns the embedded chunks and answers similarity queries."""

    def __init__(self, embedder: Embedder, backend_factory: Optional[Callable] = None):
        self.embedder = embedder
        self._backend_factory = backend_factory or InMemoryBackend
        self._backend = None

    @property
    def is_loaded(self) -> bool:
        return self._backend is not None

    def __len__(self) -> int:
        return self._backend.count() if self._backend is not None else 0

    async def build(self, chunks: List[KnowledgeChunk]) -> int:
        """Embed every chunk and replace the current contents atomically.

        Embedding failures propagate to the caller and leave the index as it
        was before the call.

        Returns:
            Number of chunks stored.
        """
        if not chunks:
            raise ValueError("Cannot build an index from zero chunks")

        embeddings = await self.embedder.embed_texts([c.text for c in chunks])
        if len(embeddings) != len(chunks):
            raise ValueError(
                f"Embedder returned {len(embeddings)} vectors for {len(chunks)} chunks"
            )

        backend = self._backend_factory()
        backend.add(chunks, embeddings)

        previous, self._backend = self._backend, backend
        if previous is not None:
            previous.discard()

        logger.info(f"[INDEX] Built {backend.name} index with {backend.count()} chunks")
        return backend.count()

    async def query_with_scores(
        self, text: str, k: int = DEFAULT_TOP_K
    ) -> List[Tuple[KnowledgeChunk, float]]:
        """Return up to k (chunk, similarity) pairs, most similar first."""
        backend = self._backend
        if backend is None:
            raise IndexNotLoadedError("Vector index has not been built")

        query_vector = await self.embedder.embed_query(text)
        return backend.search(query_vector, k)

    async def query(self, text: str, k: int = DEFAULT_TOP_K) -> List[KnowledgeChunk]:
        """Return up to k chunks most similar to text."""
        return [chunk for chunk, _ in await self.query_with_scores(text, k)]
