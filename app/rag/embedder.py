"""
Embedder module for generating OpenAI embeddings.

Embeds knowledge chunks at index build time and individual questions at
retrieval time. Both paths must go through the same Embedder instance so
that chunk and query vectors live in the same space.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

# OpenAI accepts up to 2048 inputs per embeddings request
MAX_BATCH_SIZE = 2048


class Embedder(ABC):
    """Converts text into fixed-length float vectors."""

    @abstractmethod
    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        raise NotImplementedError

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        raise NotImplementedError


def _get_openai_client() -> AsyncOpenAI:
    """Get an AsyncOpenAI client using the configured API key.

    Raises:
        ValueError: If OPENAI_API_KEY is not set.
    """
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        from app import config
        api_key = config.OPENAI_API_KEY

    if not api_key:
        raise ValueError("OPENAI_API_KEY not found in environment or app.config")

    return AsyncOpenAI(api_key=api_key)


class OpenAIEmbedder(Embedder):
    """Embedder backed by the OpenAI embeddings endpoint.

    The client is created on first use so a missing key surfaces as a
    load/query failure rather than an import error.
    """

    def __init__(self, model: str = DEFAULT_EMBEDDING_MODEL, client: Optional[AsyncOpenAI] = None):
        self.model = model
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = _get_openai_client()
        return self._client

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for a list of texts, batching per API limit."""
        embeddings: List[List[float]] = []
        total_tokens = 0

        for start in range(0, len(texts), MAX_BATCH_SIZE):
            batch = texts[start:start + MAX_BATCH_SIZE]
            response = await self.client.embeddings.create(model=self.model, input=batch)
            embeddings.extend(item.embedding for item in response.data)
            if getattr(response, "usage", None) is not None:
                total_tokens += response.usage.total_tokens

        logger.info(
            f"[EMBEDDER] Generated {len(embeddings)} embeddings "
            f"({self.model}), usage: {total_tokens} tokens"
        )
        return embeddings

    async def embed_query(self, text: str) -> List[float]:
        """Generate an embedding for a single query string."""
        response = await self.client.embeddings.create(model=self.model, input=text)
        return response.data[0].embedding
