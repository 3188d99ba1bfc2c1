"""Knowledge base lifecycle: chunk the source file and build the vector index.

States run UNLOADED -> LOADING -> LOADED. LOADED is terminal until the
process restarts; a failed load returns to UNLOADED so a later query can
retry lazily.

No lock guards lazy loading: a query that arrives while another task is
LOADING starts its own load, and whichever successful build finishes last
is the one served. A load that fails while another has already swapped in a
complete index leaves the state LOADED.
"""
import logging
from enum import Enum

from app.rag.chunker import load_chunks
from app.rag.vector_index import VectorIndex

logger = logging.getLogger(__name__)


class KnowledgeBaseState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class KnowledgeBase:

    def __init__(self, source_path: str, index: VectorIndex):
        self.source_path = source_path
        self.index = index
        self.state = KnowledgeBaseState.UNLOADED
        self.chunk_count = 0

    @property
    def is_loaded(self) -> bool:
        return self.state == KnowledgeBaseState.LOADED

    async def load(self) -> int:
        """Chunk the knowledge source and build the index.

        Raises:
            KnowledgeSourceError: If the source file is missing or empty.
            Exception: Any embedding failure, unchanged.
        """
        self.state = KnowledgeBaseState.LOADING
        logger.info(f"[KB] Loading knowledge base from {self.source_path}")
        try:
            chunks = load_chunks(self.source_path)
            count = await self.index.build(chunks)
        except Exception:
            # An overlapping load may already have swapped in a full index
            if self.index.is_loaded:
                self.state = KnowledgeBaseState.LOADED
                self.chunk_count = len(self.index)
            else:
                self.state = KnowledgeBaseState.UNLOADED
            raise

        self.chunk_count = count
        self.state = KnowledgeBaseState.LOADED
        logger.info(f"[KB] Knowledge base loaded ({count} entries)")
        return count

    async def ensure_loaded(self) -> None:
        """Load on first use if startup did not."""
        if self.state != KnowledgeBaseState.LOADED:
            logger.warning(f"[KB] Knowledge base is {self.state.value}, loading on demand")
            await self.load()
