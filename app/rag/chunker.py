"""
Chunker module for splitting the knowledge text file into passages.

The knowledge source is a plain UTF-8 text file where passages are separated
by blank lines. Each non-empty paragraph becomes one chunk that is embedded
and retrieved independently.

A missing or empty knowledge file is a deployment error: the bot has nothing
to serve, so loading raises KnowledgeSourceError instead of degrading.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping

logger = logging.getLogger(__name__)

# Two or more consecutive newlines mark a paragraph break
PARAGRAPH_BREAK = re.compile(r"\n{2,}")


class KnowledgeSourceError(Exception):
    """Raised when the knowledge source is missing or has no content."""


@dataclass(frozen=True)
class KnowledgeChunk:
    """One indexable passage of the knowledge source."""
    text: str
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Read-only copy so a chunk cannot change once indexed
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


def split_into_chunks(text: str) -> List[KnowledgeChunk]:
    """Split raw knowledge text into trimmed, non-empty paragraph chunks.

    Args:
        text: Full contents of the knowledge source.

    Returns:
        Chunks in source order.
    """
    normalized = text.replace("\r\n", "\n")
    chunks = []
    for piece in PARAGRAPH_BREAK.split(normalized):
        piece = piece.strip()
        if piece:
            chunks.append(KnowledgeChunk(text=piece))
    return chunks


def load_knowledge_text(path: str) -> str:
    """Read the knowledge source file.

    Raises:
        KnowledgeSourceError: If the file does not exist or is blank.
    """
    if not os.path.exists(path):
        raise KnowledgeSourceError(f"Knowledge source not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    if not content.strip():
        raise KnowledgeSourceError(f"Knowledge source is empty: {path}")

    return content


def load_chunks(path: str) -> List[KnowledgeChunk]:
    """Load the knowledge source and split it into chunks."""
    chunks = split_into_chunks(load_knowledge_text(path))
    if not chunks:
        raise KnowledgeSourceError(f"Knowledge source produced no chunks: {path}")

    logger.info(f"[CHUNKER] Created {len(chunks)} chunks from {path}")
    return chunks
