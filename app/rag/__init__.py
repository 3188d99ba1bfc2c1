"""
RAG (Retrieval Augmented Generation) module for the knowledge-base bot.

Components:
    - chunker: Splits the knowledge text file into paragraph chunks
    - embedder: Generates embeddings via the OpenAI embeddings API
    - vector_index: In-process index (memory or ChromaDB ephemeral backend)
    - relevance: Keyword gate applied before retrieval
    - prompt: Builds the answer prompt with today's date and retrieved context
"""
