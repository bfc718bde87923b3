from __future__ import annotations

import logging
from typing import List, Optional

from docqa.config import get_settings
from docqa.embeddings_client import EmbeddingsClient
from docqa.models import RetrievedChunk
from docqa.vectorstore_chroma import ChromaVectorStore

log = logging.getLogger("docqa.search")


def semantic_search(
    query: str,
    top_k: Optional[int] = None,
    *,
    embedder: Optional[EmbeddingsClient] = None,
    store: Optional[ChromaVectorStore] = None,
) -> List[RetrievedChunk]:
    """
    Perform semantic search over indexed chunks.
    Returns top-k hits with source metadata and cosine similarity score.
    """
    if not query or not query.strip():
        raise ValueError("Query must not be empty")

    if top_k is None:
        top_k = get_settings().top_k

    store = store or ChromaVectorStore()
    embedder = embedder or EmbeddingsClient()

    query_vec = embedder.embed_text(query)
    hits = store.query(query_vec, top_k=top_k)

    log.info("Search returned %d results", len(hits))
    return hits
