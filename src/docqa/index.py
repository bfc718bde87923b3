from __future__ import annotations

import logging
from typing import Iterable, Optional, Set

from docqa.chunking import chunk_document
from docqa.config import get_settings
from docqa.embeddings_client import EmbeddingsClient
from docqa.http_client import HttpFetcher
from docqa.loaders import iter_documents
from docqa.vectorstore_chroma import ChromaVectorStore

log = logging.getLogger("docqa.index")


def index_sources(
    sources: Iterable[str],
    *,
    store: Optional[ChromaVectorStore] = None,
    embedder: Optional[EmbeddingsClient] = None,
    fetcher: Optional[HttpFetcher] = None,
    chunk_size: Optional[int] = None,
    chunk_overlap: Optional[int] = None,
) -> dict:
    """
    Load sources (files, directories, URLs), chunk, embed and store them.
    Skips chunks already present in the store.
    A failing source is logged and counted; the run continues.
    """
    settings = get_settings()
    chunk_size = settings.chunk_size if chunk_size is None else chunk_size
    chunk_overlap = settings.chunk_overlap if chunk_overlap is None else chunk_overlap
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({chunk_overlap}) must be >= 0 and smaller than chunk_size ({chunk_size})")

    store = store or ChromaVectorStore()
    embedder = embedder or EmbeddingsClient()

    existing: Set[str] = store.existing_ids()

    documents = 0
    added = 0
    skipped_existing = 0
    failed = 0

    own_fetcher = fetcher is None
    fetcher = fetcher or HttpFetcher()

    try:
        for source in sources:
            try:
                for doc in iter_documents([source], fetcher=fetcher):
                    documents += 1
                    chunks = chunk_document(doc, chunk_size=chunk_size, chunk_overlap=chunk_overlap)

                    new_chunks = [c for c in chunks if c.id not in existing]
                    skipped_existing += len(chunks) - len(new_chunks)
                    if not new_chunks:
                        log.info("Already indexed: %s", doc.source)
                        continue

                    vectors = embedder.embed_texts([c.text for c in new_chunks])
                    store.add_chunks(new_chunks, vectors)

                    existing.update(c.id for c in new_chunks)
                    added += len(new_chunks)
                    log.info("Indexed %s (%d chunks)", doc.source, len(new_chunks))

            except Exception as e:
                failed += 1
                log.exception("Failed to index source %s: %s", source, e)
    finally:
        if own_fetcher:
            fetcher.close()

    summary = {
        "documents": documents,
        "chunks_added": added,
        "chunks_skipped_existing": skipped_existing,
        "failed": failed,
        "collection": f"{store.location}/{store.collection_name}",
    }
    log.info("Index finished: %s", summary)
    return summary
