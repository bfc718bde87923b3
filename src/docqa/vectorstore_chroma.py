from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Set

import chromadb

from docqa.config import Settings, get_settings
from docqa.models import Chunk, RetrievedChunk

log = logging.getLogger("docqa.vectorstore")


def chunk_metadata(chunk: Chunk) -> dict:
    """
    Chroma metadata must be scalar values only (no None, lists or dicts).
    """
    return {
        "source": chunk.source,
        "title": chunk.title or "",
        "chunk_index": chunk.index,
    }


class ChromaVectorStore:
    """
    Chroma collection holding (chunk text, embedding) records.

    Uses an embedded persistent client by default, or an HTTP client when a
    host is configured (self-hosted or managed Chroma server).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        persist_dir: Optional[Path] = None,
        collection_name: Optional[str] = None,
    ) -> None:
        settings = settings or get_settings()
        self.collection_name = collection_name or settings.chroma_collection

        if settings.chroma_host and persist_dir is None:
            self.location = f"http://{settings.chroma_host}:{settings.chroma_port}"
            self._client = chromadb.HttpClient(host=settings.chroma_host, port=settings.chroma_port)
        else:
            path = Path(persist_dir or settings.chroma_dir)
            path.mkdir(parents=True, exist_ok=True)
            self.location = str(path)
            self._client = chromadb.PersistentClient(path=str(path))

        self._collection = self._client.get_or_create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    def count(self) -> int:
        return self._collection.count()

    def existing_ids(self) -> Set[str]:
        if self.count() == 0:
            return set()
        return set(self._collection.get(include=[])["ids"])

    def add_chunks(self, chunks: Sequence[Chunk], vectors: Sequence[Sequence[float]]) -> None:
        """
        Upsert chunks with their embeddings. Each chunk needs exactly one vector.
        """
        if len(chunks) != len(vectors):
            raise ValueError(f"Got {len(chunks)} chunks but {len(vectors)} embeddings")
        if not chunks:
            return

        self._collection.upsert(
            ids=[c.id for c in chunks],
            embeddings=[list(v) for v in vectors],
            documents=[c.text for c in chunks],
            metadatas=[chunk_metadata(c) for c in chunks],
        )
        log.debug("Upserted %d chunks into %s", len(chunks), self.collection_name)

    def query(self, vector: Sequence[float], top_k: int = 4) -> List[RetrievedChunk]:
        """
        k-nearest-neighbour search. Returns hits ordered by decreasing similarity.
        """
        if top_k < 1:
            raise ValueError("top_k must be >= 1")

        total = self.count()
        if total == 0:
            return []

        results = self._collection.query(
            query_embeddings=[list(vector)],
            n_results=min(top_k, total),
            include=["metadatas", "documents", "distances"],
        )

        hits: List[RetrievedChunk] = []
        ids = results["ids"][0]
        for i in range(len(ids)):
            meta = results["metadatas"][0][i] or {}
            hits.append(
                RetrievedChunk(
                    rank=i + 1,
                    score=1.0 - results["distances"][0][i],
                    text=results["documents"][0][i] or "",
                    source=meta.get("source", ""),
                    chunk_index=int(meta.get("chunk_index", 0)),
                    title=meta.get("title") or None,
                )
            )
        return hits

    def delete_source(self, source: str) -> None:
        self._collection.delete(where={"source": source})

    def reset(self) -> None:
        """Drop and recreate the collection."""
        self._client.delete_collection(self.collection_name)
        self._collection = self._client.get_or_create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": "cosine"},
        )
