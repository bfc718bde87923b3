from __future__ import annotations

import hashlib
from typing import List

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docqa.models import Chunk, Document


def chunk_id(source: str, index: int) -> str:
    """
    Deterministic chunk ID so re-indexing the same source is idempotent.
    """
    digest = hashlib.sha1(source.encode("utf-8")).hexdigest()[:16]
    return f"{digest}-{index}"


def split_text(text: str, chunk_size: int = 1024, chunk_overlap: int = 200) -> List[str]:
    """
    Split on paragraphs, then lines, then words, then characters, so that no
    chunk is longer than chunk_size. Neighbouring chunks share up to
    chunk_overlap characters.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
    )
    return [c.strip() for c in splitter.split_text(text) if c.strip()]


def chunk_document(doc: Document, chunk_size: int = 1024, chunk_overlap: int = 200) -> List[Chunk]:
    return [
        Chunk(id=chunk_id(doc.source, i), source=doc.source, index=i, text=text, title=doc.title)
        for i, text in enumerate(split_text(doc.text, chunk_size, chunk_overlap))
    ]
