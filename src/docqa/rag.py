from __future__ import annotations

import logging
from typing import Optional

from docqa.embeddings_client import EmbeddingsClient
from docqa.llm_client import LLMClient
from docqa.models import Answer
from docqa.prompts import build_augmented_prompt, select_context
from docqa.search import semantic_search
from docqa.vectorstore_chroma import ChromaVectorStore

log = logging.getLogger("docqa.rag")


def answer_question(
    question: str,
    top_k: Optional[int] = None,
    *,
    embedder: Optional[EmbeddingsClient] = None,
    store: Optional[ChromaVectorStore] = None,
    llm: Optional[LLMClient] = None,
    max_context_chars: int = 12000,
) -> Answer:
    """
    Answer a question grounded in the indexed documents:
    embed -> top-k search -> augment prompt -> LLM completion.
    Raises on failure of any external call.
    """
    if not question or not question.strip():
        raise ValueError("Question must not be empty")

    hits = semantic_search(question, top_k, embedder=embedder, store=store)
    prompt = build_augmented_prompt(question, hits, max_context_chars=max_context_chars)

    llm = llm or LLMClient()
    completion = llm.complete(prompt)

    used = hits[:len(select_context(hits, max_context_chars))]
    log.info("Answered question with %d context chunks", len(used))
    return Answer(question=question.strip(), answer=completion, sources=used, model=llm.model)
