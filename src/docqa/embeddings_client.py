from __future__ import annotations

import logging
from typing import List, Optional

from openai import APIConnectionError, APITimeoutError, InternalServerError, OpenAI, RateLimitError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from docqa.config import Settings, get_settings

log = logging.getLogger("docqa.embeddings")

TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)


class EmbeddingsClient:
    """
    Thin, retry-safe wrapper for generating embeddings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[OpenAI] = None,
        batch_size: int = 64,
    ) -> None:
        settings = settings or get_settings()
        self._client = client or OpenAI(api_key=settings.require_openai_key())
        self._model = settings.openai_embedding_model
        self._dimensions = settings.embedding_dimensions
        self._batch_size = batch_size

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _create(self, inputs: List[str]) -> List[List[float]]:
        kwargs = {"model": self._model, "input": inputs}
        # Only the text-embedding-3 family accepts a dimensions override
        if self._model.startswith("text-embedding-3"):
            kwargs["dimensions"] = self._dimensions

        resp = self._client.embeddings.create(**kwargs)

        try:
            data = sorted(resp.data, key=lambda d: d.index)
            vectors = [list(d.embedding) for d in data]
        except Exception as e:
            raise RuntimeError("Invalid embedding response") from e

        if len(vectors) != len(inputs):
            raise RuntimeError(f"Expected {len(inputs)} embeddings, got {len(vectors)}")
        for vec in vectors:
            if len(vec) != self._dimensions:
                raise RuntimeError(
                    f"Embedding dimension mismatch: expected {self._dimensions}, got {len(vec)}"
                )
        return vectors

    def embed_text(self, text: str) -> List[float]:
        """
        Generate a single embedding vector for the given text.
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        log.debug("Embedding text (%d chars)", len(text))
        return self._create([text])[0]

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """
        Embed many texts, batched, preserving input order.
        """
        if not texts:
            return []
        if any(not t or not t.strip() for t in texts):
            raise ValueError("Cannot embed empty text")

        vectors: List[List[float]] = []
        for start in range(0, len(texts), self._batch_size):
            batch = texts[start:start + self._batch_size]
            log.debug("Embedding batch of %d texts", len(batch))
            vectors.extend(self._create(batch))
        return vectors
