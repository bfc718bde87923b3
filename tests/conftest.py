"""Shared pytest fixtures."""

from typing import List

import pytest

from docqa.config import Settings, get_settings

ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_EMBEDDING_MODEL",
    "EMBEDDING_DIMENSIONS",
    "CHROMA_DIR",
    "CHROMA_HOST",
    "CHROMA_PORT",
    "CHROMA_COLLECTION",
    "TOP_K",
    "CHUNK_SIZE",
    "CHUNK_OVERLAP",
    "LOG_LEVEL",
    "AWS_SESSION_TOKEN",
    "PARAMETERS_SECRETS_EXTENSION_HTTP_PORT",
    "OPENAI_SECRET_ID",
    "OPENAI_SECRET_KEY",
    "SECRETS_PRELOAD_CONFIG",
    "AWS_LAMBDA_FUNCTION_NAME",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and cached settings."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CHROMA_DIR", str(tmp_path / "vectorstore"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path):
    """Settings with a fake key and tiny embeddings."""
    return Settings(
        openai_api_key="sk-test-0123456789",
        embedding_dimensions=3,
        chroma_dir=tmp_path / "chroma",
    )


class FakeEmbedder:
    """Deterministic keyword-count embedder (python, secret, lambda)."""

    model = "fake-embedding"
    dimensions = 3

    def _vec(self, text: str) -> List[float]:
        t = text.lower()
        return [t.count("python") + 0.01, t.count("secret") + 0.01, t.count("lambda") + 0.01]

    def embed_text(self, text: str) -> List[float]:
        if not text.strip():
            raise ValueError("Cannot embed empty text")
        return self._vec(text)

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        return [self._vec(t) for t in texts]


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def store(settings):
    """Chroma store in a temp directory (requires chromadb)."""
    pytest.importorskip("chromadb", reason="This fixture requires chromadb")
    from docqa.vectorstore_chroma import ChromaVectorStore

    return ChromaVectorStore(settings)
