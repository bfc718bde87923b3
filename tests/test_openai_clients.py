"""Tests for the OpenAI embedding and completion wrappers."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from docqa.config import Settings
from docqa.embeddings_client import EmbeddingsClient
from docqa.llm_client import LLMClient
from docqa.prompts import SYSTEM_PROMPT


def embedding_response(vectors, order=None):
    order = order or list(range(len(vectors)))
    return SimpleNamespace(data=[SimpleNamespace(index=i, embedding=vectors[i]) for i in order])


@pytest.fixture
def openai_client():
    return MagicMock()


class TestEmbeddingsClient:
    def test_embed_text(self, settings, openai_client):
        openai_client.embeddings.create.return_value = embedding_response([[0.1, 0.2, 0.3]])
        embedder = EmbeddingsClient(settings, client=openai_client)

        assert embedder.embed_text("Hello world") == [0.1, 0.2, 0.3]
        openai_client.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small",
            input=["Hello world"],
            dimensions=3,
        )

    def test_legacy_model_gets_no_dimensions(self, tmp_path, openai_client):
        settings = Settings(
            openai_api_key="sk-test-0123456789",
            openai_embedding_model="text-embedding-ada-002",
            embedding_dimensions=3,
        )
        openai_client.embeddings.create.return_value = embedding_response([[1.0, 0.0, 0.0]])

        EmbeddingsClient(settings, client=openai_client).embed_text("hi")
        assert "dimensions" not in openai_client.embeddings.create.call_args.kwargs

    def test_embed_texts_preserves_order(self, settings, openai_client):
        openai_client.embeddings.create.return_value = embedding_response(
            [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], order=[1, 0]
        )
        vectors = EmbeddingsClient(settings, client=openai_client).embed_texts(["a", "b"])
        assert vectors == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]

    def test_embed_texts_batches(self, settings, openai_client):
        def create(model, input, dimensions):
            return embedding_response([[float(len(t)), 0.0, 0.0] for t in input])

        openai_client.embeddings.create.side_effect = create
        embedder = EmbeddingsClient(settings, client=openai_client, batch_size=2)

        vectors = embedder.embed_texts(["a", "bb", "ccc", "dddd", "eeeee"])
        assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert openai_client.embeddings.create.call_count == 3

    def test_embed_texts_empty(self, settings, openai_client):
        assert EmbeddingsClient(settings, client=openai_client).embed_texts([]) == []
        openai_client.embeddings.create.assert_not_called()

    def test_empty_text_rejected(self, settings, openai_client):
        embedder = EmbeddingsClient(settings, client=openai_client)
        with pytest.raises(ValueError):
            embedder.embed_text("   ")
        with pytest.raises(ValueError):
            embedder.embed_texts(["ok", ""])

    def test_dimension_mismatch(self, settings, openai_client):
        openai_client.embeddings.create.return_value = embedding_response([[0.1, 0.2]])
        with pytest.raises(RuntimeError, match="dimension"):
            EmbeddingsClient(settings, client=openai_client).embed_text("hi")

    def test_requires_api_key(self):
        with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
            EmbeddingsClient(Settings())


class TestLLMClient:
    def test_complete(self, settings, openai_client):
        openai_client.responses.create.return_value = SimpleNamespace(output_text="  The answer.  ")
        llm = LLMClient(settings, client=openai_client)

        assert llm.complete("augmented prompt") == "The answer."
        kwargs = openai_client.responses.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["input"] == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "augmented prompt"},
        ]

    def test_empty_output(self, settings, openai_client):
        openai_client.responses.create.return_value = SimpleNamespace(output_text="")
        with pytest.raises(RuntimeError, match="text output"):
            LLMClient(settings, client=openai_client).complete("prompt")

    def test_model_property(self, settings, openai_client):
        assert LLMClient(settings, client=openai_client).model == "gpt-4o-mini"
