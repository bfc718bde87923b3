"""
AWS Lambda entry point: answer one question per invocation.

The OpenAI key is read through the Parameters and Secrets extension when
OPENAI_SECRET_ID is set, so cold starts avoid a Secrets Manager round trip.
"""
from __future__ import annotations

import base64
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from docqa.config import Settings, get_settings
from docqa.embeddings_client import EmbeddingsClient
from docqa.llm_client import LLMClient
from docqa.logging_utils import setup_logging
from docqa.rag import answer_question
from docqa.secret_fetcher import SecretFetchError, SecretsExtensionClient
from docqa.secrets_config import load_preload_config, warm_cache
from docqa.vectorstore_chroma import ChromaVectorStore

log = logging.getLogger("docqa.handler")

JSON_HEADERS = {"Content-Type": "application/json"}

_warmed = False


def _response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": JSON_HEADERS,
        "body": json.dumps(payload, ensure_ascii=False),
    }


def parse_event(event: Dict[str, Any]) -> Tuple[str, Optional[int]]:
    """
    Accept a direct invocation ({"question": ...}) or an API Gateway proxy event.
    """
    data: Any = event
    if "question" not in event and event.get("body") is not None:
        body = event["body"]
        if event.get("isBase64Encoded"):
            body = base64.b64decode(body).decode("utf-8")
        try:
            data = json.loads(body) if isinstance(body, str) else body
        except json.JSONDecodeError as e:
            raise ValueError("Request body is not valid JSON") from e

    if not isinstance(data, dict):
        raise ValueError("Request must be a JSON object")

    question = data.get("question")
    if not isinstance(question, str) or not question.strip():
        raise ValueError("Missing 'question'")

    top_k = data.get("top_k")
    if top_k is not None:
        try:
            top_k = int(top_k)
        except (TypeError, ValueError) as e:
            raise ValueError("'top_k' must be an integer") from e
        if top_k < 1:
            raise ValueError("'top_k' must be >= 1")

    return question.strip(), top_k


def resolve_settings(client: Optional[SecretsExtensionClient] = None) -> Settings:
    """
    Settings with the OpenAI key taken from the secrets extension when configured.
    """
    settings = get_settings()
    secret_id = os.getenv("OPENAI_SECRET_ID")
    if not secret_id:
        settings.require_openai_key()
        return settings

    key_name = os.getenv("OPENAI_SECRET_KEY", "OPENAI_API_KEY")
    if client is not None:
        api_key = client.get_secret_value(secret_id, key_name)
    else:
        with SecretsExtensionClient() as own_client:
            api_key = own_client.get_secret_value(secret_id, key_name)

    return settings.model_copy(update={"openai_api_key": api_key})


def warm_up_secrets() -> None:
    """
    On the first invocation, preload the secrets listed in SECRETS_PRELOAD_CONFIG.
    """
    global _warmed
    if _warmed:
        return
    _warmed = True

    config_path = os.getenv("SECRETS_PRELOAD_CONFIG")
    if not config_path:
        return

    try:
        config = load_preload_config(Path(config_path))
        with SecretsExtensionClient(port=config.port) as client:
            warm_cache(config, client)
    except (OSError, ValueError, SecretFetchError) as e:
        log.warning("Skipping secrets warm-up: %s", e)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    try:
        settings = get_settings()
        setup_logging(settings.log_level)
    except (RuntimeError, ValueError) as e:
        log.error("Invalid configuration: %s", e)
        return _response(500, {"error": "Invalid configuration"})

    warm_up_secrets()

    try:
        question, top_k = parse_event(event or {})
    except ValueError as e:
        return _response(400, {"error": str(e)})

    try:
        settings = resolve_settings()
    except (SecretFetchError, RuntimeError) as e:
        log.error("Could not resolve OpenAI credentials: %s", e)
        return _response(500, {"error": "Could not load credentials"})

    try:
        answer = answer_question(
            question,
            top_k,
            embedder=EmbeddingsClient(settings),
            store=ChromaVectorStore(settings),
            llm=LLMClient(settings),
        )
    except Exception:
        log.exception("Failed to answer question")
        return _response(500, {"error": "Internal error"})

    return _response(200, answer.model_dump(mode="json"))
