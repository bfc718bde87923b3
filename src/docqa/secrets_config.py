from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from docqa.secret_fetcher import DEFAULT_PORT, SecretsExtensionClient

log = logging.getLogger("docqa.secrets_config")


class SecretsPreloadConfig(BaseModel):
    """
    Declarative list of secrets the extension should hold, plus its cache settings.
    Consumed at deploy time and by the cold-start warm-up, never per request.
    """

    secrets: List[str] = Field(..., min_length=1)
    cache_ttl_minutes: int = Field(default=10, gt=0)
    max_items: int = Field(default=1000, gt=0)
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)

    @field_validator("secrets")
    @classmethod
    def clean_secret_ids(cls, v: List[str]) -> List[str]:
        cleaned: List[str] = []
        for s in v:
            s = s.strip()
            if s and s not in cleaned:
                cleaned.append(s)
        if not cleaned:
            raise ValueError("at least one secret id is required")
        return cleaned


def load_preload_config(path: Path) -> SecretsPreloadConfig:
    if not path.exists():
        raise FileNotFoundError(f"Secrets config not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid secrets config {path}: {e}") from e

    try:
        return SecretsPreloadConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid secrets config {path}:\n{e}") from e


def dump_preload_config(config: SecretsPreloadConfig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config.model_dump(mode="json"), f, sort_keys=False)


def extension_environment(config: SecretsPreloadConfig) -> Dict[str, str]:
    """
    Environment variables for the function so the extension caches as configured.
    """
    return {
        "PARAMETERS_SECRETS_EXTENSION_CACHE_ENABLED": "true",
        "PARAMETERS_SECRETS_EXTENSION_CACHE_SIZE": str(config.max_items),
        "PARAMETERS_SECRETS_EXTENSION_HTTP_PORT": str(config.port),
        "SECRETS_MANAGER_TTL": str(config.cache_ttl_minutes * 60),
    }


def warm_cache(config: SecretsPreloadConfig, client: SecretsExtensionClient) -> Dict[str, str]:
    """
    Fetch every configured secret once so later reads hit the extension cache.
    Failures are logged and reported per secret.
    """
    status: Dict[str, str] = {}
    for secret_id in config.secrets:
        try:
            client.get_secret(secret_id)
            status[secret_id] = "ok"
        except Exception as e:
            log.warning("Could not preload secret %s: %s", secret_id, e)
            status[secret_id] = f"error: {type(e).__name__}"
    log.info("Secrets warm-up finished: %s", status)
    return status
