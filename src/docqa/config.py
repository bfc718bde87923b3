from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator


def _project_root() -> Path:
    """
    Resolve project root assuming this file lives in: <root>/src/docqa/config.py
    """
    return Path(__file__).resolve().parents[2]


class Settings(BaseModel):
    # Optional at load time: the Lambda handler can resolve it from the secrets extension
    openai_api_key: Optional[str] = Field(default=None, min_length=10, description="OpenAI API key")

    openai_model: str = Field(default="gpt-4o-mini")
    openai_embedding_model: str = Field(default="text-embedding-3-small")
    embedding_dimensions: int = Field(default=1536, gt=0)

    # Local persistent store unless a host is given (managed / remote Chroma)
    chroma_dir: Path = Field(default_factory=lambda: _project_root() / "data" / "vectorstore")
    chroma_host: Optional[str] = None
    chroma_port: int = Field(default=8000, gt=0)
    chroma_collection: str = Field(default="docqa", min_length=3)

    top_k: int = Field(default=4, ge=1)
    chunk_size: int = Field(default=1024, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @model_validator(mode="after")
    def overlap_below_size(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("CHUNK_OVERLAP must be smaller than CHUNK_SIZE")
        return self

    def require_openai_key(self) -> str:
        if not self.openai_api_key:
            raise RuntimeError(
                "OPENAI_API_KEY is not configured. Set it in the environment or .env, "
                "or resolve it through the secrets extension."
            )
        return self.openai_api_key


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Loads environment variables (optionally from .env) and validates Settings.

    IMPORTANT:
    - Do NOT hardcode secrets here.
    - Only fill variables in .env.
    """
    if env_file is None:
        env_file = _project_root() / ".env"

    # Load .env if present; environment variables override .env by default
    if env_file.exists():
        load_dotenv(env_file, override=False)

    data = {
        "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
        "openai_model": os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        "openai_embedding_model": os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"),
        "embedding_dimensions": os.getenv("EMBEDDING_DIMENSIONS", "1536"),
        "chroma_dir": os.getenv("CHROMA_DIR", str(_project_root() / "data" / "vectorstore")),
        "chroma_host": os.getenv("CHROMA_HOST") or None,
        "chroma_port": os.getenv("CHROMA_PORT", "8000"),
        "chroma_collection": os.getenv("CHROMA_COLLECTION", "docqa"),
        "top_k": os.getenv("TOP_K", "4"),
        "chunk_size": os.getenv("CHUNK_SIZE", "1024"),
        "chunk_overlap": os.getenv("CHUNK_OVERLAP", "200"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
    }

    try:
        return Settings(**data)
    except ValidationError as e:
        raise RuntimeError(
            "Invalid configuration. Check the environment variables documented in README.md.\n"
            f"Details:\n{e}"
        ) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Lazily loaded, process-wide settings (call ``get_settings.cache_clear()`` to reload)."""
    return load_settings()
