from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Document(BaseModel):
    """
    Raw text of one source (file path or URL), before chunking.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., min_length=1, description="File path or URL the text came from")
    text: str
    title: Optional[str] = None
    loaded_at: str = Field(default_factory=utc_now_iso)


class Chunk(BaseModel):
    """
    A segment of a Document. Each chunk is embedded exactly once.
    """

    id: str = Field(..., description="Stable ID derived from source + index")
    source: str
    index: int = Field(..., ge=0)
    text: str = Field(..., min_length=1)
    title: Optional[str] = None


class RetrievedChunk(BaseModel):
    """
    One similarity-search hit.
    """

    rank: int = Field(..., ge=1)
    score: float = Field(..., description="Cosine similarity (1 - distance)")
    text: str
    source: str
    chunk_index: int = 0
    title: Optional[str] = None


class Answer(BaseModel):
    question: str
    answer: str
    sources: List[RetrievedChunk] = Field(default_factory=list)
    model: Optional[str] = None


class SecretBundle(BaseModel):
    """
    Secret values returned by the secrets extension.

    `values` maps secret name -> value. A SecretString that is not a JSON
    object is kept as a single entry keyed by the secret id.
    """

    secret_id: str
    values: Dict[str, str] = Field(default_factory=dict)
    version_id: Optional[str] = None
    created_date: Optional[str] = None

    @field_validator("values", mode="before")
    @classmethod
    def stringify_values(cls, v: dict) -> dict:
        # Secrets Manager JSON may carry numbers/bools (e.g. "port": 5432)
        return {str(k): val if isinstance(val, str) else str(val) for k, val in (v or {}).items()}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def __repr__(self) -> str:
        return f"SecretBundle(secret_id={self.secret_id!r}, keys={sorted(self.values)!r})"

    __str__ = __repr__
