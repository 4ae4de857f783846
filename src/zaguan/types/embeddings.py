"""Embeddings and moderation models."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Embedding",
    "EmbeddingsUsage",
    "EmbeddingsResponse",
    "ModerationResult",
    "ModerationResponse",
]


class Embedding(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "embedding"
    # list of floats, or a base64 string with encoding_format="base64"
    embedding: Union[list[float], str]
    index: int = 0


class EmbeddingsUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    total_tokens: int = 0


class EmbeddingsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "list"
    data: list[Embedding] = Field(default_factory=list)
    model: str
    usage: Optional[EmbeddingsUsage] = None


class ModerationResult(BaseModel):
    """
    Verdict for one input. Category keys follow the provider
    (``hate``, ``self-harm/intent``, ...).
    """

    model_config = ConfigDict(extra="allow")

    flagged: bool
    categories: dict[str, bool] = Field(default_factory=dict)
    category_scores: dict[str, float] = Field(default_factory=dict)


class ModerationResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    model: str
    results: list[ModerationResult] = Field(default_factory=list)
