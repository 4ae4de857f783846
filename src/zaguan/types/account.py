"""Model catalogue and credits accounting models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "ModelInfo",
    "ModelCapabilities",
    "CreditsBalance",
    "CreditsHistoryEntry",
    "CreditsHistory",
    "UsageBreakdown",
    "CreditsStatsEntry",
    "CreditsStatsSummary",
    "CreditsStats",
]


class ModelInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "model"
    owned_by: Optional[str] = None
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class ModelCapabilities(BaseModel):
    model_config = ConfigDict(extra="allow")

    model_id: str
    supports_vision: bool = False
    supports_tools: bool = False
    supports_reasoning: bool = False
    max_context_tokens: Optional[int] = None
    supports_audio_in: Optional[bool] = None
    supports_audio_out: Optional[bool] = None
    provider_specific: Optional[dict[str, Any]] = None


class CreditsBalance(BaseModel):
    """Remaining credits plus the access tier and the bands it unlocks."""

    model_config = ConfigDict(extra="allow")

    credits_remaining: float
    tier: str
    bands: list[str] = Field(default_factory=list)
    reset_date: Optional[str] = None
    stripe_price_id: Optional[str] = None


class CreditsHistoryEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    timestamp: str
    request_id: str
    model: str
    provider: str
    band: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    credits_debited: float = 0
    cost: float = 0
    latency_ms: float = 0
    status: str = ""


class CreditsHistory(BaseModel):
    model_config = ConfigDict(extra="allow")

    entries: list[CreditsHistoryEntry] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0


class UsageBreakdown(BaseModel):
    model_config = ConfigDict(extra="allow")

    requests: int = 0
    tokens: int = 0
    credits: float = 0
    cost: float = 0


class CreditsStatsEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    period: str
    total_requests: int = 0
    total_tokens: int = 0
    total_credits: float = 0
    total_cost: float = 0
    by_model: Optional[dict[str, UsageBreakdown]] = None
    by_provider: Optional[dict[str, UsageBreakdown]] = None
    by_band: Optional[dict[str, UsageBreakdown]] = None


class CreditsStatsSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_requests: int = 0
    total_tokens: int = 0
    total_credits: float = 0
    total_cost: float = 0


class CreditsStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    stats: list[CreditsStatsEntry] = Field(default_factory=list)
    summary: CreditsStatsSummary = Field(default_factory=CreditsStatsSummary)
