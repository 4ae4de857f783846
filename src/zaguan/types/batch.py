"""Batch job models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["BatchError", "BatchErrors", "BatchRequestCounts", "Batch", "BatchList"]


class BatchError(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str
    message: str
    param: Optional[str] = None
    line: Optional[int] = None


class BatchErrors(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "list"
    data: list[BatchError] = Field(default_factory=list)


class BatchRequestCounts(BaseModel):
    model_config = ConfigDict(extra="allow")

    total: int = 0
    completed: int = 0
    failed: int = 0


class Batch(BaseModel):
    """
    A batch job. ``status`` moves through validating, in_progress,
    finalizing and then completed, failed, expired or cancelled.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "batch"
    endpoint: str
    input_file_id: str
    completion_window: str
    status: str
    created_at: int
    errors: Optional[BatchErrors] = None
    output_file_id: Optional[str] = None
    error_file_id: Optional[str] = None
    in_progress_at: Optional[int] = None
    expires_at: Optional[int] = None
    finalizing_at: Optional[int] = None
    completed_at: Optional[int] = None
    failed_at: Optional[int] = None
    expired_at: Optional[int] = None
    cancelling_at: Optional[int] = None
    cancelled_at: Optional[int] = None
    request_counts: Optional[BatchRequestCounts] = None
    metadata: Optional[dict[str, Any]] = None


class BatchList(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "list"
    data: list[Batch] = Field(default_factory=list)
    first_id: Optional[str] = None
    last_id: Optional[str] = None
    has_more: bool = False
