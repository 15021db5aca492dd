"""Usage logging data models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class AnalysisLog(BaseModel):
    """One analysis or apply action in an editing session."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str = "anonymous"
    timestamp: datetime = Field(default_factory=datetime.now)
    action: str  # "analyze" | "apply"
    document_version: int = 0
    writing_goal: str | None = None
    analyzers_run: int = 0
    analyzers_failed: int = 0
    suggestion_count: int = 0
    applied_count: int = 0
    stale_count: int = 0
    elapsed_seconds: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    superseded: bool = False
    success: bool = True
    error_message: str | None = None
