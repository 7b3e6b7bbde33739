"""Probe diagnostics event model."""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ProbeEvent(BaseModel):
    """One probe of one candidate URL, as reported to a diagnostics sink."""

    model_config = ConfigDict(frozen=True)

    original_url: str
    candidate_url: str
    index: int = Field(..., ge=0, description="Position of the candidate in its chain")
    ok: bool
    file_id: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
