"""Deal health snapshot schema."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import UTCDateTime

RiskLevel = Literal["low", "medium", "high", "critical"]
Bottleneck = Literal[
    "candidate_response",
    "client_review",
    "interview_scheduling",
    "offer_pending",
    "recruiter_action",
    "client_decision",
]


class DealHealth(BaseModel):
    """Recomputable risk snapshot for one submission."""

    submission_id: str
    health_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    bottleneck: Bottleneck | None = None
    bottleneck_days: int = 0
    days_since_last_activity: int = 0
    drop_off_probability: int = Field(default=5, ge=0, le=100)
    risk_factors: list[str] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list)
    assessment: str = ""
    calculated_at: UTCDateTime

    model_config = ConfigDict(extra="forbid")
