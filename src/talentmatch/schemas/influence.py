"""Engagement snapshots, influence alerts and recruiter scores."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import UTCDateTime, utc_now

AlertPriority = Literal["low", "medium", "high", "critical"]
EngagementLevel = Literal["very_high", "high", "neutral", "low"]


class CandidateBehavior(BaseModel):
    """Per-submission engagement snapshot, one row per submission."""

    submission_id: str
    candidate_id: str
    emails_sent: int = 0
    emails_opened: int = 0
    links_clicked: int = 0
    prep_materials_viewed: int = 0
    confidence_score: int = 50
    interview_readiness_score: int = 50
    closing_probability: int = 50
    engagement_level: EngagementLevel = "neutral"
    opt_in_response_time_hours: float | None = None
    days_since_engagement: int = 0
    last_engagement_at: UTCDateTime | None = None
    hesitation_signals: list[str] = Field(default_factory=list)
    motivation_indicators: list[str] = Field(default_factory=list)
    updated_at: UTCDateTime | None = None

    model_config = ConfigDict(extra="forbid")


class InfluenceAlert(BaseModel):
    alert_id: str
    submission_id: str
    recruiter_id: str | None = None
    alert_type: str
    priority: AlertPriority
    title: str
    message: str
    recommended_action: str
    expires_at: UTCDateTime | None = None
    is_dismissed: bool = False
    action_taken: str | None = None
    created_at: UTCDateTime = Field(default_factory=utc_now)

    model_config = ConfigDict(extra="forbid")


class RecruiterInfluenceScore(BaseModel):
    recruiter_id: str
    influence_score: int = Field(ge=0, le=100)
    opt_in_acceleration_rate: float = 0.0
    alerts_actioned: int = 0
    alerts_ignored: int = 0
    total_influenced_placements: int = 0
    calculated_at: UTCDateTime | None = None

    model_config = ConfigDict(extra="forbid")
