"""Submission schema and pipeline stage rules."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..errors import StageTransitionError
from .common import UTCDateTime, utc_now

Stage = Literal["submitted", "interview_1", "interview_2", "offer", "hired", "rejected"]
MatchPolicy = Literal["hot", "standard", "maybe", "hidden"]

STAGE_SEQUENCE: tuple[str, ...] = ("submitted", "interview_1", "interview_2", "offer", "hired")
TERMINAL_STAGES: frozenset[str] = frozenset({"hired", "rejected"})


class Submission(BaseModel):
    """One candidate's application to one job."""

    submission_id: str
    candidate_id: str
    job_id: str
    recruiter_id: str | None = None
    stage: Stage = "submitted"
    status: str = "active"
    match_score: float | None = None
    match_policy: MatchPolicy | None = None
    submitted_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)
    stage_entered_at: UTCDateTime | None = None
    opt_in_requested_at: UTCDateTime | None = None
    opt_in_response: str | None = None
    opt_in_responded_at: UTCDateTime | None = None
    consent_share_profile: bool = False
    consent_contact: bool = False

    model_config = ConfigDict(extra="forbid")

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES

    def can_move_to(self, stage: str) -> bool:
        if self.is_terminal or stage == self.stage:
            return False
        if stage == "rejected":
            return True
        if stage not in STAGE_SEQUENCE:
            return False
        return abs(STAGE_SEQUENCE.index(stage) - STAGE_SEQUENCE.index(self.stage)) == 1

    def move_to(self, stage: str, *, at=None) -> "Submission":
        """Return a copy in ``stage``; only adjacent steps or rejection are allowed."""
        if not self.can_move_to(stage):
            raise StageTransitionError(
                f"Cannot move submission {self.submission_id} from {self.stage} to {stage}"
            )
        moment = at or utc_now()
        return self.model_copy(
            update={"stage": stage, "stage_entered_at": moment, "updated_at": moment}
        )
