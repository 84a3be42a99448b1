"""Interview invitation schema."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import UTCDateTime, utc_now

InterviewStatus = Literal["pending_response", "scheduled", "declined", "counter_proposed"]
SlotStatus = Literal["available", "selected", "expired"]
MeetingFormat = Literal["teams", "meet", "video", "phone", "onsite"]

TERMINAL_INTERVIEW_STATUSES: frozenset[str] = frozenset(
    {"scheduled", "declined", "counter_proposed"}
)


class ProposedSlot(BaseModel):
    datetime: UTCDateTime
    status: SlotStatus = "available"

    model_config = ConfigDict(extra="forbid")


class Interview(BaseModel):
    """One interview round offered to a candidate."""

    interview_id: str
    submission_id: str
    proposed_slots: list[ProposedSlot] = Field(default_factory=list)
    duration_minutes: int = 60
    meeting_format: MeetingFormat = "video"
    meeting_link: str | None = None
    onsite_address: str | None = None
    client_message: str | None = None
    status: InterviewStatus = "pending_response"
    scheduled_at: UTCDateTime | None = None
    selected_slot_index: int | None = None
    candidate_confirmed: bool = False
    counter_slots: list[UTCDateTime] = Field(default_factory=list)
    candidate_message: str | None = None
    decline_reason: str | None = None
    response_token: str
    token_consumed_at: UTCDateTime | None = None
    created_at: UTCDateTime = Field(default_factory=utc_now)
    responded_at: UTCDateTime | None = None

    model_config = ConfigDict(extra="forbid")

    @property
    def is_pending(self) -> bool:
        return self.status == "pending_response"
