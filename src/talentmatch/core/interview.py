"""Interview response state machine.

Transitions are pure: each takes an ``Interview`` in ``pending_response`` and
returns an updated copy, or raises without touching the input. Persisting the
result atomically is the caller's job.
"""

from __future__ import annotations

import enum
from datetime import timedelta
from typing import Any, Iterable, Sequence

from ..errors import (
    InvalidCounterProposal,
    InvalidSlotSelection,
    InvitationAlreadyHandled,
    ValidationFailed,
)
from ..schemas import Interview, ProposedSlot
from ..schemas.common import to_utc

MAX_COUNTER_SLOTS = 3
MAX_PROPOSED_SLOTS = 5
MEETING_FORMATS: tuple[str, ...] = ("teams", "meet", "video", "phone", "onsite")


class ResponseAction(str, enum.Enum):
    ACCEPT = "accept"
    COUNTER = "counter"
    DECLINE = "decline"


def ensure_pending(interview: Interview) -> None:
    if not interview.is_pending:
        raise InvitationAlreadyHandled()


def new_interview(
    *,
    interview_id: str,
    submission_id: str,
    slots: Sequence[Any],
    duration_minutes: int,
    meeting_format: str,
    response_token: str,
    now: Any,
    meeting_link: str | None = None,
    onsite_address: str | None = None,
    client_message: str | None = None,
) -> Interview:
    """Validate an invitation and build its ``pending_response`` interview."""
    if not slots:
        raise ValidationFailed("At least one interview slot is required")
    if len(slots) > MAX_PROPOSED_SLOTS:
        raise ValidationFailed(f"At most {MAX_PROPOSED_SLOTS} interview slots can be proposed")
    if duration_minutes <= 0:
        raise ValidationFailed("Interview duration must be positive")
    if meeting_format not in MEETING_FORMATS:
        raise ValidationFailed(f"Unknown meeting format: {meeting_format!r}")
    if meeting_format == "onsite" and not onsite_address:
        raise ValidationFailed("Onsite interviews need an address")

    moments = [to_utc(slot) for slot in slots]
    if any(moment <= now for moment in moments):
        raise ValidationFailed("Interview slots must be in the future")

    return Interview(
        interview_id=interview_id,
        submission_id=submission_id,
        proposed_slots=[ProposedSlot(datetime=moment) for moment in moments],
        duration_minutes=duration_minutes,
        meeting_format=meeting_format,
        meeting_link=meeting_link,
        onsite_address=onsite_address,
        client_message=client_message,
        response_token=response_token,
        created_at=now,
    )


def accept(
    interview: Interview,
    selected_slot_index: int | None,
    *,
    now: Any,
    message: str | None = None,
) -> Interview:
    ensure_pending(interview)
    slots = interview.proposed_slots
    if selected_slot_index is None or not 0 <= selected_slot_index < len(slots):
        raise InvalidSlotSelection("Invalid slot selection")
    chosen = slots[selected_slot_index]
    if chosen.status == "expired" or chosen.datetime <= now:
        raise InvalidSlotSelection("The selected slot is no longer available")

    updated_slots = [
        slot.model_copy(update={"status": "selected"}) if index == selected_slot_index else slot
        for index, slot in enumerate(slots)
    ]
    return interview.model_copy(
        update={
            "status": "scheduled",
            "proposed_slots": updated_slots,
            "scheduled_at": chosen.datetime,
            "selected_slot_index": selected_slot_index,
            "candidate_confirmed": True,
            "candidate_message": message,
            "responded_at": now,
            "token_consumed_at": now,
        }
    )


def counter(
    interview: Interview,
    counter_slots: Iterable[Any] | None,
    *,
    now: Any,
    message: str | None = None,
) -> Interview:
    ensure_pending(interview)
    moments = [to_utc(slot) for slot in counter_slots or []]
    if not 1 <= len(moments) <= MAX_COUNTER_SLOTS:
        raise InvalidCounterProposal(
            f"Please propose between 1 and {MAX_COUNTER_SLOTS} alternative slots"
        )
    if any(moment <= now for moment in moments):
        raise InvalidCounterProposal("Alternative slots must be in the future")
    return interview.model_copy(
        update={
            "status": "counter_proposed",
            "counter_slots": moments,
            "candidate_message": message,
            "responded_at": now,
            "token_consumed_at": now,
        }
    )


def decline(
    interview: Interview,
    *,
    now: Any,
    reason: str | None = None,
    message: str | None = None,
) -> Interview:
    ensure_pending(interview)
    return interview.model_copy(
        update={
            "status": "declined",
            "decline_reason": reason,
            "candidate_message": message,
            "responded_at": now,
            "token_consumed_at": now,
        }
    )


def slot_views(interview: Interview, *, now: Any) -> list[dict[str, Any]]:
    """Slots as the candidate sees them; past available slots read as expired."""
    views = []
    for index, slot in enumerate(interview.proposed_slots):
        status = slot.status
        if status == "available" and slot.datetime <= now:
            status = "expired"
        views.append({"index": index, "datetime": slot.datetime.isoformat(), "status": status})
    return views


def _ical_timestamp(value: Any) -> str:
    return to_utc(value).strftime("%Y%m%dT%H%M%SZ")


def _ical_escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def render_ical(interview: Interview, *, title: str, description: str, now: Any) -> str:
    """Render a scheduled interview as a single-event iCalendar document."""
    if interview.scheduled_at is None:
        raise ValueError("Only scheduled interviews can be rendered")
    start = interview.scheduled_at
    end = start + timedelta(minutes=interview.duration_minutes)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//talentmatch//interview//EN",
        "BEGIN:VEVENT",
        f"UID:{interview.interview_id}@talentmatch",
        f"DTSTAMP:{_ical_timestamp(now)}",
        f"DTSTART:{_ical_timestamp(start)}",
        f"DTEND:{_ical_timestamp(end)}",
        f"SUMMARY:{_ical_escape(title)}",
        f"DESCRIPTION:{_ical_escape(description)}",
    ]
    location = interview.onsite_address or interview.meeting_link
    if location:
        lines.append(f"LOCATION:{_ical_escape(location)}")
    lines.extend(["STATUS:CONFIRMED", "END:VEVENT", "END:VCALENDAR"])
    return "\r\n".join(lines) + "\r\n"
