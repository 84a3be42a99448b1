"""Interview invitation and response workflows over the repository."""

from __future__ import annotations

import secrets
import uuid
from typing import Any, Callable, Sequence

import structlog

from ..core import interview as machine
from ..core.interview import ResponseAction
from ..dispatch import DispatchTable
from ..errors import (
    InvitationAlreadyHandled,
    NotFound,
    StageTransitionError,
    Unauthorized,
    ValidationFailed,
)
from ..schemas import Interview, Submission
from ..schemas.common import utc_now
from ..storage import Repository

TOKEN_BYTES = 16

SUBMISSION_STATUS_AFTER: dict[str, str] = {
    "scheduled": "interview_scheduled",
    "declined": "interview_declined",
    "counter_proposed": "interview_counter_proposed",
}


def generate_token() -> str:
    """Return a 32-character hex capability token."""
    return secrets.token_hex(TOKEN_BYTES)


class InterviewService:
    """Send invitations and commit candidate responses atomically."""

    def __init__(
        self,
        *,
        repository: Repository,
        public_base_url: str | None = None,
        now_provider: Callable[[], Any] | None = None,
        token_factory: Callable[[], str] | None = None,
    ) -> None:
        self._repository = repository
        self._base_url = (public_base_url or "http://localhost:8000").rstrip("/")
        self._now_provider = now_provider or utc_now
        self._token_factory = token_factory or generate_token
        self._logger = structlog.get_logger(__name__)
        self._responses = DispatchTable(
            ResponseAction,
            {
                ResponseAction.ACCEPT: self._accept,
                ResponseAction.COUNTER: self._counter,
                ResponseAction.DECLINE: self._decline,
            },
        )

    def response_urls(self, token: str) -> dict[str, str]:
        page = f"{self._base_url}/interview/respond/{token}"
        urls = {"view": page}
        for action in ResponseAction:
            urls[action.value] = f"{page}?action={action.value}"
        return urls

    def send_invitation(
        self,
        *,
        submission_id: str,
        proposed_slots: Sequence[Any],
        duration_minutes: int,
        meeting_format: str,
        client_message: str | None = None,
        meeting_link: str | None = None,
        onsite_address: str | None = None,
    ) -> dict[str, Any]:
        now = self._now_provider()
        token = self._token_factory()

        with self._repository.transaction():
            submission = self._repository.get_submission(submission_id)
            if submission is None:
                raise NotFound(f"Submission {submission_id} not found")
            interview = machine.new_interview(
                interview_id=uuid.uuid4().hex,
                submission_id=submission_id,
                slots=proposed_slots,
                duration_minutes=duration_minutes,
                meeting_format=meeting_format,
                response_token=token,
                now=now,
                meeting_link=meeting_link,
                onsite_address=onsite_address,
                client_message=client_message,
            )
            self._repository.add_interview(interview)
            self._repository.save_submission(self._advance(submission, now))

        self._logger.info(
            "interview.invited",
            interview_id=interview.interview_id,
            submission_id=submission_id,
            slots=len(interview.proposed_slots),
        )
        return {
            "success": True,
            "interviewId": interview.interview_id,
            "responseToken": token,
            "responseUrls": self.response_urls(token),
        }

    def _advance(self, submission: Submission, now: Any) -> Submission:
        if submission.is_terminal:
            raise StageTransitionError(
                f"Submission {submission.submission_id} is closed ({submission.stage})"
            )
        target = submission.stage
        if submission.stage == "submitted":
            target = "interview_1"
        elif submission.stage == "interview_1":
            previous = self._repository.list_interviews(submission.submission_id)
            if any(item.status == "scheduled" for item in previous):
                target = "interview_2"
        moved = submission.move_to(target, at=now) if target != submission.stage else submission
        return moved.model_copy(update={"status": "interview_requested", "updated_at": now})

    def _lookup(self, token: str) -> Interview:
        interview = self._repository.find_interview_by_token(token)
        if interview is None:
            raise Unauthorized("Invalid or expired response token")
        return interview

    def view(self, token: str) -> dict[str, Any]:
        """Read-only state of an invitation for the candidate-facing page."""
        interview = self._lookup(token)
        now = self._now_provider()
        return {
            "interviewId": interview.interview_id,
            "status": interview.status,
            "actionable": interview.is_pending,
            "slots": machine.slot_views(interview, now=now),
            "scheduledAt": interview.scheduled_at.isoformat() if interview.scheduled_at else None,
            "durationMinutes": interview.duration_minutes,
            "meetingFormat": interview.meeting_format,
            "clientMessage": interview.client_message,
        }

    def respond(
        self,
        *,
        action: ResponseAction | str,
        response_token: str,
        selected_slot_index: int | None = None,
        counter_slots: Sequence[Any] | None = None,
        decline_reason: str | None = None,
        message: str | None = None,
    ) -> dict[str, Any]:
        try:
            resolved = action if isinstance(action, ResponseAction) else self._responses.resolve(action)
        except ValueError:
            raise ValidationFailed(f"Unknown response action: {action!r}") from None
        interview = self._lookup(response_token)
        now = self._now_provider()
        updated = self._responses[resolved](
            interview,
            now=now,
            selected_slot_index=selected_slot_index,
            counter_slots=counter_slots,
            decline_reason=decline_reason,
            message=message,
        )

        with self._repository.transaction():
            if not self._repository.compare_and_set_interview(
                interview.interview_id, "pending_response", updated
            ):
                raise InvitationAlreadyHandled()
            submission = self._repository.get_submission(interview.submission_id)
            if submission is not None:
                self._repository.save_submission(
                    submission.model_copy(
                        update={
                            "status": SUBMISSION_STATUS_AFTER[updated.status],
                            "updated_at": now,
                        }
                    )
                )

        self._logger.info(
            "interview.transition",
            interview_id=interview.interview_id,
            submission_id=interview.submission_id,
            action=resolved.value,
            status=updated.status,
        )
        return self._response_payload(resolved, updated, now)

    def _event_text(self, interview: Interview) -> tuple[str, str]:
        submission = self._repository.get_submission(interview.submission_id)
        job = self._repository.get_job(submission.job_id) if submission else None
        if job is None:
            return "Interview", interview.client_message or "Interview appointment"
        title = f"Interview: {job.title}" if job.title else "Interview"
        company = f" at {job.company_name}" if job.company_name else ""
        return title, f"Interview for the {job.title} position{company}"

    @staticmethod
    def _accept(interview: Interview, *, now: Any, selected_slot_index: Any, message: Any, **_: Any) -> Interview:
        return machine.accept(interview, selected_slot_index, now=now, message=message)

    @staticmethod
    def _counter(interview: Interview, *, now: Any, counter_slots: Any, message: Any, **_: Any) -> Interview:
        return machine.counter(interview, counter_slots, now=now, message=message)

    @staticmethod
    def _decline(interview: Interview, *, now: Any, decline_reason: Any, message: Any, **_: Any) -> Interview:
        return machine.decline(interview, now=now, reason=decline_reason, message=message)

    def _response_payload(
        self, action: ResponseAction, interview: Interview, now: Any
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": True, "action": action.value, "status": interview.status}
        if action is ResponseAction.ACCEPT:
            payload["scheduledAt"] = interview.scheduled_at.isoformat()
            title, description = self._event_text(interview)
            payload["ical"] = machine.render_ical(
                interview, title=title, description=description, now=now
            )
        elif action is ResponseAction.COUNTER:
            payload["counterSlots"] = [slot.isoformat() for slot in interview.counter_slots]
        return payload
