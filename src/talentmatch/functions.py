"""Named function handlers: request validation and dispatch to services."""

from __future__ import annotations

import enum
from typing import Any, Callable

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .core.interview import ResponseAction
from .dispatch import DispatchTable
from .errors import ConfigError, NotFound, ValidationFailed
from .schemas.common import UTCDateTime
from .services import DealHealthService, InfluenceService, InterviewService, MatchService


class Action(str, enum.Enum):
    CALCULATE_MATCH = "calculate-match"
    DEAL_HEALTH = "deal-health"
    INFLUENCE_ENGINE = "influence-engine"
    SEND_INTERVIEW_INVITATION = "send-interview-invitation"
    PROCESS_INTERVIEW_RESPONSE = "process-interview-response"
    SAVE_MATCHING_CONFIG = "save-matching-config"


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CalculateMatchRequest(_Request):
    candidate_id: str = Field(alias="candidateId", min_length=1)
    job_ids: list[str] = Field(alias="jobIds", min_length=1)
    config_profile: str = Field(default="default", alias="configProfile")


class DealHealthRequest(_Request):
    submission_id: str | None = None
    calculate_all: bool = False

    @model_validator(mode="after")
    def _require_target(self) -> "DealHealthRequest":
        if not self.submission_id and not self.calculate_all:
            raise ValueError("submission_id or calculate_all is required")
        return self


class InfluenceRequest(_Request):
    pass


class InvitationRequest(_Request):
    submission_id: str = Field(alias="submissionId", min_length=1)
    meeting_format: str = Field(alias="meetingFormat")
    duration_minutes: int = Field(alias="durationMinutes")
    proposed_slots: list[UTCDateTime] = Field(alias="proposedSlots")
    client_message: str | None = Field(default=None, alias="clientMessage")
    meeting_link: str | None = Field(default=None, alias="meetingLink")
    onsite_address: str | None = Field(default=None, alias="onsiteAddress")


class InterviewResponseRequest(_Request):
    action: ResponseAction
    response_token: str = Field(alias="responseToken", min_length=1)
    selected_slot_index: int | None = Field(default=None, alias="selectedSlotIndex")
    counter_slots: list[UTCDateTime] | None = Field(default=None, alias="counterSlots")
    decline_reason: str | None = Field(default=None, alias="declineReason")
    message: str | None = None


class SaveMatchingConfigRequest(_Request):
    profile: str = "default"
    config: dict[str, Any]
    strict: bool = False


def _validation_details(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": ".".join(str(part) for part in item["loc"]), "message": item["msg"]}
        for item in exc.errors()
    ]


class FunctionRegistry:
    """Resolve a function name to its handler and run it on a JSON payload."""

    def __init__(
        self,
        *,
        match_service: MatchService,
        deal_health_service: DealHealthService,
        influence_service: InfluenceService,
        interview_service: InterviewService,
    ) -> None:
        self._match = match_service
        self._deal_health = deal_health_service
        self._influence = influence_service
        self._interviews = interview_service
        self._logger = structlog.get_logger(__name__)
        self._handlers: DispatchTable[Action, Callable[[dict[str, Any]], dict[str, Any]]] = (
            DispatchTable(
                Action,
                {
                    Action.CALCULATE_MATCH: self._calculate_match,
                    Action.DEAL_HEALTH: self._deal_health_handler,
                    Action.INFLUENCE_ENGINE: self._influence_engine,
                    Action.SEND_INTERVIEW_INVITATION: self._send_invitation,
                    Action.PROCESS_INTERVIEW_RESPONSE: self._process_response,
                    Action.SAVE_MATCHING_CONFIG: self._save_matching_config,
                },
            )
        )

    def names(self) -> list[str]:
        return [action.value for action in self._handlers.actions()]

    def invoke(self, name: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            action = self._handlers.resolve(name)
        except ValueError:
            raise NotFound(f"Unknown function: {name}") from None
        self._logger.info("function.invoked", function=action.value)
        try:
            return self._handlers[action](payload or {})
        except ValidationError as exc:
            raise ValidationFailed("Invalid request", details=_validation_details(exc)) from exc
        except ConfigError as exc:
            raise ValidationFailed(str(exc), details=exc.issues or None) from exc

    def _calculate_match(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = CalculateMatchRequest.model_validate(payload)
        return self._match.calculate(
            candidate_id=request.candidate_id,
            job_ids=request.job_ids,
            profile=request.config_profile,
        )

    def _deal_health_handler(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = DealHealthRequest.model_validate(payload)
        if request.calculate_all:
            return {"success": True, "calculated": self._deal_health.recalculate_all()}
        snapshot = self._deal_health.recalculate(request.submission_id)
        return {"success": True, **snapshot.model_dump(mode="json")}

    def _influence_engine(self, payload: dict[str, Any]) -> dict[str, Any]:
        InfluenceRequest.model_validate(payload)
        return self._influence.run()

    def _send_invitation(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = InvitationRequest.model_validate(payload)
        return self._interviews.send_invitation(
            submission_id=request.submission_id,
            proposed_slots=request.proposed_slots,
            duration_minutes=request.duration_minutes,
            meeting_format=request.meeting_format,
            client_message=request.client_message,
            meeting_link=request.meeting_link,
            onsite_address=request.onsite_address,
        )

    def _process_response(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = InterviewResponseRequest.model_validate(payload)
        return self._interviews.respond(
            action=request.action,
            response_token=request.response_token,
            selected_slot_index=request.selected_slot_index,
            counter_slots=request.counter_slots,
            decline_reason=request.decline_reason,
            message=request.message,
        )

    def _save_matching_config(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = SaveMatchingConfigRequest.model_validate(payload)
        return self._match.save_config(
            record=request.config, profile=request.profile, strict=request.strict
        )


__all__ = [
    "Action",
    "CalculateMatchRequest",
    "DealHealthRequest",
    "FunctionRegistry",
    "InterviewResponseRequest",
    "InvitationRequest",
    "SaveMatchingConfigRequest",
]
