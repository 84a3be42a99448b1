"""Error hierarchy shared by the function handlers and the HTTP surface."""

from __future__ import annotations

from typing import Any


class FunctionError(Exception):
    """Base error carrying the HTTP status a handler failure maps to."""

    status_code: int = 500

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(FunctionError):
    status_code = 400


class Unauthorized(FunctionError):
    status_code = 401


class NotFound(FunctionError):
    status_code = 404


class InvitationAlreadyHandled(FunctionError):
    """Raised when an interview has left ``pending_response``."""

    status_code = 409

    def __init__(self, message: str = "This invitation was already handled") -> None:
        super().__init__(message)


class InvalidSlotSelection(ValidationFailed):
    """Raised when an accepted slot is unknown, expired or in the past."""


class InvalidCounterProposal(ValidationFailed):
    """Raised when counter slots are missing, too many or not in the future."""


class StageTransitionError(FunctionError):
    status_code = 409


class ConfigError(ValueError):
    """Raised for matching configurations that cannot be used."""

    def __init__(self, message: str, *, issues: list[str] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []


__all__ = [
    "ConfigError",
    "FunctionError",
    "InvalidCounterProposal",
    "InvalidSlotSelection",
    "InvitationAlreadyHandled",
    "NotFound",
    "StageTransitionError",
    "Unauthorized",
    "ValidationFailed",
]
