from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import UTCDateTime

RemotePreference = Literal["remote_only", "remote", "hybrid", "onsite"]


class LanguageSkill(BaseModel):
    """Spoken language with a CEFR level or ``native``."""

    language: str
    level: str | None = None

    model_config = ConfigDict(extra="forbid")


class Candidate(BaseModel):
    """Candidate attributes the matching and alerting heuristics read."""

    candidate_id: str
    full_name: str = ""
    email: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience_years: float | None = None
    seniority: str | None = None
    industry_experience: list[str] = Field(default_factory=list)
    expected_salary: float | None = None
    current_salary: float | None = None
    commute_minutes: float | None = None
    remote_preference: RemotePreference | None = None
    availability_date: UTCDateTime | None = None
    visa_required: bool = False
    languages: list[LanguageSkill] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")
