"""Job posting schema."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import UTCDateTime

RemotePolicy = Literal["remote", "hybrid", "onsite"]


class LanguageRequirement(BaseModel):
    code: str
    min_level: str = "b2"

    model_config = ConfigDict(extra="forbid")


class Job(BaseModel):
    """Job requirements scored against candidates."""

    job_id: str
    title: str = ""
    company_name: str = ""
    client_id: str | None = None
    industry: str | None = None
    must_have_skills: list[str] = Field(default_factory=list)
    nice_to_have_skills: list[str] = Field(default_factory=list)
    experience_min: float | None = None
    experience_max: float | None = None
    experience_level: str | None = None
    salary_min: float | None = None
    salary_max: float | None = None
    remote_policy: RemotePolicy | None = None
    start_date: UTCDateTime | None = None
    visa_sponsorship: bool = False
    onsite_required: bool = False
    required_languages: list[LanguageRequirement] = Field(default_factory=list)
    required_certifications: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")
