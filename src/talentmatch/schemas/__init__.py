"""Pydantic schema definitions for the recruiting data model."""

from __future__ import annotations

from .candidate import Candidate, LanguageSkill
from .common import UTCDateTime, to_utc, utc_now
from .health import DealHealth
from .influence import CandidateBehavior, InfluenceAlert, RecruiterInfluenceScore
from .interview import Interview, ProposedSlot
from .job import Job, LanguageRequirement
from .matching import DisplayPolicy, MatchingConfig
from .submission import STAGE_SEQUENCE, TERMINAL_STAGES, Submission

__all__ = [
    "Candidate",
    "CandidateBehavior",
    "DealHealth",
    "DisplayPolicy",
    "InfluenceAlert",
    "Interview",
    "Job",
    "LanguageRequirement",
    "LanguageSkill",
    "MatchingConfig",
    "ProposedSlot",
    "RecruiterInfluenceScore",
    "STAGE_SEQUENCE",
    "Submission",
    "TERMINAL_STAGES",
    "UTCDateTime",
    "to_utc",
    "utc_now",
]
