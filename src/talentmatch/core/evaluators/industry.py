"""Industry alignment, surfaced as the ``culture`` factor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import Candidate, Job


@dataclass
class IndustryConfig:
    match_score: float = 100.0
    mismatch_score: float = 50.0


class IndustryEvaluator:
    method = "industry"

    def __init__(self, *, config: IndustryConfig | None = None) -> None:
        self._config = config or IndustryConfig()

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = Candidate.model_validate(candidate)
        job = Job.model_validate(context["job"])
        industries = [item.strip().lower() for item in profile.industry_experience if item and item.strip()]
        target = (job.industry or "").strip().lower()

        if not industries or not target:
            return {
                "method": self.method,
                "scores": {},
                "gates": [],
                "metadata": {"status": "insufficient_data"},
            }

        matched = [item for item in industries if item in target or target in item]
        score = self._config.match_score if matched else self._config.mismatch_score
        return {
            "method": self.method,
            "scores": {"industry": score},
            "gates": [],
            "metadata": {"job_industry": target, "matched": matched},
        }
