"""Years-of-experience evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import Candidate, Job
from .base import gate, resolve_config


@dataclass
class ExperienceConfig:
    penalty_per_year: float = 20.0
    overqualified_margin_years: float = 5.0
    overqualified_score: float = 70.0
    above_range_score: float = 85.0


class ExperienceEvaluator:
    """Compare candidate years of experience with the job's range."""

    method = "experience"

    def __init__(self, *, config: ExperienceConfig | None = None) -> None:
        self._config = config or ExperienceConfig()

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = Candidate.model_validate(candidate)
        job = Job.model_validate(context["job"])
        thresholds = resolve_config(context).gate_thresholds
        years = profile.experience_years

        if years is None or (job.experience_min is None and job.experience_max is None):
            return {
                "method": self.method,
                "scores": {},
                "gates": [],
                "metadata": {"status": "insufficient_data"},
            }

        minimum = job.experience_min or 0.0
        maximum = job.experience_max
        gates = []
        gap = 0.0

        if years < minimum:
            gap = minimum - years
            score = round(max(0.0, 100.0 - self._config.penalty_per_year * gap), 6)
            status = "under"
            if gap > thresholds.experience_fail_years:
                gates.append(gate("experience", "fail", f"{gap:g} years below the required minimum"))
            elif gap > thresholds.experience_warn_years:
                gates.append(gate("experience", "warn", f"{gap:g} years below the required minimum"))
        elif maximum is not None and years > maximum + self._config.overqualified_margin_years:
            score = self._config.overqualified_score
            status = "overqualified"
            gates.append(gate("experience", "warn", "Candidate may be overqualified"))
        elif maximum is not None and years > maximum:
            score = self._config.above_range_score
            status = "above_range"
        else:
            score = 100.0
            status = "in_range"

        return {
            "method": self.method,
            "scores": {"experience": score},
            "gates": gates,
            "metadata": {
                "status": status,
                "years": years,
                "required_range": (job.experience_min, job.experience_max),
                "gap_years": gap,
            },
        }
