"""Salary expectation evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import Candidate, Job
from .base import gate, resolve_config


@dataclass
class SalaryConfig:
    """Configuration for salary matching."""

    penalty_per_percent: float = 3.0


class SalaryEvaluator:
    """Compare the candidate's expected salary with the job's budget ceiling."""

    method = "salary"

    def __init__(self, *, config: SalaryConfig | None = None) -> None:
        self._config = config or SalaryConfig()

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = Candidate.model_validate(candidate)
        job = Job.model_validate(context["job"])
        thresholds = resolve_config(context).gate_thresholds
        expected = profile.expected_salary
        budget = job.salary_max

        if not expected or not budget:
            return {
                "method": self.method,
                "scores": {},
                "gates": [],
                "metadata": {"status": "insufficient_data", "gap_percent": None},
            }

        if expected <= budget:
            return {
                "method": self.method,
                "scores": {"salary": 100.0},
                "gates": [],
                "metadata": {"status": "within_budget", "gap_percent": 0.0},
            }

        gap_percent = (expected - budget) / budget * 100
        score = round(max(0.0, 100.0 - self._config.penalty_per_percent * gap_percent), 6)
        gates = []
        reason = f"Expected salary is {round(gap_percent)}% above budget"
        if gap_percent > thresholds.salary_fail_percent:
            gates.append(gate("salary", "fail", reason))
        elif gap_percent > thresholds.salary_warn_percent:
            gates.append(gate("salary", "warn", reason))

        return {
            "method": self.method,
            "scores": {"salary": score},
            "gates": gates,
            "metadata": {
                "status": "above_budget",
                "gap_percent": gap_percent,
                "expected": expected,
                "budget": budget,
            },
        }
