"""Commute time evaluation."""

from __future__ import annotations

from typing import Any

from ...schemas import Candidate, Job
from .base import gate, resolve_config

REMOTE_PREFERENCES = frozenset({"remote", "remote_only"})


class CommuteEvaluator:
    method = "commute"

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = Candidate.model_validate(candidate)
        job = Job.model_validate(context["job"])
        thresholds = resolve_config(context).gate_thresholds

        if job.remote_policy == "remote" or profile.remote_preference in REMOTE_PREFERENCES:
            return {
                "method": self.method,
                "scores": {"commute": 100.0},
                "gates": [],
                "metadata": {"status": "remote"},
            }

        minutes = profile.commute_minutes
        if minutes is None:
            return {
                "method": self.method,
                "scores": {},
                "gates": [],
                "metadata": {"status": "insufficient_data"},
            }

        gates = []
        if minutes <= thresholds.commute_warn_minutes:
            score = 100.0
        elif minutes <= thresholds.commute_fail_minutes:
            score = 70.0
            gates.append(gate("commute", "warn", f"Commute of {minutes:g} minutes"))
        else:
            score = 0.0
            gates.append(gate("commute", "fail", f"Commute of {minutes:g} minutes exceeds the limit"))

        return {
            "method": self.method,
            "scores": {"commute": score},
            "gates": gates,
            "metadata": {"status": "measured", "minutes": minutes},
        }
