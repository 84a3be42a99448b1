"""Availability evaluation against the job's start window."""

from __future__ import annotations

import math
from typing import Any

from ...schemas import Candidate, Job
from .base import gate, resolve_as_of, resolve_config

DELAY_SCORES: tuple[tuple[int, float], ...] = (
    (14, 100.0),
    (30, 90.0),
    (60, 70.0),
    (90, 50.0),
)
LATE_SCORE = 30.0


class StartDateEvaluator:
    """Score how long after the start window opens the candidate can begin."""

    method = "start_date"

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = Candidate.model_validate(candidate)
        job = Job.model_validate(context["job"])
        thresholds = resolve_config(context).gate_thresholds

        if profile.availability_date is None:
            return {
                "method": self.method,
                "scores": {},
                "gates": [],
                "metadata": {"status": "insufficient_data", "delay_days": None},
            }

        as_of = resolve_as_of(context)
        reference = max(as_of, job.start_date) if job.start_date else as_of
        seconds = (profile.availability_date - reference).total_seconds()
        delay_days = max(0, math.ceil(seconds / 86400))

        score = LATE_SCORE
        for limit, value in DELAY_SCORES:
            if delay_days <= limit:
                score = value
                break

        gates = []
        if delay_days > thresholds.availability_fail_days:
            gates.append(gate("start_date", "fail", f"Available {delay_days} days after the start window"))
        elif delay_days > thresholds.availability_warn_days:
            gates.append(gate("start_date", "warn", f"Available {delay_days} days after the start window"))

        return {
            "method": self.method,
            "scores": {"start_date": score},
            "gates": gates,
            "metadata": {
                "status": "measured",
                "delay_days": delay_days,
                "reference": reference.isoformat(),
            },
        }
