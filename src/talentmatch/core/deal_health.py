"""Deal health heuristic: pipeline risk from inactivity and stage dwell time."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import pendulum

from ..schemas import DealHealth, Interview, Submission

EXPECTED_STAGE_DAYS: dict[str, int] = {
    "submitted": 2,
    "interview_1": 7,
    "interview_2": 7,
    "offer": 5,
}

# Early-stage overruns cost more than late-stage ones.
STAGE_SEVERITY: dict[str, float] = {
    "submitted": 1.0,
    "interview_1": 0.8,
    "interview_2": 0.7,
    "offer": 0.5,
}

STAGE_BOTTLENECKS: dict[str, str] = {
    "submitted": "client_review",
    "interview_1": "interview_scheduling",
    "interview_2": "client_decision",
    "offer": "offer_pending",
}

BOTTLENECK_ACTIONS: dict[str, tuple[str, str]] = {
    "candidate_response": ("Follow up with the candidate", "Waiting on the candidate's response"),
    "recruiter_action": ("Review the candidate's counter-proposal", "Counter-proposal awaiting the recruiter"),
    "client_review": ("Send the client a review reminder", "Candidate is waiting for client review"),
    "interview_scheduling": ("Ask the client to schedule the interview", "Interview scheduling has stalled"),
    "client_decision": ("Ask the client for a decision", "Client decision is pending"),
    "offer_pending": ("Follow up on the open offer", "Offer is awaiting a response"),
}


@dataclass
class DealHealthWeights:
    phase: float = 0.45
    activity: float = 0.35
    match: float = 0.20
    default_match_score: float = 50.0
    bottleneck_after_days: int = 2


@dataclass(slots=True)
class BottleneckInfo:
    bottleneck: str | None = None
    days: int = 0


@dataclass(slots=True)
class _Signals:
    days_inactive: int
    dwell_days: int
    expected_days: int
    phase_score: float
    activity_score: float
    match_score: float


def activity_score(days_inactive: int) -> float:
    if days_inactive <= 0:
        return 100.0
    if days_inactive <= 1:
        return 90.0
    if days_inactive <= 3:
        return 70.0
    if days_inactive <= 7:
        return 50.0
    if days_inactive <= 14:
        return 30.0
    return 10.0


def phase_score(stage: str, dwell_days: int) -> float:
    expected = EXPECTED_STAGE_DAYS.get(stage, 7)
    if dwell_days <= expected:
        base = 100.0
    elif dwell_days <= expected * 2:
        base = 70.0
    elif dwell_days <= expected * 3:
        base = 40.0
    else:
        base = 20.0
    severity = STAGE_SEVERITY.get(stage, 1.0)
    return 100.0 - (100.0 - base) * severity


def risk_level(score: int) -> str:
    if score >= 80:
        return "low"
    if score >= 60:
        return "medium"
    if score >= 40:
        return "high"
    return "critical"


def _whole_days(later: Any, earlier: Any) -> int:
    return max(0, math.floor((later - earlier).total_seconds() / 86400))


class DealHealthCalculator:
    """Compute ``DealHealth`` snapshots; pure apart from the injected clock."""

    def __init__(
        self,
        *,
        weights: DealHealthWeights | None = None,
        now_provider: Any | None = None,
    ) -> None:
        self._weights = weights or DealHealthWeights()
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))

    def calculate(
        self,
        submission: Submission,
        *,
        interview: Interview | None = None,
    ) -> DealHealth:
        now = self._now_provider()
        signals = self._signals(submission, now)
        weights = self._weights

        health = round(
            weights.phase * signals.phase_score
            + weights.activity * signals.activity_score
            + weights.match * signals.match_score
        )
        health = int(min(100, max(0, health)))
        level = risk_level(health)
        bottleneck = self.identify_bottleneck(submission, interview, signals.days_inactive)
        drop_off = self.drop_off_probability(health, signals.days_inactive, bottleneck)
        actions, factors = self._recommendations(submission, bottleneck, signals)

        return DealHealth(
            submission_id=submission.submission_id,
            health_score=health,
            risk_level=level,
            bottleneck=bottleneck.bottleneck,
            bottleneck_days=bottleneck.days,
            days_since_last_activity=signals.days_inactive,
            drop_off_probability=drop_off,
            risk_factors=factors,
            recommended_actions=actions,
            assessment=self._assessment(health, level, bottleneck, factors),
            calculated_at=now,
        )

    def _signals(self, submission: Submission, now: Any) -> _Signals:
        days_inactive = _whole_days(now, submission.updated_at)
        entered = submission.stage_entered_at or submission.submitted_at
        dwell_days = _whole_days(now, entered)
        match = (
            submission.match_score
            if submission.match_score is not None
            else self._weights.default_match_score
        )
        return _Signals(
            days_inactive=days_inactive,
            dwell_days=dwell_days,
            expected_days=EXPECTED_STAGE_DAYS.get(submission.stage, 7),
            phase_score=phase_score(submission.stage, dwell_days),
            activity_score=activity_score(days_inactive),
            match_score=float(match),
        )

    def identify_bottleneck(
        self,
        submission: Submission,
        interview: Interview | None,
        days_since_update: int,
    ) -> BottleneckInfo:
        if days_since_update <= self._weights.bottleneck_after_days:
            return BottleneckInfo()
        if submission.opt_in_requested_at and not submission.opt_in_response:
            return BottleneckInfo("candidate_response", days_since_update)
        if interview is not None and interview.status == "pending_response":
            return BottleneckInfo("candidate_response", days_since_update)
        if interview is not None and interview.status == "counter_proposed":
            return BottleneckInfo("recruiter_action", days_since_update)
        label = STAGE_BOTTLENECKS.get(submission.stage)
        if label is None:
            return BottleneckInfo()
        return BottleneckInfo(label, days_since_update)

    @staticmethod
    def drop_off_probability(health: int, days_inactive: int, bottleneck: BottleneckInfo) -> int:
        probability = 100 - health
        if days_inactive > 7:
            probability += 15
        if days_inactive > 14:
            probability += 20
        if bottleneck.bottleneck:
            probability += 10
        if bottleneck.days > 5:
            probability += 15
        return int(min(95, max(5, probability)))

    @staticmethod
    def _recommendations(
        submission: Submission,
        bottleneck: BottleneckInfo,
        signals: _Signals,
    ) -> tuple[list[str], list[str]]:
        actions: list[str] = []
        factors: list[str] = []

        if signals.days_inactive > 3:
            actions.append("Contact the responsible party")
            factors.append(f"{signals.days_inactive} days without activity")

        if bottleneck.bottleneck in BOTTLENECK_ACTIONS:
            action, factor = BOTTLENECK_ACTIONS[bottleneck.bottleneck]
            actions.append(action)
            factors.append(factor)

        if signals.dwell_days > signals.expected_days:
            factors.append(
                f"{signals.dwell_days} days in {submission.stage} "
                f"(expected {signals.expected_days})"
            )

        if submission.match_score is None or submission.match_score < 60:
            factors.append("Low match score")

        if not actions:
            actions.append("On track, keep monitoring")
        return actions, factors

    @staticmethod
    def _assessment(
        health: int,
        level: str,
        bottleneck: BottleneckInfo,
        factors: list[str],
    ) -> str:
        if level == "critical":
            detail = (
                f"Main bottleneck: {bottleneck.bottleneck}"
                if bottleneck.bottleneck
                else "Immediate action required."
            )
            return f"Critical deal status ({health}%). {detail}"
        if level == "high":
            detail = factors[0] if factors else "Active follow-up recommended."
            return f"Elevated risk ({health}%). {detail}"
        if level == "medium":
            return f"Deal within normal range ({health}%). Minor delays possible."
        return f"Healthy deal ({health}%). Everything is on schedule."
