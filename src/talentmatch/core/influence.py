"""Influence heuristic: engagement scores and threshold alerts per submission."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Iterable

import pendulum

from ..schemas import (
    Candidate,
    CandidateBehavior,
    DealHealth,
    InfluenceAlert,
    Interview,
    Job,
    RecruiterInfluenceScore,
    Submission,
)

HOUR = 3600.0


@dataclass(slots=True)
class BehaviorScores:
    confidence: int
    readiness: int
    closing_probability: int
    engagement_level: str
    opt_in_response_time_hours: float | None
    days_since_engagement: int
    hesitation_signals: list[str] = field(default_factory=list)
    motivation_indicators: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AlertDraft:
    """An alert a rule wants raised, before deduplication."""

    alert_type: str
    priority: str
    title: str
    message: str
    recommended_action: str
    expires_at: Any | None = None


def _clamp(value: float) -> int:
    return int(max(0, min(100, value)))


def _hours_between(later: Any, earlier: Any) -> float:
    return (later - earlier).total_seconds() / HOUR


class InfluenceScorer:
    """Score candidate engagement and derive prioritized alerts."""

    def __init__(self, *, now_provider: Any | None = None) -> None:
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))

    def now(self) -> Any:
        return self._now_provider()

    def score(
        self,
        submission: Submission,
        candidate: Candidate,
        job: Job,
        *,
        interview: Interview | None = None,
        behavior: CandidateBehavior | None = None,
        deal_health: DealHealth | None = None,
    ) -> BehaviorScores:
        now = self.now()
        confidence = 50
        readiness = 50
        closing = 50
        hesitation: list[str] = []
        motivation: list[str] = []

        response_hours: float | None = None
        if submission.opt_in_requested_at:
            if submission.opt_in_response:
                responded_at = submission.opt_in_responded_at or submission.updated_at
                response_hours = _hours_between(responded_at, submission.opt_in_requested_at)
                if response_hours < 24:
                    confidence += 15
                    motivation.append("Fast opt-in response")
                elif response_hours < 48:
                    confidence += 5
                else:
                    confidence -= 10
                    hesitation.append("Delayed opt-in response")
            else:
                pending = _hours_between(now, submission.opt_in_requested_at)
                if pending > 48:
                    confidence -= 20
                    hesitation.append("Opt-in pending >48h")
                elif pending > 24:
                    confidence -= 10
                    hesitation.append("Opt-in pending >24h")

        if interview is not None and interview.scheduled_at is not None:
            until = _hours_between(interview.scheduled_at, now)
            if interview.candidate_confirmed:
                readiness += 20
                motivation.append("Interview confirmed")
            elif 0 < until < 24:
                readiness -= 15
                hesitation.append("Interview in <24h not confirmed")
            if behavior is not None:
                if behavior.prep_materials_viewed > 0:
                    readiness += 15
                    motivation.append("Viewed preparation material")
                elif 0 < until < 48:
                    readiness -= 10
                    hesitation.append("No visible preparation")

        if candidate.expected_salary and job.salary_max:
            ratio = job.salary_max / candidate.expected_salary
            if ratio >= 1:
                closing += 15
                motivation.append("Salary within budget")
            elif ratio >= 0.9:
                closing += 5
            elif ratio < 0.8:
                closing -= 15
                hesitation.append("Salary expectation above budget")

        if submission.match_score:
            if submission.match_score >= 80:
                closing += 15
                confidence += 10
            elif submission.match_score >= 60:
                closing += 5
            else:
                closing -= 10

        if deal_health is not None:
            if deal_health.health_score >= 80:
                closing += 10
            elif deal_health.health_score < 50:
                closing -= 10
                hesitation.append("Deal health critical")

        engagement = "neutral"
        if behavior is not None:
            open_rate = (
                behavior.emails_opened / behavior.emails_sent if behavior.emails_sent > 0 else 0.0
            )
            if open_rate > 0.8 and behavior.links_clicked > 2:
                engagement = "very_high"
                confidence += 15
            elif open_rate > 0.5:
                engagement = "high"
                confidence += 5
            elif open_rate < 0.2 and behavior.emails_sent > 2:
                engagement = "low"
                confidence -= 10
                hesitation.append("Low email open rate")

        days_idle = 0
        if behavior is not None and behavior.last_engagement_at is not None:
            days_idle = max(0, math.floor(_hours_between(now, behavior.last_engagement_at) / 24))
            if days_idle > 5:
                confidence -= 15
                hesitation.append(f"No activity for {days_idle} days")
            elif days_idle > 3:
                confidence -= 5

        if submission.stage in ("interview_1", "interview_2"):
            readiness += 10
            closing += 10
        elif submission.stage == "offer":
            closing += 20
            motivation.append("In offer stage")

        return BehaviorScores(
            confidence=_clamp(confidence),
            readiness=_clamp(readiness),
            closing_probability=_clamp(closing),
            engagement_level=engagement,
            opt_in_response_time_hours=response_hours,
            days_since_engagement=days_idle,
            hesitation_signals=hesitation,
            motivation_indicators=motivation,
        )

    def alerts(
        self,
        submission: Submission,
        candidate: Candidate,
        job: Job,
        scores: BehaviorScores,
        *,
        interview: Interview | None = None,
    ) -> list[AlertDraft]:
        now = self.now()
        name = candidate.full_name or candidate.candidate_id
        drafts: list[AlertDraft] = []

        if submission.opt_in_requested_at and not submission.opt_in_response:
            pending = _hours_between(now, submission.opt_in_requested_at)
            expires = now + timedelta(hours=24)
            if pending > 48:
                drafts.append(
                    AlertDraft(
                        alert_type="opt_in_pending_48h",
                        priority="critical",
                        title=f"{name}: opt-in pending for 48h",
                        message="The candidate has not confirmed the opt-in request for over 48 hours. Follow up by phone now.",
                        recommended_action="Call the candidate and address any concerns.",
                        expires_at=expires,
                    )
                )
            elif pending > 24:
                drafts.append(
                    AlertDraft(
                        alert_type="opt_in_pending_24h",
                        priority="high",
                        title=f"{name}: opt-in pending for 24h",
                        message="The candidate has not reacted to the opt-in request yet. Time for a friendly reminder.",
                        recommended_action="Send a reminder by message or email.",
                        expires_at=expires,
                    )
                )

        if interview is not None and interview.scheduled_at is not None:
            until = _hours_between(interview.scheduled_at, now)
            if 0 < until < 48 and scores.readiness < 60:
                drafts.append(
                    AlertDraft(
                        alert_type="interview_prep_missing",
                        priority="critical" if until < 24 else "high",
                        title=f"{name}: check interview preparation",
                        message=f"The interview is in {round(until)} hours but the candidate does not seem prepared.",
                        recommended_action="Contact the candidate and offer preparation support.",
                        expires_at=interview.scheduled_at,
                    )
                )
            if 0 < until < 24 and not interview.candidate_confirmed:
                drafts.append(
                    AlertDraft(
                        alert_type="interview_reminder",
                        priority="critical",
                        title=f"{name}: interview not confirmed",
                        message="Tomorrow's interview has not been confirmed by the candidate. No-show risk.",
                        recommended_action="Call now and get attendance confirmed.",
                        expires_at=interview.scheduled_at,
                    )
                )

        if candidate.expected_salary and job.salary_max:
            gap_percent = (candidate.expected_salary - job.salary_max) / job.salary_max * 100
            if gap_percent > 20:
                drafts.append(
                    AlertDraft(
                        alert_type="salary_mismatch",
                        priority="high",
                        title=f"{name}: salary expectation {round(gap_percent)}% over budget",
                        message=(
                            f"The candidate expects {candidate.expected_salary:,.0f}, "
                            f"the budget is at most {job.salary_max:,.0f}."
                        ),
                        recommended_action="Manage expectations and highlight the benefits package.",
                    )
                )

        if scores.days_since_engagement > 5:
            drafts.append(
                AlertDraft(
                    alert_type="ghosting_risk",
                    priority="critical" if scores.days_since_engagement > 7 else "high",
                    title=f"{name}: ghosting risk",
                    message=f"No activity for {scores.days_since_engagement} days. The candidate may have lost interest.",
                    recommended_action="Reach out right away and ask for a status update.",
                )
            )

        if scores.engagement_level == "low" and scores.confidence < 40:
            drafts.append(
                AlertDraft(
                    alert_type="engagement_drop",
                    priority="medium",
                    title=f"{name}: engagement dropping",
                    message="The candidate's engagement is low. Interest may be fading.",
                    recommended_action="Get in touch proactively and clarify concerns.",
                )
            )

        if scores.closing_probability >= 80 and submission.stage != "offer":
            drafts.append(
                AlertDraft(
                    alert_type="closing_opportunity",
                    priority="medium",
                    title=f"{name}: strong closing chance",
                    message=f"Closing probability is {scores.closing_probability}%. Time to move the deal forward.",
                    recommended_action="Talk to the client about the next step.",
                )
            )

        return drafts

    def recruiter_score(
        self,
        recruiter_id: str,
        submissions: Iterable[Submission],
        behaviors: Iterable[CandidateBehavior],
        alerts: Iterable[InfluenceAlert],
    ) -> RecruiterInfluenceScore:
        submissions = list(submissions)
        response_times = [
            item.opt_in_response_time_hours
            for item in behaviors
            if item.opt_in_response_time_hours
        ]
        avg_opt_in = sum(response_times) / len(response_times) if response_times else 0.0
        alerts = list(alerts)
        actioned = sum(1 for item in alerts if item.action_taken)
        ignored = sum(1 for item in alerts if item.is_dismissed and not item.action_taken)
        placements = sum(1 for item in submissions if item.stage == "hired")

        score = 50
        if avg_opt_in > 0:
            if avg_opt_in < 24:
                score += 15
            elif avg_opt_in < 48:
                score += 5
            else:
                score -= 10
        if actioned + ignored > 0:
            score += round(actioned / (actioned + ignored) * 20)
        score += min(placements * 2, 20)

        return RecruiterInfluenceScore(
            recruiter_id=recruiter_id,
            influence_score=_clamp(score),
            opt_in_acceleration_rate=48 - avg_opt_in if avg_opt_in > 0 else 0.0,
            alerts_actioned=actioned,
            alerts_ignored=ignored,
            total_influenced_placements=placements,
            calculated_at=self.now(),
        )
