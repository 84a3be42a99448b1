"""Batch influence run: behavior snapshots, deduplicated alerts, recruiter scores."""

from __future__ import annotations

import uuid
from typing import Any

import structlog

from ..core.influence import InfluenceScorer
from ..schemas import CandidateBehavior, InfluenceAlert, Submission
from ..storage import Repository


class InfluenceService:
    """Scan active submissions and raise alerts once per undismissed type."""

    def __init__(self, *, repository: Repository, scorer: InfluenceScorer) -> None:
        self._repository = repository
        self._scorer = scorer
        self._logger = structlog.get_logger(__name__)

    def run(self) -> dict[str, Any]:
        submissions = self._repository.list_submissions(active_only=True)
        behaviors_updated = 0
        alerts_generated = 0
        failed = 0

        for submission in submissions:
            try:
                outcome = self._process(submission)
            except Exception:  # noqa: BLE001
                failed += 1
                self._logger.exception(
                    "influence.submission_failed", submission_id=submission.submission_id
                )
                continue
            if outcome is None:
                continue
            behaviors_updated += 1
            alerts_generated += outcome

        recruiters = self.update_recruiter_scores()
        result = {
            "success": True,
            "submissions_processed": len(submissions),
            "behaviors_updated": behaviors_updated,
            "alerts_generated": alerts_generated,
        }
        self._logger.info("influence.completed", failed=failed, recruiters=recruiters, **result)
        return result

    def _process(self, submission: Submission) -> int | None:
        candidate = self._repository.get_candidate(submission.candidate_id)
        job = self._repository.get_job(submission.job_id)
        if candidate is None or job is None:
            self._logger.warning(
                "influence.submission_skipped",
                submission_id=submission.submission_id,
                reason="missing candidate or job",
            )
            return None

        interview = self._repository.latest_interview(submission.submission_id)
        existing = self._repository.get_behavior(submission.submission_id)
        scores = self._scorer.score(
            submission,
            candidate,
            job,
            interview=interview,
            behavior=existing,
            deal_health=self._repository.get_deal_health(submission.submission_id),
        )
        now = self._scorer.now()
        counters = (
            existing.model_dump(
                include={
                    "emails_sent",
                    "emails_opened",
                    "links_clicked",
                    "prep_materials_viewed",
                }
            )
            if existing is not None
            else {}
        )
        self._repository.upsert_behavior(
            CandidateBehavior(
                submission_id=submission.submission_id,
                candidate_id=submission.candidate_id,
                **counters,
                confidence_score=scores.confidence,
                interview_readiness_score=scores.readiness,
                closing_probability=scores.closing_probability,
                engagement_level=scores.engagement_level,
                opt_in_response_time_hours=scores.opt_in_response_time_hours,
                days_since_engagement=scores.days_since_engagement,
                last_engagement_at=(
                    existing.last_engagement_at
                    if existing is not None and existing.last_engagement_at
                    else submission.updated_at
                ),
                hesitation_signals=scores.hesitation_signals,
                motivation_indicators=scores.motivation_indicators,
                updated_at=now,
            )
        )

        inserted = 0
        for draft in self._scorer.alerts(submission, candidate, job, scores, interview=interview):
            alert = InfluenceAlert(
                alert_id=uuid.uuid4().hex,
                submission_id=submission.submission_id,
                recruiter_id=submission.recruiter_id,
                alert_type=draft.alert_type,
                priority=draft.priority,
                title=draft.title,
                message=draft.message,
                recommended_action=draft.recommended_action,
                expires_at=draft.expires_at,
                created_at=now,
            )
            if self._repository.insert_alert_if_absent(alert):
                inserted += 1
                self._logger.info(
                    "influence.alert_inserted",
                    submission_id=submission.submission_id,
                    alert_type=draft.alert_type,
                    priority=draft.priority,
                )
        return inserted

    def update_recruiter_scores(self) -> int:
        submissions = self._repository.list_submissions()
        recruiter_ids = sorted({item.recruiter_id for item in submissions if item.recruiter_id})
        for recruiter_id in recruiter_ids:
            owned = [item for item in submissions if item.recruiter_id == recruiter_id]
            behaviors = [
                behavior
                for behavior in (
                    self._repository.get_behavior(item.submission_id) for item in owned
                )
                if behavior is not None
            ]
            score = self._scorer.recruiter_score(
                recruiter_id,
                owned,
                behaviors,
                self._repository.list_alerts(recruiter_id=recruiter_id),
            )
            self._repository.upsert_recruiter_score(score)
        return len(recruiter_ids)
