"""Deal health recomputation over stored submissions."""

from __future__ import annotations

import structlog

from ..core.deal_health import DealHealthCalculator
from ..errors import NotFound
from ..schemas import DealHealth
from ..storage import Repository


class DealHealthService:
    def __init__(self, *, repository: Repository, calculator: DealHealthCalculator) -> None:
        self._repository = repository
        self._calculator = calculator
        self._logger = structlog.get_logger(__name__)

    def recalculate(self, submission_id: str) -> DealHealth:
        """Recompute and upsert the snapshot for one submission."""
        submission = self._repository.get_submission(submission_id)
        if submission is None:
            raise NotFound(f"Submission {submission_id} not found")
        snapshot = self._calculator.calculate(
            submission,
            interview=self._repository.latest_interview(submission_id),
        )
        self._repository.upsert_deal_health(snapshot)
        self._logger.info(
            "deal_health.upserted",
            submission_id=submission_id,
            health_score=snapshot.health_score,
            risk_level=snapshot.risk_level,
            bottleneck=snapshot.bottleneck,
        )
        return snapshot

    def recalculate_all(self) -> int:
        submissions = self._repository.list_submissions(active_only=True)
        for submission in submissions:
            self.recalculate(submission.submission_id)
        return len(submissions)
