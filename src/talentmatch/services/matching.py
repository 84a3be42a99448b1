"""Match calculation and matching-config administration."""

from __future__ import annotations

from typing import Any, Callable, Sequence

import structlog

from ..config import ConfigManager
from ..core.matching import MatchingEngine
from ..errors import NotFound
from ..schemas import MatchingConfig
from ..schemas.common import utc_now
from ..storage import Repository


class MatchService:
    """Score a candidate against jobs using the active config of a profile."""

    def __init__(
        self,
        *,
        repository: Repository,
        engine: MatchingEngine,
        config_manager: ConfigManager | None = None,
        now_provider: Callable[[], Any] | None = None,
    ) -> None:
        self._repository = repository
        self._engine = engine
        self._config_manager = config_manager
        self._now_provider = now_provider or utc_now
        self._logger = structlog.get_logger(__name__)

    def resolve_config(self, profile: str = "default") -> MatchingConfig:
        """Active stored version first, then a YAML profile, then built-in defaults."""
        stored = self._repository.active_matching_config(profile)
        if stored is not None:
            return stored
        if self._config_manager is not None and profile in self._config_manager.profiles():
            return self._config_manager.load_matching(profile)
        if profile == "default":
            return self._engine.default_config
        raise NotFound(f"Matching profile {profile!r} not found")

    def calculate(
        self,
        *,
        candidate_id: str,
        job_ids: Sequence[str],
        profile: str = "default",
    ) -> dict[str, Any]:
        candidate = self._repository.get_candidate(candidate_id)
        if candidate is None:
            raise NotFound(f"Candidate {candidate_id} not found")
        jobs = []
        for job_id in job_ids:
            job = self._repository.get_job(job_id)
            if job is None:
                raise NotFound(f"Job {job_id} not found")
            jobs.append(job)

        config = self.resolve_config(profile)
        now = self._now_provider()
        results = []
        for job in jobs:
            outcome = self._engine.evaluate(candidate=candidate, job=job, config=config, as_of=now)
            results.append(outcome.as_response())
            submission = self._repository.find_submission(candidate_id, job.job_id)
            if submission is not None:
                self._repository.save_submission(
                    submission.model_copy(
                        update={
                            "match_score": round(outcome.overall_score),
                            "match_policy": outcome.tier,
                        }
                    )
                )

        return {
            "candidateId": candidate_id,
            "configProfile": config.profile,
            "configVersion": config.version,
            "results": results,
        }

    def save_config(
        self,
        *,
        record: dict[str, Any],
        profile: str = "default",
        strict: bool = False,
    ) -> dict[str, Any]:
        issues = MatchingConfig.weight_issues(record)
        # warnings are derived from the submitted weights, never taken from the client
        submitted = {key: value for key, value in record.items() if key != "weight_warnings"}
        config = MatchingConfig.from_record({**submitted, "profile": profile}, strict=strict)
        stored = self._repository.save_matching_config(config)
        self._logger.info(
            "config.saved",
            profile=stored.profile,
            version=stored.version,
            weight_issues=issues,
        )
        return {
            "success": True,
            "profile": stored.profile,
            "version": stored.version,
            "warnings": list(stored.weight_warnings),
        }
