"""Repository abstraction over the recruiting tables.

``InMemoryRepository`` keeps every table in a dict guarded by one re-entrant
lock. Conditional writes (interview compare-and-set, alert insert-if-absent)
and multi-row units of work run under that lock, so concurrent callers can
never both pass the same check.
"""

from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

import structlog
from pydantic import BaseModel

from .schemas import (
    Candidate,
    CandidateBehavior,
    DealHealth,
    InfluenceAlert,
    Interview,
    Job,
    MatchingConfig,
    RecruiterInfluenceScore,
    Submission,
)

logger = structlog.get_logger(__name__)

TABLE_MODELS: dict[str, type[BaseModel]] = {
    "candidates": Candidate,
    "jobs": Job,
    "submissions": Submission,
    "interviews": Interview,
    "deal_health": DealHealth,
    "candidate_behavior": CandidateBehavior,
    "influence_alerts": InfluenceAlert,
    "matching_configs": MatchingConfig,
    "recruiter_influence_scores": RecruiterInfluenceScore,
}


@runtime_checkable
class Repository(Protocol):
    """Storage operations the services depend on."""

    def transaction(self) -> Any: ...

    def get_candidate(self, candidate_id: str) -> Candidate | None: ...

    def get_job(self, job_id: str) -> Job | None: ...

    def get_submission(self, submission_id: str) -> Submission | None: ...

    def find_submission(self, candidate_id: str, job_id: str) -> Submission | None: ...

    def save_submission(self, submission: Submission) -> None: ...

    def list_submissions(self, *, active_only: bool = False) -> list[Submission]: ...

    def add_interview(self, interview: Interview) -> None: ...

    def find_interview_by_token(self, token: str) -> Interview | None: ...

    def list_interviews(self, submission_id: str) -> list[Interview]: ...

    def latest_interview(self, submission_id: str) -> Interview | None: ...

    def compare_and_set_interview(
        self, interview_id: str, expected_status: str, updated: Interview
    ) -> bool: ...

    def insert_alert_if_absent(self, alert: InfluenceAlert) -> bool: ...

    def list_alerts(
        self,
        *,
        submission_id: str | None = None,
        recruiter_id: str | None = None,
        include_dismissed: bool = True,
    ) -> list[InfluenceAlert]: ...

    def upsert_deal_health(self, snapshot: DealHealth) -> None: ...

    def get_deal_health(self, submission_id: str) -> DealHealth | None: ...

    def upsert_behavior(self, behavior: CandidateBehavior) -> None: ...

    def get_behavior(self, submission_id: str) -> CandidateBehavior | None: ...

    def upsert_recruiter_score(self, score: RecruiterInfluenceScore) -> None: ...

    def active_matching_config(self, profile: str = "default") -> MatchingConfig | None: ...

    def save_matching_config(self, config: MatchingConfig) -> MatchingConfig: ...


def _table_key(table: str, row: BaseModel) -> str:
    if table == "candidates":
        return row.candidate_id
    if table == "jobs":
        return row.job_id
    if table == "interviews":
        return row.interview_id
    if table == "influence_alerts":
        return row.alert_id
    if table == "matching_configs":
        return f"{row.profile}:{row.version}"
    if table == "recruiter_influence_scores":
        return row.recruiter_id
    return row.submission_id


class InMemoryRepository:
    """Dict-backed repository with snapshot transactions."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: dict[str, dict[str, BaseModel]] = {name: {} for name in TABLE_MODELS}

    @contextmanager
    def transaction(self) -> Iterator["InMemoryRepository"]:
        """Run a unit of work; every table is restored if it raises."""
        with self._lock:
            snapshot = {name: dict(rows) for name, rows in self._tables.items()}
            try:
                yield self
            except Exception:
                self._tables = snapshot
                logger.info("storage.rolled_back")
                raise

    def _put(self, table: str, row: BaseModel) -> None:
        with self._lock:
            self._tables[table][_table_key(table, row)] = row

    def _get(self, table: str, key: str) -> Any:
        with self._lock:
            return self._tables[table].get(key)

    def rows(self, table: str) -> list[Any]:
        with self._lock:
            return list(self._tables[table].values())

    # candidates and jobs
    def add_candidate(self, candidate: Candidate) -> None:
        self._put("candidates", candidate)

    def get_candidate(self, candidate_id: str) -> Candidate | None:
        return self._get("candidates", candidate_id)

    def add_job(self, job: Job) -> None:
        self._put("jobs", job)

    def get_job(self, job_id: str) -> Job | None:
        return self._get("jobs", job_id)

    # submissions
    def add_submission(self, submission: Submission) -> None:
        self._put("submissions", submission)

    save_submission = add_submission

    def get_submission(self, submission_id: str) -> Submission | None:
        return self._get("submissions", submission_id)

    def list_submissions(self, *, active_only: bool = False) -> list[Submission]:
        submissions = self.rows("submissions")
        if active_only:
            submissions = [item for item in submissions if not item.is_terminal]
        return sorted(submissions, key=lambda item: item.submission_id)

    def find_submission(self, candidate_id: str, job_id: str) -> Submission | None:
        for submission in self.rows("submissions"):
            if submission.candidate_id == candidate_id and submission.job_id == job_id:
                return submission
        return None

    # interviews
    def add_interview(self, interview: Interview) -> None:
        with self._lock:
            if self.find_interview_by_token(interview.response_token) is not None:
                raise ValueError("Duplicate interview response token")
            self._put("interviews", interview)

    def get_interview(self, interview_id: str) -> Interview | None:
        return self._get("interviews", interview_id)

    def find_interview_by_token(self, token: str) -> Interview | None:
        for interview in self.rows("interviews"):
            if interview.response_token == token:
                return interview
        return None

    def list_interviews(self, submission_id: str) -> list[Interview]:
        interviews = [
            item for item in self.rows("interviews") if item.submission_id == submission_id
        ]
        return sorted(interviews, key=lambda item: item.created_at)

    def latest_interview(self, submission_id: str) -> Interview | None:
        interviews = self.list_interviews(submission_id)
        return interviews[-1] if interviews else None

    def compare_and_set_interview(
        self, interview_id: str, expected_status: str, updated: Interview
    ) -> bool:
        """Replace the interview only while its status is still ``expected_status``."""
        with self._lock:
            current = self._tables["interviews"].get(interview_id)
            if current is None or current.status != expected_status:
                return False
            self._tables["interviews"][interview_id] = updated
            return True

    # derived snapshots
    def upsert_deal_health(self, snapshot: DealHealth) -> None:
        self._put("deal_health", snapshot)

    def get_deal_health(self, submission_id: str) -> DealHealth | None:
        return self._get("deal_health", submission_id)

    def upsert_behavior(self, behavior: CandidateBehavior) -> None:
        self._put("candidate_behavior", behavior)

    def get_behavior(self, submission_id: str) -> CandidateBehavior | None:
        return self._get("candidate_behavior", submission_id)

    # alerts
    def insert_alert_if_absent(self, alert: InfluenceAlert) -> bool:
        """Insert unless an undismissed alert of the same type exists for the submission."""
        with self._lock:
            for existing in self._tables["influence_alerts"].values():
                if (
                    existing.submission_id == alert.submission_id
                    and existing.alert_type == alert.alert_type
                    and not existing.is_dismissed
                ):
                    return False
            self._tables["influence_alerts"][alert.alert_id] = alert
            return True

    def list_alerts(
        self,
        *,
        submission_id: str | None = None,
        recruiter_id: str | None = None,
        include_dismissed: bool = True,
    ) -> list[InfluenceAlert]:
        alerts = self.rows("influence_alerts")
        if submission_id is not None:
            alerts = [item for item in alerts if item.submission_id == submission_id]
        if recruiter_id is not None:
            alerts = [item for item in alerts if item.recruiter_id == recruiter_id]
        if not include_dismissed:
            alerts = [item for item in alerts if not item.is_dismissed]
        return sorted(alerts, key=lambda item: (item.created_at, item.alert_id))

    def dismiss_alert(self, alert_id: str, *, action_taken: str | None = None) -> InfluenceAlert | None:
        with self._lock:
            alert = self._tables["influence_alerts"].get(alert_id)
            if alert is None:
                return None
            updated = alert.model_copy(update={"is_dismissed": True, "action_taken": action_taken})
            self._tables["influence_alerts"][alert_id] = updated
            return updated

    # recruiter scores
    def upsert_recruiter_score(self, score: RecruiterInfluenceScore) -> None:
        self._put("recruiter_influence_scores", score)

    def get_recruiter_score(self, recruiter_id: str) -> RecruiterInfluenceScore | None:
        return self._get("recruiter_influence_scores", recruiter_id)

    # matching configs
    def matching_configs(self, profile: str) -> list[MatchingConfig]:
        configs = [item for item in self.rows("matching_configs") if item.profile == profile]
        return sorted(configs, key=lambda item: item.version)

    def active_matching_config(self, profile: str = "default") -> MatchingConfig | None:
        for config in reversed(self.matching_configs(profile)):
            if config.active:
                return config
        return None

    def save_matching_config(self, config: MatchingConfig) -> MatchingConfig:
        """Store ``config`` as the next active version of its profile."""
        with self._lock:
            existing = self.matching_configs(config.profile)
            for previous in existing:
                if previous.active:
                    self._put("matching_configs", previous.model_copy(update={"active": False}))
            version = existing[-1].version + 1 if existing else 1
            stored = config.model_copy(update={"version": version, "active": True})
            self._put("matching_configs", stored)
            return stored


class JsonSnapshotStore:
    """Load and persist an ``InMemoryRepository`` as one JSON document."""

    @staticmethod
    def load(path: Path) -> InMemoryRepository:
        repository = InMemoryRepository()
        if not path.exists():
            return repository
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid store JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Store JSON must be an object keyed by table name")
        unknown = sorted(set(data) - set(TABLE_MODELS))
        if unknown:
            raise ValueError(f"Unknown store tables: {unknown}")
        for table, model in TABLE_MODELS.items():
            for record in data.get(table, []):
                if table == "matching_configs":
                    row = MatchingConfig.from_record(record)
                else:
                    row = model.model_validate(record)
                repository._put(table, row)
        return repository

    @staticmethod
    def save(repository: InMemoryRepository, path: Path) -> None:
        payload = {
            table: [row.model_dump(mode="json") for row in repository.rows(table)]
            for table in TABLE_MODELS
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


__all__ = ["InMemoryRepository", "JsonSnapshotStore", "Repository", "TABLE_MODELS"]
