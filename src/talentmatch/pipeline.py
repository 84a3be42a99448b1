"""Batch matching pipeline: one candidate against a file of jobs."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pendulum
import structlog

from . import __version__
from .core.matching import MatchingEngine
from .schemas import Candidate, Job, MatchingConfig


class JobLoadError(ValueError):
    """Raised when job loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[Job]):
        super().__init__("Job loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Job loading failed: {self.errors}"


class CandidateLoader:
    """Load a single candidate document."""

    def load(self, path: Path) -> Candidate:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid candidate JSON: {exc}") from exc
        return Candidate.model_validate(data)


class JobLoader:
    """Load job postings from JSON lines."""

    def load(self, path: Path) -> list[Job]:
        jobs: list[Job] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                try:
                    jobs.append(Job.model_validate(record))
                except ValueError as exc:
                    errors.append(f"line {idx}: {exc}")
        if errors:
            raise JobLoadError(errors, jobs)
        return jobs


class OutputWriter:
    """Persist matching outcomes."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


class MatchingPipeline:
    """End-to-end batch matcher."""

    def __init__(
        self,
        *,
        engine: MatchingEngine,
        candidate_loader: CandidateLoader | None = None,
        job_loader: JobLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._candidates = candidate_loader or CandidateLoader()
        self._jobs = job_loader or JobLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        candidate_path: Path,
        jobs_path: Path,
        output_path: Path,
        config: MatchingConfig | None = None,
        as_of: str | None = None,
        audit_logger: "AuditLogger | None" = None,
    ) -> list[dict]:
        candidate = self._candidates.load(candidate_path)
        load_errors: list[str] = []
        try:
            jobs = self._jobs.load(jobs_path)
        except JobLoadError as exc:
            jobs = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("jobs.partial_load", errors=exc.errors)

        config = config or self._engine.default_config
        results: list[dict] = []
        for job in jobs:
            outcome = self._engine.evaluate(
                candidate=candidate, job=job, config=config, as_of=as_of
            )
            entry = outcome.as_response()
            entry["fitScore"] = outcome.fit_score
            entry["constraintsScore"] = outcome.constraints_score
            results.append(entry)

            if audit_logger:
                audit_logger.append(
                    {
                        "candidate_id": candidate.candidate_id,
                        "job_id": job.job_id,
                        "config_profile": config.profile,
                        "config_version": config.version,
                        "overall_score": outcome.overall_score,
                        "tier": outcome.tier,
                        "killed": outcome.killed,
                        "blockers": [item.factor for item in outcome.blockers],
                        "warnings": [item.factor for item in outcome.warnings],
                    }
                )

        results.sort(key=lambda item: item["overallScore"], reverse=True)
        metadata = {
            "candidate_id": candidate.candidate_id,
            "job_count": len(jobs),
            "config_profile": config.profile,
            "config_version": config.version,
            "weight_warnings": list(config.weight_warnings),
            "errors": load_errors,
            "timestamp": pendulum.now("UTC").to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(output_path, {"metadata": metadata, "results": results})
        return results


def _json_default(value: Any) -> Any:
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=_json_default))
            handle.write("\n")


__all__ = [
    "AuditLogger",
    "CandidateLoader",
    "JobLoadError",
    "JobLoader",
    "MatchingPipeline",
    "OutputWriter",
]
