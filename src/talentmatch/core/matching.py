"""Matching engine orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal

import pendulum
import structlog

from ..schemas import Candidate, Job, MatchingConfig
from ..schemas.common import to_utc
from ..schemas.matching import SENIORITY_LEVELS, DisplayPolicies

Tier = Literal["hot", "standard", "maybe", "hidden"]

FULL_MULTIPLIER_THRESHOLD = 0.95
MULTIPLIER_FLOOR = 0.05
WARNING_PENALTY = 8
REMOTE_PREFERENCES = frozenset({"remote", "remote_only"})

FIT_FACTORS: tuple[str, ...] = ("skills", "experience", "industry")
CONSTRAINT_FACTORS: tuple[str, ...] = ("salary", "commute", "start_date")

WIRE_FACTOR_NAMES: dict[str, str] = {
    "skills": "skills",
    "experience": "experience",
    "industry": "culture",
    "salary": "salary",
    "commute": "commute",
    "start_date": "startDate",
}


@dataclass(slots=True)
class EvaluationResult:
    """Normalized evaluator output."""

    method: str
    scores: dict[str, float]
    gates: list[dict[str, str]] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Blocker:
    factor: str
    reason: str


@dataclass(slots=True)
class MatchWarning:
    factor: str
    message: str


@dataclass(slots=True)
class MatchResult:
    """Complete scoring payload for one candidate/job pair."""

    candidate_id: str
    job_id: str
    overall_score: float
    coverage: float
    tier: Tier
    factors: dict[str, float]
    blockers: list[Blocker]
    warnings: list[MatchWarning]
    deal_probability: int
    multiplier: float
    killed: bool = False
    fit_score: float | None = None
    constraints_score: float | None = None
    evaluations: list[EvaluationResult] = field(default_factory=list)

    def as_response(self) -> dict[str, Any]:
        """Wire shape returned by ``calculate-match``."""
        return {
            "candidateId": self.candidate_id,
            "jobId": self.job_id,
            "overallScore": round(self.overall_score),
            "coverage": round(self.coverage, 4),
            "tier": self.tier,
            "factors": {
                WIRE_FACTOR_NAMES[name]: round(value, 1) for name, value in self.factors.items()
            },
            "blockers": [{"factor": item.factor, "reason": item.reason} for item in self.blockers],
            "warnings": [
                {"factor": item.factor, "message": item.message} for item in self.warnings
            ],
            "dealProbability": self.deal_probability,
            "multiplier": round(self.multiplier, 4),
            "killed": self.killed,
        }


def select_tier(
    score: float,
    coverage: float,
    blocker_count: int,
    multiplier: float,
    policies: DisplayPolicies,
) -> Tier:
    """Return the first tier, strictest first, whose thresholds all hold."""
    for name, policy in policies.ordered():
        if score < policy.min_score:
            continue
        if coverage < policy.min_coverage:
            continue
        if blocker_count > policy.max_blockers:
            continue
        if policy.requires_full_multiplier and multiplier < FULL_MULTIPLIER_THRESHOLD:
            continue
        return name  # type: ignore[return-value]
    return "hidden"


def weighted_average(scores: dict[str, float], weights: dict[str, float]) -> float | None:
    """Weighted mean over the keys present in ``scores``; ``None`` if none are."""
    known = [key for key in weights if key in scores]
    denominator = sum(weights[key] for key in known)
    if not known or denominator <= 0:
        return None
    return sum(scores[key] * weights[key] for key in known) / denominator


class MatchingEngine:
    """Coordinates evaluators and turns their output into a scored, tiered match."""

    def __init__(
        self,
        evaluators: Iterable[Any],
        *,
        hard_kills: Any,
        default_config: MatchingConfig | None = None,
        now_provider: Any | None = None,
    ) -> None:
        self._evaluators = list(evaluators)
        self._hard_kills = hard_kills
        self._default_config = default_config or MatchingConfig()
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._logger = structlog.get_logger(__name__)

    @property
    def default_config(self) -> MatchingConfig:
        return self._default_config

    def evaluate(
        self,
        *,
        candidate: Candidate,
        job: Job,
        config: MatchingConfig | None = None,
        as_of: Any | None = None,
        context: dict[str, Any] | None = None,
    ) -> MatchResult:
        config = config or self._default_config
        reference = to_utc(as_of) if as_of is not None else self._now_provider()
        serialized_candidate = candidate.model_dump(mode="python")
        evaluation_context: dict[str, Any] = {
            "job": job.model_dump(mode="python"),
            "matching_config": config,
            "as_of": reference,
        }
        if context:
            evaluation_context.update(context)

        kill_result = self._normalize_evaluation_result(
            self._hard_kills.evaluate(serialized_candidate, evaluation_context)
        )
        kills = [item for item in kill_result.gates if item["level"] == "kill"]
        if kills:
            result = MatchResult(
                candidate_id=candidate.candidate_id,
                job_id=job.job_id,
                overall_score=0.0,
                coverage=0.0,
                tier="hidden",
                factors={},
                blockers=[Blocker(item["factor"], item["reason"]) for item in kills],
                warnings=[],
                deal_probability=5,
                multiplier=0.0,
                killed=True,
                evaluations=[kill_result],
            )
            self._log(result)
            return result

        evaluations: list[EvaluationResult] = [kill_result]
        factors: dict[str, float] = {}
        blockers: list[Blocker] = []
        warnings: list[MatchWarning] = []
        metadata: dict[str, dict[str, Any]] = {}

        for evaluator in self._evaluators:
            raw_result = evaluator.evaluate(serialized_candidate, evaluation_context)
            normalized = self._normalize_evaluation_result(raw_result)
            evaluations.append(normalized)
            metadata[normalized.method] = normalized.metadata
            factors.update(normalized.scores)
            for item in normalized.gates:
                if item["level"] == "fail":
                    blockers.append(Blocker(item["factor"], item["reason"]))
                    factors[item["factor"]] = 0.0
                elif item["level"] == "warn":
                    warnings.append(MatchWarning(item["factor"], item["reason"]))

        fit_score = weighted_average(factors, config.fit_breakdown.model_dump())
        constraints_score = weighted_average(factors, config.constraint_breakdown.model_dump())
        group_scores = {
            name: value
            for name, value in (("fit", fit_score), ("constraints", constraints_score))
            if value is not None
        }
        overall = weighted_average(group_scores, config.weights.model_dump()) or 0.0

        coverage = metadata.get("skills", {}).get("coverage")
        coverage = float(coverage) if coverage is not None else 0.0

        multiplier = self._dealbreaker_multiplier(candidate, job, config, metadata)
        deal_probability = self._deal_probability(overall, multiplier, blockers, warnings)
        tier = select_tier(overall, coverage, len(blockers), multiplier, config.display_policies)

        result = MatchResult(
            candidate_id=candidate.candidate_id,
            job_id=job.job_id,
            overall_score=overall,
            coverage=coverage,
            tier=tier,
            factors={name: factors[name] for name in WIRE_FACTOR_NAMES if name in factors},
            blockers=blockers,
            warnings=warnings,
            deal_probability=deal_probability,
            multiplier=multiplier,
            fit_score=fit_score,
            constraints_score=constraints_score,
            evaluations=evaluations,
        )
        self._log(result)
        return result

    @staticmethod
    def _normalize_evaluation_result(payload: dict[str, Any]) -> EvaluationResult:
        method = payload.get("method")
        scores = payload.get("scores") or {}
        gates = payload.get("gates") or []
        metadata = payload.get("metadata") or {}
        if method is None:
            raise ValueError("Evaluator result must include 'method'.")
        if not isinstance(scores, dict):
            raise ValueError("Evaluator result 'scores' must be a mapping.")
        for item in gates:
            if item.get("level") not in ("warn", "fail", "kill") or not item.get("factor"):
                raise ValueError(f"Evaluator {method!r} returned a malformed gate: {item!r}")
        return EvaluationResult(
            method=str(method),
            scores={k: float(v) for k, v in scores.items()},
            gates=[dict(item) for item in gates],
            metadata=dict(metadata),
        )

    @staticmethod
    def _dealbreaker_multiplier(
        candidate: Candidate,
        job: Job,
        config: MatchingConfig,
        metadata: dict[str, dict[str, Any]],
    ) -> float:
        tables = config.dealbreaker_multipliers
        multiplier = 1.0

        gap_percent = metadata.get("salary", {}).get("gap_percent")
        if gap_percent:
            multiplier *= tables.lookup(tables.salary, gap_percent)

        delay_days = metadata.get("start_date", {}).get("delay_days")
        if delay_days is not None and delay_days > 14:
            multiplier *= tables.lookup(tables.start_date, delay_days)

        candidate_level = (candidate.seniority or "").strip().lower()
        job_level = (job.experience_level or "").strip().lower()
        if candidate_level in SENIORITY_LEVELS and job_level in SENIORITY_LEVELS:
            gap = abs(SENIORITY_LEVELS.index(candidate_level) - SENIORITY_LEVELS.index(job_level))
            multiplier *= tables.seniority_multiplier(gap)

        if candidate.remote_preference in REMOTE_PREFERENCES:
            if job.remote_policy == "onsite":
                multiplier *= 0.25
            elif job.remote_policy == "hybrid":
                multiplier *= 0.7

        return max(MULTIPLIER_FLOOR, multiplier)

    @staticmethod
    def _deal_probability(
        overall: float,
        multiplier: float,
        blockers: list[Blocker],
        warnings: list[MatchWarning],
    ) -> int:
        if blockers:
            return 5
        probability = round(overall * multiplier) - WARNING_PENALTY * len(warnings)
        return int(min(95, max(5, probability)))

    def _log(self, result: MatchResult) -> None:
        self._logger.info(
            "matching.result",
            candidate_id=result.candidate_id,
            job_id=result.job_id,
            overall_score=round(result.overall_score, 2),
            tier=result.tier,
            blockers=[item.factor for item in result.blockers],
            warnings=[item.factor for item in result.warnings],
            deal_probability=result.deal_probability,
            killed=result.killed,
        )
