"""Core heuristics: matching, deal health, interview responses, influence."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .deal_health import DealHealthCalculator
from .evaluators import (
    CommuteEvaluator,
    ExperienceEvaluator,
    HardKillEvaluator,
    IndustryEvaluator,
    SalaryEvaluator,
    SkillsEvaluator,
    StartDateEvaluator,
)
from .influence import AlertDraft, BehaviorScores, InfluenceScorer
from .interview import ResponseAction
from .matching import (
    Blocker,
    EvaluationResult,
    MatchingEngine,
    MatchResult,
    MatchWarning,
    select_tier,
)


@runtime_checkable
class Evaluator(Protocol):
    """Evaluator contract for computing factor scores and gates."""

    def evaluate(self, candidate: dict, context: dict) -> dict:
        """Return evaluation results for a candidate under the given context."""


__all__ = [
    "AlertDraft",
    "BehaviorScores",
    "Blocker",
    "CommuteEvaluator",
    "DealHealthCalculator",
    "EvaluationResult",
    "Evaluator",
    "ExperienceEvaluator",
    "HardKillEvaluator",
    "IndustryEvaluator",
    "InfluenceScorer",
    "MatchResult",
    "MatchWarning",
    "MatchingEngine",
    "ResponseAction",
    "SalaryEvaluator",
    "SkillsEvaluator",
    "StartDateEvaluator",
    "select_tier",
]
