"""Evaluator implementations for the matching engine."""

from .commute import CommuteEvaluator
from .experience import ExperienceConfig, ExperienceEvaluator
from .hard_kills import HardKillConfig, HardKillEvaluator
from .industry import IndustryConfig, IndustryEvaluator
from .salary import SalaryConfig, SalaryEvaluator
from .skills import SkillsConfig, SkillsEvaluator
from .start_date import StartDateEvaluator

__all__ = [
    "CommuteEvaluator",
    "ExperienceConfig",
    "ExperienceEvaluator",
    "HardKillConfig",
    "HardKillEvaluator",
    "IndustryConfig",
    "IndustryEvaluator",
    "SalaryConfig",
    "SalaryEvaluator",
    "SkillsConfig",
    "SkillsEvaluator",
    "StartDateEvaluator",
]
