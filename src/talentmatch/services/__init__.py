"""Services binding the core heuristics to the repository."""

from .deal_health import DealHealthService
from .influence import InfluenceService
from .interviews import InterviewService, generate_token
from .matching import MatchService

__all__ = [
    "DealHealthService",
    "InfluenceService",
    "InterviewService",
    "MatchService",
    "generate_token",
]
