"""Skill coverage evaluation against must-have and nice-to-have lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from rapidfuzz import fuzz

from ...schemas import Candidate, Job
from .base import gate, resolve_config

DEFAULT_SYNONYMS: dict[str, tuple[str, ...]] = {
    "javascript": ("js", "ecmascript"),
    "typescript": ("ts",),
    "kubernetes": ("k8s",),
    "postgresql": ("postgres", "psql"),
    "amazon web services": ("aws",),
    "google cloud platform": ("gcp", "google cloud"),
    "continuous integration": ("ci/cd", "ci"),
    "machine learning": ("ml",),
    "c#": ("csharp", ".net"),
    "golang": ("go",),
}


@dataclass
class SkillsConfig:
    """Configuration for skill matching."""

    min_similarity: float = 85.0
    partial_min_length: int = 4
    partial_credit: float = 0.7
    must_have_weight: float = 1.0
    nice_to_have_weight: float = 0.25
    synonyms: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_SYNONYMS))


@dataclass(slots=True)
class SkillMatch:
    skill: str
    matched_with: str
    match_type: str
    credit: float


class SkillsEvaluator:
    """Score weighted skill coverage; must-haves dominate nice-to-haves.

    A required skill is matched exactly, then through a synonym group, then
    fuzzily, and finally by substring. Substring hits need both sides to be
    at least ``partial_min_length`` characters and earn ``partial_credit``.
    """

    method = "skills"

    def __init__(self, *, config: SkillsConfig | None = None) -> None:
        self._config = config or SkillsConfig()

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = Candidate.model_validate(candidate)
        job = Job.model_validate(context["job"])
        thresholds = resolve_config(context).gate_thresholds

        must = [skill.strip() for skill in job.must_have_skills if skill and skill.strip()]
        nice = [skill.strip() for skill in job.nice_to_have_skills if skill and skill.strip()]
        corpus = [skill.strip().lower() for skill in profile.skills if skill and skill.strip()]

        if not (must or nice) or not corpus:
            return {
                "method": self.method,
                "scores": {},
                "gates": [],
                "metadata": {
                    "status": "insufficient_data",
                    "coverage": 1.0 if not must else None,
                },
            }

        must_matches = self._match_all(must, corpus)
        nice_matches = self._match_all(nice, corpus)

        must_credit = sum(match.credit for match in must_matches)
        nice_credit = sum(match.credit for match in nice_matches)
        total_weight = (
            self._config.must_have_weight * len(must)
            + self._config.nice_to_have_weight * len(nice)
        )
        credit = (
            self._config.must_have_weight * must_credit
            + self._config.nice_to_have_weight * nice_credit
        )
        score = credit / total_weight * 100 if total_weight > 0 else 0.0
        coverage = min(1.0, must_credit / len(must)) if must else 1.0

        gates = []
        if must and coverage * 100 < thresholds.min_skill_match_percent:
            gates.append(
                gate(
                    "skills",
                    "warn",
                    f"Only {round(coverage * 100)}% of must-have skills matched",
                )
            )

        matched = {match.skill for match in must_matches}
        return {
            "method": self.method,
            "scores": {"skills": score},
            "gates": gates,
            "metadata": {
                "coverage": coverage,
                "must_have_hits": [match.skill for match in must_matches],
                "nice_to_have_hits": [match.skill for match in nice_matches],
                "partial_matches": [
                    {"skill": match.skill, "matched_with": match.matched_with}
                    for match in (*must_matches, *nice_matches)
                    if match.match_type == "partial"
                ],
                "missing_must_haves": [skill for skill in must if skill not in matched],
                "min_similarity": self._config.min_similarity,
            },
        }

    def _match_all(self, required: Sequence[str], corpus: Sequence[str]) -> list[SkillMatch]:
        matches = []
        for skill in required:
            match = self._match(skill, corpus)
            if match is not None:
                matches.append(match)
        return matches

    def _aliases(self, needle: str) -> set[str]:
        aliases: set[str] = set()
        for canonical, alternatives in self._config.synonyms.items():
            group = {canonical.lower(), *(alt.lower() for alt in alternatives)}
            if needle in group:
                aliases |= group
        aliases.discard(needle)
        return aliases

    def _match(self, skill: str, corpus: Sequence[str]) -> SkillMatch | None:
        needle = skill.lower()
        if needle in corpus:
            return SkillMatch(skill, needle, "exact", 1.0)

        aliases = self._aliases(needle)
        for text in corpus:
            if text in aliases:
                return SkillMatch(skill, text, "alias", 1.0)

        best: tuple[float, str] | None = None
        for text in corpus:
            similarity = fuzz.token_set_ratio(needle, text)
            if similarity >= self._config.min_similarity and (best is None or similarity > best[0]):
                best = (similarity, text)
        if best is not None:
            return SkillMatch(skill, best[1], "fuzzy", best[0] / 100)

        min_length = self._config.partial_min_length
        if len(needle) >= min_length:
            for text in corpus:
                if len(text) >= min_length and (needle in text or text in needle):
                    return SkillMatch(skill, text, "partial", self._config.partial_credit)
        return None
