"""Binary compliance checks that disqualify a candidate outright."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ...schemas import Candidate, Job
from .base import gate, resolve_config

CEFR_ORDER: tuple[str, ...] = ("a1", "a2", "b1", "b2", "c1", "c2", "native")

LANGUAGE_ALIASES: dict[str, str] = {
    "english": "en",
    "englisch": "en",
    "german": "de",
    "deutsch": "de",
    "french": "fr",
    "französisch": "fr",
    "spanish": "es",
    "italian": "it",
    "dutch": "nl",
    "polish": "pl",
    "japanese": "ja",
}


@dataclass
class HardKillConfig:
    language_aliases: dict[str, str] = field(default_factory=lambda: dict(LANGUAGE_ALIASES))


def level_rank(level: str | None) -> int | None:
    if not level:
        return None
    normalized = level.strip().lower()
    if normalized in ("mother tongue", "muttersprache"):
        normalized = "native"
    try:
        return CEFR_ORDER.index(normalized)
    except ValueError:
        return None


class HardKillEvaluator:
    """Check visa, language, onsite and license requirements.

    Each check runs only while its ``hard_kill_defaults`` switch is on. A
    failed check yields a ``kill`` gate; missing candidate levels are not
    treated as failures.
    """

    method = "hard_kills"

    def __init__(self, *, config: HardKillConfig | None = None) -> None:
        self._config = config or HardKillConfig()

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = Candidate.model_validate(candidate)
        job = Job.model_validate(context["job"])
        switches = resolve_config(context).hard_kill_defaults
        gates: list[dict[str, str]] = []
        checked: list[str] = []

        if switches.visa_required:
            checked.append("visa")
            if profile.visa_required and not job.visa_sponsorship:
                gates.append(gate("visa", "kill", "Candidate needs visa sponsorship the job does not offer"))

        if switches.language_required:
            checked.append("language")
            gates.extend(self._language_gates(profile, job))

        if switches.onsite_required:
            checked.append("onsite")
            onsite_job = job.onsite_required or job.remote_policy == "onsite"
            if onsite_job and profile.remote_preference == "remote_only":
                gates.append(gate("onsite", "kill", "Job requires onsite presence, candidate is remote-only"))

        if switches.license_required:
            checked.append("license")
            held = [item.strip().lower() for item in profile.certifications if item and item.strip()]
            for required in job.required_certifications:
                needle = required.strip().lower()
                if needle and not any(needle in item or item in needle for item in held):
                    gates.append(gate("license", "kill", f"Missing required certification: {required}"))

        return {
            "method": self.method,
            "scores": {},
            "gates": gates,
            "metadata": {"checked": checked},
        }

    def _normalize_language(self, value: str) -> str:
        normalized = value.strip().lower()
        return self._config.language_aliases.get(normalized, normalized)

    def _language_gates(self, profile: Candidate, job: Job) -> list[dict[str, str]]:
        spoken = {
            self._normalize_language(item.language): item.level for item in profile.languages
        }
        gates = []
        for requirement in job.required_languages:
            code = self._normalize_language(requirement.code)
            if code not in spoken:
                gates.append(gate("language", "kill", f"Language {requirement.code} is required"))
                continue
            have = level_rank(spoken[code])
            need = level_rank(requirement.min_level)
            if have is not None and need is not None and have < need:
                gates.append(
                    gate(
                        "language",
                        "kill",
                        f"Language {requirement.code} requires {requirement.min_level.upper()}, "
                        f"candidate has {str(spoken[code]).upper()}",
                    )
                )
        return gates
