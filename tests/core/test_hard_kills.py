from __future__ import annotations

from talentmatch.core.evaluators.hard_kills import HardKillEvaluator, level_rank
from talentmatch.schemas import Candidate, Job, MatchingConfig


def build_candidate(**fields) -> dict:
    return Candidate(candidate_id="C-300", **fields).model_dump(mode="python")


def build_job(**fields) -> dict:
    return Job(job_id="J-300", **fields).model_dump(mode="python")


def kill_factors(result: dict) -> list[str]:
    return [item["factor"] for item in result["gates"] if item["level"] == "kill"]


def test_visa_needed_without_sponsorship_is_killed():
    result = HardKillEvaluator().evaluate(
        build_candidate(visa_required=True), {"job": build_job(visa_sponsorship=False)}
    )

    assert kill_factors(result) == ["visa"]


def test_visa_check_can_be_switched_off():
    config = MatchingConfig.from_record({"hard_kill_defaults": {"visa_required": False}})

    result = HardKillEvaluator().evaluate(
        build_candidate(visa_required=True),
        {"job": build_job(visa_sponsorship=False), "matching_config": config},
    )

    assert kill_factors(result) == []
    assert "visa" not in result["metadata"]["checked"]


def test_language_level_below_requirement_is_killed():
    job = build_job(required_languages=[{"code": "de", "min_level": "c1"}])

    weak = HardKillEvaluator().evaluate(
        build_candidate(languages=[{"language": "German", "level": "B2"}]), {"job": job}
    )
    strong = HardKillEvaluator().evaluate(
        build_candidate(languages=[{"language": "Deutsch", "level": "C2"}]), {"job": job}
    )

    assert kill_factors(weak) == ["language"]
    assert kill_factors(strong) == []


def test_missing_language_kills_but_missing_level_does_not():
    job = build_job(required_languages=[{"code": "en"}])

    absent = HardKillEvaluator().evaluate(build_candidate(), {"job": job})
    unleveled = HardKillEvaluator().evaluate(
        build_candidate(languages=[{"language": "English"}]), {"job": job}
    )

    assert kill_factors(absent) == ["language"]
    assert kill_factors(unleveled) == []


def test_remote_only_candidate_for_onsite_job_is_killed():
    result = HardKillEvaluator().evaluate(
        build_candidate(remote_preference="remote_only"),
        {"job": build_job(onsite_required=True)},
    )

    assert kill_factors(result) == ["onsite"]


def test_missing_certification_is_killed():
    result = HardKillEvaluator().evaluate(
        build_candidate(certifications=["AWS Solutions Architect"]),
        {"job": build_job(required_certifications=["CISSP"])},
    )

    assert kill_factors(result) == ["license"]


def test_level_rank_orders_cefr_levels():
    assert level_rank("A1") < level_rank("b2") < level_rank("C2") < level_rank("native")
    assert level_rank("Muttersprache") == level_rank("native")
    assert level_rank("fluent") is None
