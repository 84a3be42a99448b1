from __future__ import annotations

from talentmatch.core.evaluators.skills import SkillsConfig, SkillsEvaluator
from talentmatch.schemas import Candidate, Job, MatchingConfig


def build_candidate(skills: list[str]) -> dict:
    return Candidate(candidate_id="C-100", skills=skills).model_dump(mode="python")


def build_job(must: list[str], nice: list[str] | None = None) -> dict:
    job = Job(job_id="J-100", must_have_skills=must, nice_to_have_skills=nice or [])
    return job.model_dump(mode="python")


def test_must_haves_match_by_token_overlap_and_synonym():
    evaluator = SkillsEvaluator()
    candidate = build_candidate(["python 3", "Amazon Web Services"])
    job = build_job(["Python", "AWS"], ["Docker"])

    result = evaluator.evaluate(candidate, {"job": job})

    assert result["metadata"]["coverage"] == 1.0
    assert result["metadata"]["must_have_hits"] == ["Python", "AWS"]
    assert result["metadata"]["nice_to_have_hits"] == []
    assert round(result["scores"]["skills"], 2) == round(2 / 2.25 * 100, 2)
    assert result["gates"] == []


def test_low_must_have_coverage_warns():
    evaluator = SkillsEvaluator()
    candidate = build_candidate(["Java"])
    job = build_job(["Rust", "Haskell", "Erlang", "Elixir"])

    result = evaluator.evaluate(candidate, {"job": job})

    assert result["scores"]["skills"] == 0.0
    assert result["metadata"]["coverage"] == 0.0
    assert [item["level"] for item in result["gates"]] == ["warn"]


def test_coverage_threshold_comes_from_matching_config():
    evaluator = SkillsEvaluator()
    candidate = build_candidate(["Rust"])
    job = build_job(["Rust", "Haskell", "Erlang", "Elixir"])
    config = MatchingConfig.from_record({"gate_thresholds": {"min_skill_match_percent": 20}})

    result = evaluator.evaluate(candidate, {"job": job, "matching_config": config})

    assert result["metadata"]["coverage"] == 0.25
    assert result["gates"] == []


def test_missing_candidate_skills_is_unknown():
    evaluator = SkillsEvaluator()

    result = evaluator.evaluate(build_candidate([]), {"job": build_job(["Python"])})

    assert result["scores"] == {}
    assert result["metadata"]["coverage"] is None


def test_job_without_skill_requirements_has_full_coverage():
    evaluator = SkillsEvaluator()

    result = evaluator.evaluate(build_candidate(["Python"]), {"job": build_job([])})

    assert result["scores"] == {}
    assert result["metadata"]["coverage"] == 1.0


def test_custom_synonyms_extend_matching():
    evaluator = SkillsEvaluator(config=SkillsConfig(synonyms={"sap s/4hana": ("s4",)}))
    candidate = build_candidate(["s4"])
    job = build_job(["SAP S/4HANA"])

    result = evaluator.evaluate(candidate, {"job": job})

    assert result["metadata"]["coverage"] == 1.0


def test_short_skills_do_not_match_inside_longer_names():
    evaluator = SkillsEvaluator()
    candidate = build_candidate(["Go", "R"])
    job = build_job(["MongoDB", "Django", "Terraform"])

    result = evaluator.evaluate(candidate, {"job": job})

    assert result["metadata"]["coverage"] == 0.0
    assert result["metadata"]["must_have_hits"] == []
    assert result["scores"]["skills"] == 0.0


def test_substring_match_earns_partial_credit_only():
    evaluator = SkillsEvaluator()
    candidate = build_candidate(["JavaScript"])
    job = build_job(["Java"])

    result = evaluator.evaluate(candidate, {"job": job})

    assert result["metadata"]["coverage"] == 0.7
    assert round(result["scores"]["skills"], 6) == 70.0
    assert result["metadata"]["partial_matches"] == [
        {"skill": "Java", "matched_with": "javascript"}
    ]


def test_exact_match_wins_over_substring():
    evaluator = SkillsEvaluator()
    candidate = build_candidate(["JavaScript", "Java"])
    job = build_job(["Java"])

    result = evaluator.evaluate(candidate, {"job": job})

    assert result["metadata"]["coverage"] == 1.0
    assert result["metadata"]["partial_matches"] == []
