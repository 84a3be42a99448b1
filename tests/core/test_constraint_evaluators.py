from __future__ import annotations

import pendulum
import pytest

from talentmatch.core.evaluators import (
    CommuteEvaluator,
    ExperienceEvaluator,
    IndustryEvaluator,
    SalaryEvaluator,
    StartDateEvaluator,
)
from talentmatch.schemas import Candidate, Job

AS_OF = pendulum.datetime(2024, 1, 1, tz="UTC")


def build_candidate(**fields) -> dict:
    return Candidate(candidate_id="C-200", **fields).model_dump(mode="python")


def build_job(**fields) -> dict:
    return Job(job_id="J-200", **fields).model_dump(mode="python")


def levels(result: dict) -> list[str]:
    return [item["level"] for item in result["gates"]]


@pytest.mark.parametrize(
    ("years", "score", "expected_levels"),
    [
        (6, 100.0, []),
        (4, 80.0, ["warn"]),
        (2, 40.0, ["fail"]),
        (10, 85.0, []),
        (14, 70.0, ["warn"]),
    ],
)
def test_experience_against_range(years, score, expected_levels):
    result = ExperienceEvaluator().evaluate(
        build_candidate(experience_years=years),
        {"job": build_job(experience_min=5, experience_max=8)},
    )

    assert result["scores"]["experience"] == score
    assert levels(result) == expected_levels


def test_experience_without_requirement_is_unknown():
    result = ExperienceEvaluator().evaluate(build_candidate(experience_years=3), {"job": build_job()})

    assert result["scores"] == {}


def test_salary_within_budget_scores_full():
    result = SalaryEvaluator().evaluate(
        build_candidate(expected_salary=55_000), {"job": build_job(salary_max=60_000)}
    )

    assert result["scores"]["salary"] == 100.0
    assert result["metadata"]["gap_percent"] == 0.0


def test_salary_moderately_above_budget_warns():
    result = SalaryEvaluator().evaluate(
        build_candidate(expected_salary=70_000), {"job": build_job(salary_max=60_000)}
    )

    assert result["scores"]["salary"] == 50.0
    assert levels(result) == ["warn"]


def test_salary_far_above_budget_fails():
    result = SalaryEvaluator().evaluate(
        build_candidate(expected_salary=80_000), {"job": build_job(salary_max=60_000)}
    )

    assert result["scores"]["salary"] == 0.0
    assert result["metadata"]["gap_percent"] == pytest.approx(33.33, abs=0.01)
    assert levels(result) == ["fail"]


@pytest.mark.parametrize(
    ("minutes", "score", "expected_levels"),
    [(30, 100.0, []), (60, 70.0, ["warn"]), (90, 0.0, ["fail"])],
)
def test_commute_thresholds(minutes, score, expected_levels):
    result = CommuteEvaluator().evaluate(
        build_candidate(commute_minutes=minutes), {"job": build_job(remote_policy="onsite")}
    )

    assert result["scores"]["commute"] == score
    assert levels(result) == expected_levels


def test_commute_ignored_for_remote_jobs():
    result = CommuteEvaluator().evaluate(
        build_candidate(commute_minutes=180), {"job": build_job(remote_policy="remote")}
    )

    assert result["scores"]["commute"] == 100.0
    assert result["gates"] == []


def test_start_date_measures_delay_from_as_of():
    result = StartDateEvaluator().evaluate(
        build_candidate(availability_date="2024-03-15"),
        {"job": build_job(), "as_of": AS_OF},
    )

    assert result["metadata"]["delay_days"] == 74
    assert result["scores"]["start_date"] == 50.0
    assert levels(result) == ["warn"]


def test_start_date_measures_delay_from_job_start_window():
    result = StartDateEvaluator().evaluate(
        build_candidate(availability_date="2024-02-10"),
        {"job": build_job(start_date="2024-02-01"), "as_of": AS_OF},
    )

    assert result["metadata"]["delay_days"] == 9
    assert result["scores"]["start_date"] == 100.0


def test_start_date_available_before_window_has_no_delay():
    result = StartDateEvaluator().evaluate(
        build_candidate(availability_date="2023-12-01"),
        {"job": build_job(), "as_of": AS_OF},
    )

    assert result["metadata"]["delay_days"] == 0


def test_industry_alignment():
    evaluator = IndustryEvaluator()

    matched = evaluator.evaluate(
        build_candidate(industry_experience=["FinTech"]), {"job": build_job(industry="fintech")}
    )
    mismatched = evaluator.evaluate(
        build_candidate(industry_experience=["Retail"]), {"job": build_job(industry="fintech")}
    )

    assert matched["scores"]["industry"] == 100.0
    assert mismatched["scores"]["industry"] == 50.0
