from __future__ import annotations

import pytest

from talentmatch.errors import ConfigError
from talentmatch.schemas import MatchingConfig


def test_defaults_are_normalized():
    config = MatchingConfig()

    assert config.weights.fit + config.weights.constraints == pytest.approx(1.0)
    assert config.fit_breakdown.skills == 0.5
    assert config.constraint_breakdown.start_date == 0.25
    assert config.display_policies.hot.max_blockers == 0
    assert config.weight_warnings == []


def test_drifting_weights_are_renormalized_and_flagged():
    config = MatchingConfig.from_record({"weights": {"fit": 0.8, "constraints": 0.4}})

    assert config.weights.fit == pytest.approx(2 / 3)
    assert config.weights.constraints == pytest.approx(1 / 3)
    assert config.weight_warnings == ["weights sums to 1.20; renormalized to 1.00"]


def test_strict_mode_rejects_drift():
    with pytest.raises(ConfigError) as excinfo:
        MatchingConfig.from_record(
            {"fit_breakdown": {"skills": 0.5, "experience": 0.5, "industry": 0.5}},
            strict=True,
        )

    assert excinfo.value.issues == ["fit_breakdown sums to 1.50"]


def test_breakdowns_nested_under_weights_are_accepted():
    config = MatchingConfig.from_record(
        {
            "weights": {
                "fit": 0.7,
                "constraints": 0.3,
                "constraint_breakdown": {"salary": 0.5, "commute": 0.25, "startDate": 0.25},
            }
        }
    )

    assert config.constraint_breakdown.salary == 0.5
    assert config.constraint_breakdown.start_date == 0.25


@pytest.mark.parametrize(
    "record",
    [
        {"weights": {"fit": -0.2, "constraints": 1.2}},
        {"weights": {"fit": 0, "constraints": 0}},
        {"display_policies": {"hot": {"minScore": 80, "minCoverage": 0.8, "maxBlockers": 1}}},
        {"unknown_section": {}},
        {"version": 0},
    ],
)
def test_invalid_records_raise_config_error(record):
    with pytest.raises(ConfigError):
        MatchingConfig.from_record(record)


def test_record_round_trip_uses_wire_aliases():
    config = MatchingConfig.from_record(
        {"display_policies": {"maybe": {"minScore": 40, "minCoverage": 0.3, "maxBlockers": 2}}}
    )

    record = config.to_record()

    assert record["display_policies"]["maybe"]["minScore"] == 40
    assert record["constraint_breakdown"]["startDate"] == 0.25
    assert MatchingConfig.from_record(record) == config


def test_weight_issues_reports_without_raising():
    issues = MatchingConfig.weight_issues({"weights": {"fit": 0.5, "constraints": 0.3}})

    assert issues == ["weights sums to 0.80"]


def test_dealbreaker_lookups():
    tables = MatchingConfig().dealbreaker_multipliers

    assert tables.lookup(tables.salary, 5) == 0.6
    assert tables.lookup(tables.salary, 45) == 0.05
    assert tables.lookup(tables.start_date, 10) == 1.0
    assert tables.seniority_multiplier(0) == 1.0
    assert tables.seniority_multiplier(2) == 0.25
    assert tables.seniority_multiplier(6) == 0.1


def test_stored_warnings_are_kept_when_reloading():
    saved = MatchingConfig.from_record({"weights": {"fit": 1.0, "constraints": 1.0}})

    reloaded = MatchingConfig.from_record(saved.model_dump(mode="json"))

    assert reloaded.weights.fit == pytest.approx(0.5)
    assert reloaded.weight_warnings == ["weights sums to 2.00; renormalized to 1.00"]


def test_new_drift_is_added_after_carried_warnings():
    record = {
        "weights": {"fit": 0.9, "constraints": 0.3},
        "weight_warnings": ["fit_breakdown sums to 1.10; renormalized to 1.00"],
    }

    config = MatchingConfig.from_record(record)

    assert config.weight_warnings == [
        "fit_breakdown sums to 1.10; renormalized to 1.00",
        "weights sums to 1.20; renormalized to 1.00",
    ]
