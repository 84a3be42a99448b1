from __future__ import annotations

import pendulum
import pytest

from talentmatch.errors import StageTransitionError
from talentmatch.schemas import Submission

NOW = pendulum.datetime(2024, 1, 1, tz="UTC")


def build_submission(stage: str = "submitted") -> Submission:
    return Submission(
        submission_id="S-001",
        candidate_id="C-001",
        job_id="J-001",
        stage=stage,
        submitted_at=NOW,
        updated_at=NOW,
    )


def test_stages_advance_one_step_at_a_time():
    later = NOW.add(days=3)

    moved = build_submission().move_to("interview_1", at=later)

    assert moved.stage == "interview_1"
    assert moved.stage_entered_at == later
    assert moved.updated_at == later


def test_skipping_stages_is_rejected():
    with pytest.raises(StageTransitionError):
        build_submission().move_to("offer")


def test_any_open_stage_can_be_rejected():
    assert build_submission("interview_2").move_to("rejected").stage == "rejected"


@pytest.mark.parametrize("stage", ["hired", "rejected"])
def test_terminal_stages_are_final(stage):
    submission = build_submission(stage)

    assert submission.is_terminal
    assert not submission.can_move_to("submitted")
    with pytest.raises(StageTransitionError):
        submission.move_to("rejected")


def test_timestamps_are_normalized_to_utc():
    submission = Submission(
        submission_id="S-002",
        candidate_id="C-001",
        job_id="J-001",
        submitted_at="2024-01-01T10:00:00+02:00",
    )

    assert submission.submitted_at == pendulum.datetime(2024, 1, 1, 8, tz="UTC")
    assert submission.submitted_at.utcoffset().total_seconds() == 0
