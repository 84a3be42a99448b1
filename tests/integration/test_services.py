from __future__ import annotations

import threading

import pendulum
import pytest

from talentmatch.container import create_container
from talentmatch.errors import (
    InvitationAlreadyHandled,
    NotFound,
    StageTransitionError,
    Unauthorized,
)
from talentmatch.schemas import Candidate, Job, Submission
from talentmatch.storage import InMemoryRepository, JsonSnapshotStore, Repository

NOW = pendulum.datetime(2024, 1, 1, 9, tz="UTC")
SLOTS = ["2024-01-10T10:00:00Z", "2024-01-11T14:00:00Z"]


def seeded_repository(**submission_overrides) -> InMemoryRepository:
    repository = InMemoryRepository()
    repository.add_candidate(
        Candidate(
            candidate_id="C-001",
            full_name="Ada Example",
            skills=["Python", "AWS"],
            experience_years=6,
            expected_salary=80_000,
            commute_minutes=20,
            availability_date="2024-01-08",
        )
    )
    repository.add_job(
        Job(
            job_id="J-001",
            title="Backend Engineer",
            company_name="Acme",
            must_have_skills=["Python", "AWS"],
            experience_min=5,
            experience_max=8,
            salary_max=60_000,
        )
    )
    fields = {
        "submission_id": "S-001",
        "candidate_id": "C-001",
        "job_id": "J-001",
        "recruiter_id": "R-001",
        "submitted_at": NOW.subtract(days=3),
        "updated_at": NOW.subtract(days=3),
        "opt_in_requested_at": NOW.subtract(hours=60),
    }
    fields.update(submission_overrides)
    repository.add_submission(Submission(**fields))
    return repository


def build_container(repository: InMemoryRepository):
    return create_container(repository=repository, now_provider=lambda: NOW)


def test_calculate_match_writes_score_onto_submission():
    repository = seeded_repository()
    service = build_container(repository).match_service()

    response = service.calculate(candidate_id="C-001", job_ids=["J-001"])

    result = response["results"][0]
    assert response["configProfile"] == "default"
    assert [item["factor"] for item in result["blockers"]] == ["salary"]
    submission = repository.get_submission("S-001")
    assert submission.match_score == result["overallScore"]
    assert submission.match_policy == result["tier"]
    assert submission.updated_at == NOW.subtract(days=3)


def test_calculate_match_unknown_job_is_not_found():
    service = build_container(seeded_repository()).match_service()

    with pytest.raises(NotFound):
        service.calculate(candidate_id="C-001", job_ids=["J-404"])


def test_saving_configs_versions_the_profile():
    repository = seeded_repository()
    service = build_container(repository).match_service()

    first = service.save_config(record={"weights": {"fit": 0.6, "constraints": 0.4}})
    second = service.save_config(record={"weights": {"fit": 1.0, "constraints": 1.0}})

    assert (first["version"], second["version"]) == (1, 2)
    assert second["warnings"] == ["weights sums to 2.00; renormalized to 1.00"]
    versions = repository.matching_configs("default")
    assert [item.active for item in versions] == [False, True]
    assert service.resolve_config("default").weights.fit == pytest.approx(0.5)


def test_unknown_profile_is_not_found():
    service = build_container(seeded_repository()).match_service()

    with pytest.raises(NotFound):
        service.resolve_config("executive")


def test_weight_warnings_survive_a_store_round_trip(tmp_path):
    repository = seeded_repository()
    build_container(repository).match_service().save_config(
        record={"weights": {"fit": 1.0, "constraints": 1.0}}
    )
    store = tmp_path / "store.json"

    JsonSnapshotStore.save(repository, store)
    reloaded = JsonSnapshotStore.load(store)

    config = build_container(reloaded).match_service().resolve_config("default")
    assert config.version == 1
    assert config.weights.fit == pytest.approx(0.5)
    assert config.weight_warnings == ["weights sums to 2.00; renormalized to 1.00"]


def test_submitted_configs_do_not_bring_their_own_warnings():
    service = build_container(seeded_repository()).match_service()

    saved = service.save_config(
        record={"weights": {"fit": 0.7, "constraints": 0.3}, "weight_warnings": ["stale"]}
    )

    assert saved["warnings"] == []


def test_in_memory_repository_satisfies_the_service_protocol():
    assert isinstance(InMemoryRepository(), Repository)


def test_invitation_and_acceptance_update_the_submission():
    repository = seeded_repository()
    service = build_container(repository).interview_service()

    invitation = service.send_invitation(
        submission_id="S-001",
        proposed_slots=SLOTS,
        duration_minutes=45,
        meeting_format="video",
    )

    token = invitation["responseToken"]
    assert len(token) == 32
    assert invitation["responseUrls"]["accept"].endswith(f"/interview/respond/{token}?action=accept")
    submission = repository.get_submission("S-001")
    assert (submission.stage, submission.status) == ("interview_1", "interview_requested")

    response = service.respond(action="accept", response_token=token, selected_slot_index=0)

    assert response["status"] == "scheduled"
    assert response["scheduledAt"].startswith("2024-01-10T10:00:00")
    assert "SUMMARY:Interview: Backend Engineer" in response["ical"]
    assert repository.get_submission("S-001").status == "interview_scheduled"
    assert repository.find_interview_by_token(token).token_consumed_at == NOW

    with pytest.raises(InvitationAlreadyHandled):
        service.respond(action="decline", response_token=token)


def test_second_round_after_scheduled_interview():
    repository = seeded_repository()
    service = build_container(repository).interview_service()
    first = service.send_invitation(
        submission_id="S-001", proposed_slots=SLOTS, duration_minutes=45, meeting_format="phone"
    )
    service.respond(action="accept", response_token=first["responseToken"], selected_slot_index=1)

    service.send_invitation(
        submission_id="S-001", proposed_slots=SLOTS, duration_minutes=60, meeting_format="video"
    )

    assert repository.get_submission("S-001").stage == "interview_2"


def test_invitation_for_closed_submission_rolls_back():
    repository = seeded_repository(stage="hired")
    service = build_container(repository).interview_service()

    with pytest.raises(StageTransitionError):
        service.send_invitation(
            submission_id="S-001", proposed_slots=SLOTS, duration_minutes=30, meeting_format="phone"
        )

    assert repository.list_interviews("S-001") == []


def test_unknown_token_is_unauthorized():
    service = build_container(seeded_repository()).interview_service()

    with pytest.raises(Unauthorized):
        service.respond(action="accept", response_token="0" * 32, selected_slot_index=0)


def test_concurrent_responses_commit_exactly_once():
    repository = seeded_repository()
    service = build_container(repository).interview_service()
    token = service.send_invitation(
        submission_id="S-001", proposed_slots=SLOTS, duration_minutes=30, meeting_format="phone"
    )["responseToken"]
    outcomes: list[str] = []
    barrier = threading.Barrier(4)

    def respond(action: str) -> None:
        barrier.wait()
        try:
            service.respond(
                action=action,
                response_token=token,
                selected_slot_index=0,
                decline_reason="timing",
            )
        except InvitationAlreadyHandled:
            outcomes.append("conflict")
        else:
            outcomes.append("ok")

    threads = [
        threading.Thread(target=respond, args=(action,))
        for action in ("accept", "decline", "accept", "decline")
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["conflict", "conflict", "conflict", "ok"]


def test_deal_health_recalculation_upserts_snapshots():
    repository = seeded_repository()
    repository.add_submission(
        Submission(
            submission_id="S-002",
            candidate_id="C-001",
            job_id="J-001",
            stage="rejected",
            submitted_at=NOW,
            updated_at=NOW,
        )
    )
    service = build_container(repository).deal_health_service()

    assert service.recalculate_all() == 1
    snapshot = repository.get_deal_health("S-001")
    assert snapshot.bottleneck == "candidate_response"
    assert repository.get_deal_health("S-002") is None

    with pytest.raises(NotFound):
        service.recalculate("S-404")


def test_influence_run_does_not_duplicate_alerts():
    repository = seeded_repository()
    service = build_container(repository).influence_service()

    first = service.run()
    second = service.run()

    assert first["submissions_processed"] == 1
    assert first["behaviors_updated"] == 1
    assert first["alerts_generated"] == 2
    assert second["alerts_generated"] == 0
    alerts = repository.list_alerts(submission_id="S-001")
    assert sorted(item.alert_type for item in alerts) == ["opt_in_pending_48h", "salary_mismatch"]
    assert repository.get_recruiter_score("R-001") is not None


def test_dismissed_alert_can_be_raised_again():
    repository = seeded_repository()
    service = build_container(repository).influence_service()
    service.run()
    alert = next(
        item
        for item in repository.list_alerts(submission_id="S-001")
        if item.alert_type == "salary_mismatch"
    )

    repository.dismiss_alert(alert.alert_id, action_taken="called candidate")
    rerun = service.run()

    assert rerun["alerts_generated"] == 1
    assert len(repository.list_alerts(submission_id="S-001", include_dismissed=False)) == 2
