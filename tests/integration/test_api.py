from __future__ import annotations

import pendulum
import pytest
from fastapi.testclient import TestClient

from talentmatch.container import create_container
from talentmatch.schemas import Candidate, Job, Submission
from talentmatch.storage import InMemoryRepository

NOW = pendulum.datetime(2024, 1, 1, 9, tz="UTC")


@pytest.fixture
def repository() -> InMemoryRepository:
    repository = InMemoryRepository()
    repository.add_candidate(
        Candidate(candidate_id="C-001", skills=["Python"], expected_salary=50_000)
    )
    repository.add_job(
        Job(job_id="J-001", title="Data Engineer", must_have_skills=["Python"], salary_max=60_000)
    )
    repository.add_submission(
        Submission(
            submission_id="S-001",
            candidate_id="C-001",
            job_id="J-001",
            submitted_at=NOW,
            updated_at=NOW,
        )
    )
    return repository


@pytest.fixture
def client(repository: InMemoryRepository) -> TestClient:
    container = create_container(repository=repository, now_provider=lambda: NOW)
    return TestClient(container.api())


def test_health_lists_functions(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert "calculate-match" in response.json()["functions"]


def test_unknown_function_is_404(client: TestClient) -> None:
    response = client.post("/functions/send-fax", json={})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Unknown function: send-fax"}


def test_invalid_payload_is_400_with_details(client: TestClient) -> None:
    response = client.post("/functions/calculate-match", json={"jobIds": []})

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert {item["loc"] for item in body["details"]} >= {"candidateId", "jobIds"}


def test_calculate_match_over_http(client: TestClient, repository: InMemoryRepository) -> None:
    response = client.post(
        "/functions/calculate-match", json={"candidateId": "C-001", "jobIds": ["J-001"]}
    )

    assert response.status_code == 200
    result = response.json()["results"][0]
    assert result["jobId"] == "J-001"
    assert repository.get_submission("S-001").match_score == result["overallScore"]


def test_deal_health_requires_a_target(client: TestClient) -> None:
    response = client.post("/functions/deal-health", json={})

    assert response.status_code == 400


def test_save_config_rejects_hot_tier_with_blockers(client: TestClient) -> None:
    response = client.post(
        "/functions/save-matching-config",
        json={
            "config": {
                "display_policies": {
                    "hot": {"minScore": 80, "minCoverage": 0.8, "maxBlockers": 1}
                }
            }
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "display_policies.hot.maxBlockers must be 0"


def test_interview_response_flow(client: TestClient) -> None:
    invitation = client.post(
        "/functions/send-interview-invitation",
        json={
            "submissionId": "S-001",
            "meetingFormat": "video",
            "durationMinutes": 30,
            "proposedSlots": ["2024-01-10T10:00:00Z", "2024-01-11T10:00:00Z"],
        },
    ).json()
    token = invitation["responseToken"]

    view = client.get(f"/interview/respond/{token}")
    assert view.status_code == 200
    assert view.json()["actionable"] is True
    assert len(view.json()["slots"]) == 2

    accepted = client.post(
        f"/interview/respond/{token}", json={"action": "accept", "selectedSlotIndex": 1}
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "scheduled"

    repeated = client.post(f"/interview/respond/{token}", json={"action": "decline"})
    assert repeated.status_code == 409
    assert repeated.json() == {"success": False, "error": "This invitation was already handled"}

    assert client.get(f"/interview/respond/{token}").json()["actionable"] is False


def test_counter_proposal_over_http(client: TestClient) -> None:
    token = client.post(
        "/functions/send-interview-invitation",
        json={
            "submissionId": "S-001",
            "meetingFormat": "phone",
            "durationMinutes": 30,
            "proposedSlots": ["2024-01-10T10:00:00Z"],
        },
    ).json()["responseToken"]

    too_many = client.post(
        f"/interview/respond/{token}",
        json={
            "action": "counter",
            "counterSlots": [f"2024-01-2{day}T10:00:00Z" for day in range(4)],
        },
    )
    countered = client.post(
        f"/interview/respond/{token}",
        json={"action": "counter", "counterSlots": ["2024-01-20T10:00:00Z"]},
    )

    assert too_many.status_code == 400
    assert countered.status_code == 200
    assert countered.json()["counterSlots"] == ["2024-01-20T10:00:00+00:00"]


def test_unknown_token_is_401(client: TestClient) -> None:
    response = client.get("/interview/respond/deadbeef")

    assert response.status_code == 401


def test_unknown_action_is_400(client: TestClient) -> None:
    response = client.post("/interview/respond/deadbeef", json={"action": "ignore"})

    assert response.status_code == 400
