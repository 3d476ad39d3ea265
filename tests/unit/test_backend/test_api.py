"""
Unit tests for the FastAPI backend.
Runs the routers against an in-memory row store via dependency overrides.
"""

import pytest
from datetime import datetime

from fastapi.testclient import TestClient

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from backend.dependencies import get_config, get_database
from backend.main import app
from tracker.core.config import Config
from tracker.core.database import InMemoryDatabase

TODAY = datetime.now().strftime("%Y-%m-%d")


@pytest.fixture
def client(tmp_path):
    db = InMemoryDatabase()
    config = Config(tmp_path)
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_config] = lambda: config
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def outcome(client):
    response = client.post("/outcomes", json={"title": "Learn piano", "category": "Music"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def output(client, outcome):
    response = client.post("/outputs", json={
        "outcome_id": outcome["id"],
        "description": "Practice",
        "frequency_type": "daily",
    })
    assert response.status_code == 201
    return response.json()


def create_skill(client, outcome_id, name, confidence=2):
    return client.post("/skills", json={
        "outcome_id": outcome_id,
        "name": name,
        "initial_confidence": confidence,
    })


class TestOutcomesApi:
    """Tests for outcome and output endpoints."""

    def test_list_outcomes(self, client, outcome):
        response = client.get("/outcomes")
        assert response.status_code == 200
        assert [item["title"] for item in response.json()] == ["Learn piano"]

    def test_fixed_weekly_without_days_is_400(self, client, outcome):
        response = client.post("/outputs", json={
            "outcome_id": outcome["id"],
            "description": "Lesson",
            "frequency_type": "fixed_weekly",
        })
        assert response.status_code == 400

    def test_output_for_missing_outcome_is_404(self, client):
        response = client.post("/outputs", json={"outcome_id": "nope", "description": "x"})
        assert response.status_code == 404

    def test_outcome_outputs(self, client, outcome, output):
        response = client.get(f"/outcomes/{outcome['id']}/outputs")
        assert [item["id"] for item in response.json()] == [output["id"]]


class TestSkillsApi:
    """Tests for skill endpoints."""

    def test_create_and_duplicate(self, client, outcome):
        assert create_skill(client, outcome["id"], "Scales").status_code == 201
        response = create_skill(client, outcome["id"], "scales")
        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_invalid_confidence_is_400(self, client, outcome):
        assert create_skill(client, outcome["id"], "Scales", confidence=7).status_code == 400

    def test_update_and_stage(self, client, outcome):
        skill = create_skill(client, outcome["id"], "Scales").json()

        response = client.patch(f"/skills/{skill['id']}", json={
            "name": "Major scales", "initial_confidence": 3, "target_label": "BPM", "target_value": 100,
        })
        assert response.status_code == 200
        assert response.json()["target_value"] == 100

        response = client.post(f"/skills/{skill['id']}/stage", json={"stage": "review"})
        assert response.json()["stage"] == "review"

    def test_unknown_skill_is_404(self, client):
        assert client.get("/skills/nope/graduation").status_code == 404
        assert client.post("/skills/nope/stage", json={"stage": "review"}).status_code == 404

    def test_queue_orders_by_score(self, client, outcome):
        create_skill(client, outcome["id"], "Chords", confidence=5)
        create_skill(client, outcome["id"], "Scales", confidence=1)

        queue = client.get("/skills/queue").json()
        assert [entry["skill"]["name"] for entry in queue] == ["Scales", "Chords"]
        assert queue[0]["final_score"] >= queue[1]["final_score"]

        assert len(client.get("/skills/queue", params={"limit": 1}).json()) == 1

    def test_summary_has_each_outcome(self, client, outcome):
        response = client.get("/skills/summary", params={"week_of": TODAY})
        assert response.json() == {
            outcome["id"]: {"skills_worked_count": 0, "average_confidence_delta": None}
        }


class TestActionLogsApi:
    """Tests for saving action logs with skill logs."""

    def test_upsert_same_day(self, client, output):
        body = {"output_id": output["id"], "action_date": TODAY, "completed": 1, "total": 1}
        first = client.post("/action-logs", json=body).json()
        second = client.post("/action-logs", json={**body, "completed": 0}).json()

        assert first["created"] is True
        assert second["created"] is False
        assert second["action_log_id"] == first["action_log_id"]

    def test_graduation_candidates(self, client, outcome, output):
        skill = create_skill(client, outcome["id"], "Scales").json()

        response = client.post("/action-logs", json={
            "output_id": output["id"],
            "action_date": TODAY,
            "completed": 1,
            "total": 1,
            "skill_logs": [{"skill_item_id": skill["id"], "confidence": 4}],
        })
        assert response.status_code == 200
        assert response.json()["skill_logs_created"] == [skill["id"]]
        assert response.json()["graduation_candidates"] == []

        eligible = client.get(f"/skills/{skill['id']}/graduation").json()
        assert eligible == {"skill_id": skill["id"], "eligible": False}

    def test_bad_confidence_is_400(self, client, outcome, output):
        skill = create_skill(client, outcome["id"], "Scales").json()
        response = client.post("/action-logs", json={
            "output_id": output["id"],
            "action_date": TODAY,
            "completed": 1,
            "skill_logs": [{"skill_item_id": skill["id"], "confidence": 0}],
        })
        assert response.status_code == 400

    def test_bad_date_is_422(self, client, output):
        response = client.post("/action-logs", json={"output_id": output["id"], "action_date": "June 1"})
        assert response.status_code == 422

    def test_suppress_graduation(self, client, outcome):
        skill = create_skill(client, outcome["id"], "Scales").json()
        response = client.post(f"/skills/{skill['id']}/suppress-graduation")
        assert response.status_code == 200
        assert response.json()["graduation_suppressed_at"] is not None


class TestDashboardApi:
    """Tests for the daily dashboard endpoint."""

    def test_daily_payload(self, client, outcome, output):
        client.post("/action-logs", json={
            "output_id": output["id"], "action_date": TODAY, "completed": 1, "total": 1,
        })
        create_skill(client, outcome["id"], "Scales", confidence=1)

        response = client.get("/dashboard/daily", params={"date": TODAY})
        assert response.status_code == 200
        data = response.json()

        assert data["date"] == TODAY
        assert data["stats"] == {"scheduled_count": 1, "completed_count": 1, "completion_rate": 100}
        assert data["outcomes"][0]["outputs"][0]["today_log"]["completed"] == 1
        assert data["top_suggestions"][0]["skill"]["name"] == "Scales"
        assert outcome["id"] in data["skill_summary"]

    def test_bad_date_rejected(self, client):
        assert client.get("/dashboard/daily", params={"date": "tomorrow"}).status_code == 422

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Outcome Tracker API"
