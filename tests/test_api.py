"""
Tests for the HTTP surface.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from agentfit.api.dependencies import get_engine
from agentfit.models.tailoring import EditMode
from agentfit.prompts import EDITING_TEMPLATE_IDS
from main import app

from conftest import RESUME, TAILORED_RESUME

USER = {"X-User-Id": "user-1"}
JOB = {
    "id": "job-42",
    "title": "Staff Data Engineer",
    "company": "Streamly",
    "description": "Build Kafka and Spark streaming pipelines on AWS.",
}


@pytest.fixture
def api(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestScoringEndpoints:
    def test_score(self, api, endpoint):
        endpoint.reply_scoring_roster()
        endpoint.reply_scoring_orchestration(74)
        response = api.post("/api/scoring", json={"resume": RESUME, "job": JOB}, headers=USER)

        assert response.status_code == 200
        body = response.json()
        assert body["job_id"] == "job-42"
        assert body["result"]["overall_score"] == 74
        assert body["result"]["category"] == "good"
        assert body["result"]["breakdown"]["technical_skills"]["weight"] == 0.25
        assert body["usage"]["total_tokens"] == 1350

    def test_score_without_resume_or_default_profile(self, api):
        response = api.post("/api/scoring", json={"job": JOB}, headers=USER)
        assert response.status_code == 400

    def test_score_uses_default_profile(self, api, endpoint):
        endpoint.reply_scoring_roster()
        endpoint.reply_scoring_orchestration(74)
        assert api.put("/api/cache/default-profile", json={"resume": RESUME}, headers=USER).status_code == 200

        response = api.post("/api/scoring", json={"job": JOB}, headers=USER)
        assert response.status_code == 200
        assert RESUME in endpoint.payloads[0]["messages"][1]["content"]

    def test_invalid_job_rejected(self, api):
        response = api.post("/api/scoring", json={"resume": RESUME, "job": {"id": "x"}})
        assert response.status_code == 422

    def test_batch(self, api, endpoint):
        endpoint.reply_scoring_roster()
        endpoint.reply_scoring_orchestration(74)
        jobs = [{**JOB, "id": "a"}, {**JOB, "id": "b"}]
        response = api.post("/api/scoring/batch", json={"resume": RESUME, "jobs": jobs})

        assert response.status_code == 200
        body = response.json()
        assert [r["job_id"] for r in body["results"]] == ["a", "b"]
        assert body["results"][0]["category"] == "good"
        assert body["total_tokens"] == 2 * 1350

    def test_batch_rejects_duplicate_ids(self, api):
        response = api.post("/api/scoring/batch", json={"resume": RESUME, "jobs": [JOB, JOB]})
        assert response.status_code == 400


class TestTailoringEndpoints:
    def test_tailor(self, api, endpoint):
        endpoint.reply_tailoring_roster()
        endpoint.reply_tailoring_orchestration()
        response = api.post(
            "/api/tailoring",
            json={"resume": RESUME, "job": JOB, "scoring_analysis": {"overall_score": 61}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["tailored_document"] == TAILORED_RESUME.strip()
        assert len(body["successful_agents"]) == 8
        assert body["is_fallback"] is False
        assert '"overall_score": 61' in endpoint.payloads[-1]["messages"][1]["content"]

    def test_edit_ask_mode(self, api, endpoint):
        endpoint.reply(EDITING_TEMPLATE_IDS[EditMode.ASK], "Lead with the Kafka project.")
        response = api.post(
            "/api/tailoring/edit",
            json={"resume": RESUME, "user_request": "What should I change?", "mode": "ask"},
        )

        assert response.status_code == 200
        assert response.json()["advice"] == "Lead with the Kafka project."

    def test_edit_failure(self, api):
        response = api.post("/api/tailoring/edit", json={"resume": RESUME, "user_request": "Shorten it"})
        assert response.status_code == 502

    def test_edit_with_garbled_upstream_body(self, api, endpoint):
        endpoint.reply(EDITING_TEMPLATE_IDS[EditMode.AGENT], httpx.Response(200, text="<html>bad gateway</html>"))
        response = api.post("/api/tailoring/edit", json={"resume": RESUME, "user_request": "Shorten it"})
        assert response.status_code == 502


class TestCacheEndpoints:
    def test_current_job(self, api):
        assert api.get("/api/cache/current-job", headers=USER).status_code == 404
        assert api.put("/api/cache/current-job", json=JOB, headers=USER).status_code == 200

        response = api.get("/api/cache/current-job", headers=USER)
        assert response.status_code == 200
        assert response.json()["id"] == "job-42"

    def test_user_header_required(self, api):
        assert api.get("/api/cache/stats").status_code == 400

    def test_stats_and_cleanup(self, api):
        api.put("/api/cache/default-profile", json={"resume": RESUME}, headers=USER)

        stats = api.get("/api/cache/stats", headers=USER).json()
        assert stats["by_kind"] == {"resume_default": 1}
        assert api.delete("/api/cache/expired").json() == {"deleted": 0}


def test_activity_listing(api, endpoint):
    endpoint.reply_scoring_roster()
    endpoint.reply_scoring_orchestration(74)
    api.post("/api/scoring", json={"resume": RESUME, "job": JOB}, headers=USER)

    body = api.get("/api/activity", params={"limit": 5}, headers=USER).json()
    assert len(body["events"]) == 5
    assert body["events"][0]["activity_type"] == "job_scoring_orchestration"
    assert body["total_tokens"] == 5 * 150
