# tests/test_api.py
import asyncio
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedAdapter, evaluation_payload
from medaieval.api.dashboard import time_ago
from medaieval.gateway import AIGateway
from medaieval.llm.errors import ConfigurationError
from medaieval.main import app
from medaieval.models import StoredAnswer
from medaieval.wiring import get_gateway


@pytest.fixture
def broken_gateway():
    gateway = AIGateway(
        [ScriptedAdapter("A", ConfigurationError("A", "A_API_KEY environment variable is missing"))]
    )
    app.dependency_overrides[get_gateway] = lambda: gateway
    return gateway


def generate(client: TestClient, specialty="Cardiology", difficulty="Foundation", count=3):
    return client.post(
        "/api/questions/generate",
        json={"specialty": specialty, "difficulty": difficulty, "count": count},
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_user_is_fixed_mock_user(client):
    assert client.get("/api/user").json() == {"id": 1, "name": "Dr. Jane Smith", "role": "Medical Student, Year 5"}


class TestGenerateQuestions:
    def test_returns_stripped_questions(self, client):
        response = generate(client)

        assert response.status_code == 201
        data = response.json()
        assert data["provider"] == "mock"
        assert len(data["questions"]) == 3
        for q in data["questions"]:
            assert set(q) == {"id", "specialty", "difficulty", "scenario", "question"}
            assert q["difficulty"] == "Foundation"
            assert q["specialty"] == "Cardiology"

    def test_questions_are_persisted_with_rubric(self, client, repo):
        data = generate(client, count=1).json()
        stored = repo.questions[data["questions"][0]["id"]]
        assert stored.model_answer
        assert stored.strengths
        assert repo.specialties[stored.specialty_id].name == "Cardiology"

    def test_unknown_specialty_is_created(self, client):
        generate(client, specialty="Dermatology", count=1)
        names = [s["name"] for s in client.get("/api/specialties").json()]
        assert "Dermatology" in names

    @pytest.mark.parametrize(
        "body",
        [
            {"specialty": "Cardiology", "difficulty": "Foundation", "count": 0},
            {"specialty": "Cardiology", "difficulty": "Foundation", "count": 21},
            {"specialty": "Cardiology", "difficulty": "Expert", "count": 1},
            {"specialty": "", "difficulty": "Foundation", "count": 1},
        ],
    )
    def test_invalid_request_is_rejected(self, client, body):
        assert client.post("/api/questions/generate", json=body).status_code == 422

    def test_exhausted_providers_give_503(self, client, broken_gateway):
        response = generate(client)
        assert response.status_code == 503
        assert response.json()["detail"] == "All AI providers failed. Please check your API credentials."
        assert "A_API_KEY" not in response.text


class TestAnswers:
    def test_submit_answer_saves_evaluation_with_scale(self, client, repo):
        qid = generate(client, count=1).json()["questions"][0]["id"]

        response = client.post("/api/answers", json={"questionId": qid, "answer": "ECG and troponin"})

        assert response.status_code == 201
        data = response.json()
        assert data["provider"] == "mock"
        assert data["questionId"] == qid
        assert data["answer"] == "ECG and troponin"
        assert data["evaluation"]["score"] == 7
        assert data["evaluation"]["scoreScale"] == "1-10"
        assert len(repo.attempts) == 1
        assert repo.attempts[0].score == 7

    def test_feedback_combines_question_and_evaluation(self, client):
        qid = generate(client, count=1).json()["questions"][0]["id"]
        client.post("/api/answers", json={"questionId": qid, "answer": "ECG and troponin"})

        feedback = client.get(f"/api/feedback/{qid}").json()

        assert feedback["id"] == qid
        assert feedback["specialty"] == "Cardiology"
        assert feedback["userAnswer"] == "ECG and troponin"
        assert feedback["score"] == 7
        assert feedback["scoreScale"] == "1-10"
        assert feedback["strengths"]
        assert feedback["relatedResources"] == ["NICE Guidelines"]

    def test_feedback_defaults_when_evaluation_is_sparse(self, client, repo):
        qid = generate(client, count=1).json()["questions"][0]["id"]

        asyncio.run(repo.save_answer(StoredAnswer(question_id=qid, user_id=1, answer="?", evaluation={})))

        feedback = client.get(f"/api/feedback/{qid}").json()

        assert feedback["score"] == 0
        assert feedback["scoreScale"] is None
        assert feedback["modelAnswer"] == ""
        assert feedback["strengths"] == []
        assert feedback["relatedResources"] == []

    def test_feedback_without_answer_is_404(self, client):
        qid = generate(client, count=1).json()["questions"][0]["id"]
        assert client.get(f"/api/feedback/{qid}").status_code == 404

    def test_answer_to_unknown_question_is_404(self, client):
        response = client.post("/api/answers", json={"questionId": 9999, "answer": "x"})
        assert response.status_code == 404

    def test_exhausted_providers_give_503_and_save_nothing(self, client, repo):
        qid = generate(client, count=1).json()["questions"][0]["id"]
        gateway = AIGateway([ScriptedAdapter("A", "")])
        app.dependency_overrides[get_gateway] = lambda: gateway

        response = client.post("/api/answers", json={"questionId": qid, "answer": "x"})

        assert response.status_code == 503
        assert repo.answers == {}
        assert repo.attempts == []

    def test_fractional_score_is_rounded_in_attempt(self, client, repo):
        qid = generate(client, count=1).json()["questions"][0]["id"]
        gateway = AIGateway([ScriptedAdapter("B", evaluation_payload(7.9))])
        app.dependency_overrides[get_gateway] = lambda: gateway

        response = client.post("/api/answers", json={"questionId": qid, "answer": "ECG"})

        assert response.status_code == 201
        assert response.json()["evaluation"]["score"] == 7.9
        assert repo.attempts[0].score == 8

    def test_batch_uses_synthetic_evaluation(self, client, repo):
        qid = generate(client, count=1).json()["questions"][0]["id"]

        response = client.post(
            "/api/answers/batch",
            json={"answers": [{"questionId": qid, "answer": "a"}, {"questionId": 9999, "answer": "b"}]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["provider"] is None
        ok, missing = data["results"]
        assert ok["status"] == "success"
        assert 6 <= ok["evaluation"]["score"] <= 10
        assert ok["evaluation"]["modelAnswer"] == repo.questions[qid].model_answer
        assert missing == {"questionId": 9999, "status": "error", "evaluation": None, "message": "Question not found"}
        assert len(repo.attempts) == 1


class TestDashboard:
    def test_stats_default_before_any_answer(self, client):
        stats = client.get("/api/stats").json()
        assert stats["questionsAnswered"] == 0
        assert stats["strongestArea"] == "N/A"
        assert stats["weakestArea"] == "N/A"

    def test_stats_and_performance_after_answer(self, client):
        qid = generate(client, count=1).json()["questions"][0]["id"]
        client.post("/api/answers", json={"questionId": qid, "answer": "ECG"})

        stats = client.get("/api/stats").json()
        assert stats["questionsAnswered"] == 1
        assert stats["accuracyRate"] == 70
        assert stats["strongestArea"] == "Cardiology"

        perf = client.get("/api/performance").json()
        assert perf["totalQuestions"] == 1
        assert perf["overallAccuracy"] == 70
        assert perf["activeDays"] == 1
        assert [d["name"] for d in perf["byDifficulty"]] == ["Foundation", "Intermediate", "Advanced", "UKMLA"]
        assert perf["byDifficulty"][0] == {"name": "Foundation", "questions": 1, "accuracy": 70.0}

        by_specialty = client.get("/api/performance/specialty").json()
        assert by_specialty[0] == {"name": "Cardiology", "questions": 1, "accuracy": 70.0}

        cardiology = next(s for s in client.get("/api/specialties").json() if s["name"] == "Cardiology")
        assert cardiology["masteryPercentage"] == 70
        assert cardiology["questionCount"] == 1

    def test_time_series_are_gap_filled(self, client):
        progress = client.get("/api/performance/progress").json()
        weekly = client.get("/api/performance/activity").json()
        assert len(progress) == 30
        assert all(p["questionsAttempted"] == 0 for p in progress)
        assert [d["day"] for d in weekly][0] == "Sunday"
        assert len(weekly) == 7

    def test_recent_activity_view(self, client):
        qid = generate(client, count=1).json()["questions"][0]["id"]
        client.post("/api/answers", json={"questionId": qid, "answer": "ECG"})

        [entry] = client.get("/api/activity").json()

        assert entry["title"] == "Foundation Question Response"
        assert entry["description"] == "Answered Foundation question on Cardiology"
        assert entry["icon"] == "check"
        assert entry["timeAgo"] == "Just now"

    @pytest.mark.parametrize("kind, count", [("guidelines", 3), ("questionbanks", 1), ("ukmla", 1)])
    def test_resources(self, client, kind, count):
        assert len(client.get(f"/api/resources/{kind}").json()) == count

    def test_unknown_resource_kind_is_404(self, client):
        assert client.get("/api/resources/podcasts").status_code == 404


def test_time_ago_buckets():
    now = datetime(2026, 3, 18, 12, 0, 0)
    assert time_ago(now - timedelta(minutes=30), now) == "Just now"
    assert time_ago(now - timedelta(hours=1), now) == "1 hour ago"
    assert time_ago(now - timedelta(hours=5), now) == "5 hours ago"
    assert time_ago(now - timedelta(days=1), now) == "1 day ago"
    assert time_ago(now - timedelta(days=3), now) == "3 days ago"
    assert time_ago(now - timedelta(days=10), now) == "2026-03-08"


class TestProviders:
    def test_status_reports_order_and_current(self, client):
        assert client.get("/api/providers").json() == {"order": ["mock"], "failed": [], "current": None}
        generate(client, count=1)
        assert client.get("/api/providers").json()["current"] == "mock"

    def test_reset_clears_sticky_failures(self, client, broken_gateway):
        generate(client)
        assert client.get("/api/providers").json()["failed"] == ["A"]

        status = client.post("/api/providers/reset").json()

        assert status == {"order": ["A"], "failed": [], "current": None}
