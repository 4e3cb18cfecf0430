"""
HTTP tests — FastAPI TestClient with the repository swapped for the in-memory fake.
"""

import httpx
import pytest
from fastapi.testclient import TestClient
from pydantic_ai.messages import ModelResponse, ToolCallPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from app.agents.doctor import doctor_agent
from app.database import get_db
from app.main import app, get_repository
from app.schemas import DoctorAnswer, SubscriptionTier, TreatmentStatus


async def _no_db():
    yield None


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_db] = _no_db
    app.dependency_overrides[get_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestUsers:
    def test_health_check(self, client):
        assert client.get("/").json()["status"] == "healthy"

    def test_create_and_get_user(self, client):
        resp = client.post("/users", json={"email": "ana@example.com", "first_name": "Ana"})
        assert resp.status_code == 201
        user = resp.json()
        assert user["subscription_tier"] == "free"

        resp = client.get(f"/users/{user['id']}")
        assert resp.status_code == 200
        assert resp.json()["first_name"] == "Ana"

    def test_duplicate_email(self, client, repo):
        repo.add_user(email="ana@example.com")
        resp = client.post("/users", json={"email": "ana@example.com"})
        assert resp.status_code == 409

    def test_unknown_user(self, client):
        assert client.get("/users/42").status_code == 404
        assert client.get("/users/42/routines").status_code == 404

    def test_upgrade_flips_premium_status(self, client, repo):
        user = repo.add_user()
        assert client.get(f"/users/{user.id}/premium").json()["is_premium"] is False

        resp = client.put(f"/users/{user.id}/subscription", json={"tier": "premium"})
        assert resp.status_code == 200
        assert resp.json()["subscription_tier"] == "premium"
        assert client.get(f"/users/{user.id}/premium").json() == {"user_id": user.id, "is_premium": True}


class TestAnalyses:
    PAYLOAD = {
        "image_url": "https://cdn.example.com/face.jpg",
        "ai_analysis_results": {"skinType": "combination", "skinTone": "medium"},
        "detected_issues": ["mild acne", "some dryness", "slight uneven texture"],
        "severity_scores": {"acne": 3, "dryness": 4, "unevenTexture": 2, "overallHealth": 7},
        "recommendations": {"products": ["Gentle cleanser"], "tips": ["Use sunscreen daily"]},
    }

    def test_create_list_and_detail(self, client, repo):
        user = repo.add_user()
        resp = client.post(f"/users/{user.id}/analyses", json=self.PAYLOAD)
        assert resp.status_code == 201
        analysis_id = resp.json()["id"]

        listed = client.get(f"/users/{user.id}/analyses").json()
        assert [a["id"] for a in listed] == [analysis_id]

        detail = client.get(f"/users/{user.id}/analyses/{analysis_id}").json()
        assert detail["overall_score"] == 70
        assert {c["name"]: c["score"] for c in detail["concerns"]} == {
            "acne": 70,
            "dryness": 60,
            "unevenTexture": 80,
        }
        assert detail["recommendations"]["routines"] == []

    def test_other_users_analysis_hidden(self, client, repo):
        owner = repo.add_user()
        other = repo.add_user(email="other@example.com")
        analysis = repo.add_analysis(owner.id, ["acne"])
        assert client.get(f"/users/{other.id}/analyses/{analysis.id}").status_code == 404


class TestRoutines:
    def test_default_without_analysis(self, client, repo):
        user = repo.add_user()
        routine = client.get(f"/users/{user.id}/routines").json()
        assert (len(routine["morning"]), len(routine["evening"]), len(routine["weekly"])) == (4, 4, 2)

    def test_derived_from_latest_analysis(self, client, repo):
        user = repo.add_user()
        repo.add_analysis(user.id, ["mild acne", "some dryness"])
        routine = client.get(f"/users/{user.id}/routines").json()
        assert routine["weekly"] == [
            "exfoliation", "hydrating mask", "clay mask for T-zone", "overnight hydrating mask",
        ]

    def test_analysis_id_query(self, client, repo):
        user = repo.add_user()
        first = repo.add_analysis(user.id, ["texture"])
        repo.add_analysis(user.id, ["acne"])
        routine = client.get(f"/users/{user.id}/routines", params={"analysis_id": first.id}).json()
        assert routine["weekly"][-1] == "chemical exfoliation treatment"


class TestJournal:
    def test_create_and_list(self, client, repo):
        user = repo.add_user()
        resp = client.post(
            f"/users/{user.id}/journal",
            json={"date": "2026-10-01", "mood": "Tired", "notes": "Breakout on chin", "sleep_quality": 4},
        )
        assert resp.status_code == 201
        client.post(f"/users/{user.id}/journal", json={"date": "2026-10-02"})

        entries = client.get(f"/users/{user.id}/journal").json()
        assert [e["date"] for e in entries] == ["2026-10-02", "2026-10-01"]
        assert entries[1]["mood"] == "Tired"
        assert entries[0]["mood"] == "Neutral"

    def test_out_of_range_rating_rejected(self, client, repo):
        user = repo.add_user()
        resp = client.post(f"/users/{user.id}/journal", json={"stress_level": 11})
        assert resp.status_code == 422


class TestTreatmentPlans:
    def _premium_with_analysis(self, repo):
        user = repo.add_user(tier=SubscriptionTier.PREMIUM)
        analysis = repo.add_analysis(user.id, ["mild acne"], skin_type="oily")
        return user, analysis

    def test_free_user_forbidden(self, client, repo):
        user = repo.add_user()
        analysis = repo.add_analysis(user.id, ["acne"])
        assert client.get(f"/users/{user.id}/analyses/{analysis.id}/premium").status_code == 403
        resp = client.post(f"/users/{user.id}/analyses/{analysis.id}/treatments", json={"solution_index": 0})
        assert resp.status_code == 403
        assert repo.treatments == {}

    def test_premium_recommendations(self, client, repo):
        user, analysis = self._premium_with_analysis(repo)
        recs = client.get(f"/users/{user.id}/analyses/{analysis.id}/premium").json()
        assert "Salicylic acid cleanser" in [p["name"] for p in recs["products"]]
        assert recs["custom_routine"]["morning"][2] == "oil-control toner with witch hazel"
        assert len(recs["treatment_options"]) == 3

    def test_start_and_track_plan(self, client, repo):
        user, analysis = self._premium_with_analysis(repo)
        resp = client.post(
            f"/users/{user.id}/analyses/{analysis.id}/treatments",
            json={"solution_index": 1, "start_date": "2026-10-01"},
        )
        assert resp.status_code == 201
        plan = resp.json()
        assert plan["status"] == "active"
        assert plan["option"]["name"] == "Active Treatment Plan"
        assert plan["percent_complete"] == 0

        resp = client.patch(
            f"/users/{user.id}/treatments/{plan['id']}",
            json={"days_completed": 14, "improvements": ["Fewer breakouts along jawline"]},
        )
        assert resp.status_code == 200
        updated = resp.json()
        assert updated["progress"] == {"days_completed": 14, "improvements": ["Fewer breakouts along jawline"]}
        assert updated["percent_complete"] == 25

        listed = client.get(f"/users/{user.id}/analyses/{analysis.id}/treatments").json()
        assert [p["id"] for p in listed] == [plan["id"]]

    def test_one_open_plan_per_analysis(self, client, repo):
        user, analysis = self._premium_with_analysis(repo)
        repo.add_treatment(analysis.id, status=TreatmentStatus.PAUSED)
        resp = client.post(f"/users/{user.id}/analyses/{analysis.id}/treatments", json={"solution_index": 0})
        assert resp.status_code == 409

    def test_new_plan_after_completion(self, client, repo):
        user, analysis = self._premium_with_analysis(repo)
        repo.add_treatment(analysis.id, status=TreatmentStatus.COMPLETED)
        resp = client.post(f"/users/{user.id}/analyses/{analysis.id}/treatments", json={"solution_index": 2})
        assert resp.status_code == 201

    @pytest.mark.parametrize("index", [3, -1])
    def test_unknown_option(self, client, repo, index):
        user, analysis = self._premium_with_analysis(repo)
        resp = client.post(f"/users/{user.id}/analyses/{analysis.id}/treatments", json={"solution_index": index})
        assert resp.status_code == 422

    def test_finishing_plan_closes_it(self, client, repo):
        user, analysis = self._premium_with_analysis(repo)
        plan = repo.add_treatment(analysis.id, solution_index=0, days_completed=40)
        resp = client.patch(f"/users/{user.id}/treatments/{plan.id}", json={"days_completed": 42})
        assert resp.json()["status"] == "completed"
        assert resp.json()["next_checkup"] is None

        resp = client.patch(f"/users/{user.id}/treatments/{plan.id}", json={"days_completed": 43})
        assert resp.status_code == 409

    def test_other_users_plan_hidden(self, client, repo):
        user, analysis = self._premium_with_analysis(repo)
        other = repo.add_user(email="other@example.com", tier=SubscriptionTier.PREMIUM)
        plan = repo.add_treatment(analysis.id)
        resp = client.patch(f"/users/{other.id}/treatments/{plan.id}", json={"days_completed": 1})
        assert resp.status_code == 404
        assert client.get(f"/users/{other.id}/analyses/{analysis.id}/treatments").status_code == 404


class TestDoctorEndpoint:
    def test_free_user_forbidden(self, client, repo):
        user = repo.add_user()
        resp = client.post(f"/users/{user.id}/doctor", json={"question": "Is retinol safe?"})
        assert resp.status_code == 403

    def test_unknown_analysis(self, client, repo):
        user = repo.add_user(tier=SubscriptionTier.PREMIUM)
        resp = client.post(f"/users/{user.id}/doctor", json={"question": "Hi", "analysis_id": 99})
        assert resp.status_code == 404

    @pytest.mark.anyio
    async def test_premium_user_gets_answer(self, repo):
        user = repo.add_user(tier=SubscriptionTier.PREMIUM)
        repo.add_analysis(user.id, ["some dryness"], skin_type="dry")

        def mock_model(messages, info: AgentInfo):
            answer = DoctorAnswer(
                answer="Layer a hyaluronic acid serum under your moisturizer.",
                product_recommendations=["hyaluronic acid serum"],
            )
            return ModelResponse(
                parts=[ToolCallPart(tool_name="final_result", args=answer.model_dump(mode="json"))]
            )

        app.dependency_overrides[get_db] = _no_db
        app.dependency_overrides[get_repository] = lambda: repo
        try:
            with doctor_agent.override(model=FunctionModel(mock_model)):
                transport = httpx.ASGITransport(app=app)
                async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
                    resp = await ac.post(
                        f"/users/{user.id}/doctor", json={"question": "What helps dry skin?"}
                    )
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 200
        assert resp.json()["product_recommendations"] == ["hyaluronic acid serum"]
