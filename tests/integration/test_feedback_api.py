"""API tests for feedback CRUD and filtering."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from feedback_triage.core import utc_now
from feedback_triage.infrastructure.database import get_session_context
from feedback_triage.issues.infrastructure.models import FeedbackIssueModel


async def _issue_links(issue_id):
    async with get_session_context() as session:
        result = await session.execute(
            select(FeedbackIssueModel.feedback_id).where(FeedbackIssueModel.issue_id == issue_id)
        )
        return result.scalars().all()


class TestFeedbackCrud:

    async def test_round_trip(self, client, feedback_payload):
        """create -> read -> update status -> delete -> 404"""
        response = await client.post("/api/feedback", json=feedback_payload(id="fb_100"))
        assert response.status_code == 201
        created = response.json()
        assert created["id"] == "fb_100"
        assert created["status"] == "new"
        assert created["sentiment"] == "negative"
        assert created["negative_flag"] is True
        assert created["positive_flag"] is False

        response = await client.get("/api/feedback/fb_100")
        assert response.status_code == 200
        assert response.json()["customer_name"] == "Ahmad Rahman"

        response = await client.put("/api/feedback/fb_100", json={"status": "resolved"})
        assert response.status_code == 200
        assert response.json()["status"] == "resolved"

        response = await client.delete("/api/feedback/fb_100")
        assert response.status_code == 204

        response = await client.get("/api/feedback/fb_100")
        assert response.status_code == 404
        assert "correlation_id" in response.json()

    async def test_generated_id(self, client, feedback_payload):
        response = await client.post("/api/feedback", json=feedback_payload())

        assert response.status_code == 201
        assert len(response.json()["id"]) == 36

    async def test_duplicate_id_conflicts(self, client, feedback_payload):
        await client.post("/api/feedback", json=feedback_payload(id="fb_dup"))

        response = await client.post("/api/feedback", json=feedback_payload(id="fb_dup"))

        assert response.status_code == 409

    @pytest.mark.parametrize("overrides", [
        {"review_rating": 6},
        {"review_rating": 0},
        {"service_type": "Telephone"},
        {"customer_name": ""},
    ])
    async def test_invalid_payload(self, client, feedback_payload, overrides):
        response = await client.post("/api/feedback", json=feedback_payload(**overrides))

        assert response.status_code == 422

    async def test_positive_feedback(self, client, feedback_payload):
        response = await client.post(
            "/api/feedback",
            json=feedback_payload(review_rating=5, review_text="Fast and friendly")
        )
        body = response.json()

        assert body["sentiment"] == "positive"
        assert body["positive_flag"] is True
        assert body["detected_issues"] is None

    async def test_rating_change_rederives_sentiment(self, client, feedback_payload):
        created = (await client.post("/api/feedback", json=feedback_payload(review_rating=2))).json()

        response = await client.put(f"/api/feedback/{created['id']}", json={"review_rating": 5})

        body = response.json()
        assert body["sentiment"] == "positive"
        assert body["positive_flag"] is True
        assert body["negative_flag"] is False

    async def test_update_ignores_null_for_required_fields(self, client, feedback_payload):
        created = (await client.post("/api/feedback", json=feedback_payload())).json()

        response = await client.put(
            f"/api/feedback/{created['id']}",
            json={"customer_name": None, "issue_location": None}
        )

        body = response.json()
        assert body["customer_name"] == "Ahmad Rahman"
        assert body["issue_location"] is None

    async def test_update_missing_feedback(self, client):
        response = await client.put("/api/feedback/missing", json={"status": "resolved"})

        assert response.status_code == 404

    async def test_delete_missing_feedback(self, client):
        response = await client.delete("/api/feedback/missing")

        assert response.status_code == 404

    async def test_delete_removes_links_and_interactions(self, client, feedback_payload):
        feedback = (await client.post("/api/feedback", json=feedback_payload(id="fb_200"))).json()
        detected = (await client.get("/api/pending-issues")).json()[0]
        issue = (await client.post(
            f"/api/pending-issues/{detected['id']}/approve",
            json={"approved_by": "ops.lead"}
        )).json()
        pending = (await client.post("/api/pending-issues", json={
            "title": "Card not returned",
            "category": "ATM",
            "detected_from_feedback_id": feedback["id"],
            "resolution_text": "Return the card at the branch."
        })).json()
        employee = (await client.post("/api/employees", json={
            "employee_id": "EMP010",
            "name": "Siti Nurhaliza",
            "department": "Customer Service",
            "branch_location": "Kuala Lumpur",
            "role": "Branch Officer"
        })).json()
        interaction = await client.post("/api/employees/interactions", json={
            "employee_id": employee["id"],
            "feedback_id": feedback["id"],
            "interaction_type": "contacted"
        })
        assert interaction.status_code == 201
        assert pending["detected_from_feedback_id"] == feedback["id"]
        assert await _issue_links(issue["id"]) == [feedback["id"]]

        response = await client.delete(f"/api/feedback/{feedback['id']}")

        assert response.status_code == 204
        assert await _issue_links(issue["id"]) == []
        assert (await client.get("/api/employees/interactions")).json() == []
        source = (await client.get(f"/api/pending-issues/{pending['id']}")).json()
        assert source["detected_from_feedback_id"] is None
        assert (await client.get(f"/api/issues/{issue['id']}")).status_code == 200


class TestFeedbackFilters:

    @pytest.fixture
    async def seeded(self, client, feedback_payload):
        now = utc_now()
        rows = [
            feedback_payload(id="f1", service_type="ATM", issue_location="Penang",
                             review_rating=5, review_text="Quick cash", status="resolved",
                             created_at=(now - timedelta(days=2)).isoformat()),
            feedback_payload(id="f2", service_type="OnlineBanking", issue_location="Selangor",
                             review_rating=2, customer_name="Siti Aminah",
                             review_text="App crashes on login",
                             created_at=(now - timedelta(days=20)).isoformat()),
            feedback_payload(id="f3", service_type="CoreBanking", issue_location="Penang",
                             review_rating=1, review_text="Branch system was down",
                             created_at=(now - timedelta(days=200)).isoformat()),
        ]
        for row in rows:
            response = await client.post("/api/feedback", json=row)
            assert response.status_code == 201

    async def _ids(self, client, params=None):
        response = await client.get("/api/feedback", params=params or {})
        assert response.status_code == 200
        return [item["id"] for item in response.json()]

    async def test_newest_first(self, client, seeded):
        assert await self._ids(client) == ["f1", "f2", "f3"]

    async def test_service_filter(self, client, seeded):
        assert await self._ids(client, {"service": "OnlineBanking"}) == ["f2"]
        assert await self._ids(client, {"service": "all"}) == ["f1", "f2", "f3"]

    async def test_location_and_status(self, client, seeded):
        assert await self._ids(client, {"location": "Penang"}) == ["f1", "f3"]
        assert await self._ids(client, {"status": "resolved"}) == ["f1"]

    async def test_search_matches_name_and_text(self, client, seeded):
        assert await self._ids(client, {"search": "siti"}) == ["f2"]
        assert await self._ids(client, {"search": "SYSTEM"}) == ["f3"]

    async def test_date_range(self, client, seeded):
        assert await self._ids(client, {"date_range": "last_week"}) == ["f1"]
        assert await self._ids(client, {"date_range": "last_month"}) == ["f1", "f2"]

    async def test_custom_dates(self, client, seeded):
        today = utc_now().date()
        params = {
            "custom_date_from": (today - timedelta(days=30)).isoformat(),
            "custom_date_to": (today - timedelta(days=2)).isoformat(),
        }

        assert await self._ids(client, params) == ["f1", "f2"]

    async def test_pagination(self, client, seeded):
        assert await self._ids(client, {"limit": 1, "offset": 1}) == ["f2"]

    async def test_invalid_date_range(self, client, seeded):
        response = await client.get("/api/feedback", params={"date_range": "yesterday"})

        assert response.status_code == 422
