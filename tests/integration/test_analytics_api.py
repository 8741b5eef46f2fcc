"""API tests for dashboard aggregates."""

from datetime import timedelta

import pytest

from feedback_triage.core import utc_now


@pytest.fixture
async def seeded(client, feedback_payload):
    """Five feedback records across services and locations."""
    now = utc_now()
    rows = [
        dict(service_type="ATM", review_rating=1, issue_location="Kuala Lumpur", created_at=now - timedelta(days=1)),
        dict(service_type="ATM", review_rating=2, issue_location="Kuala Lumpur", created_at=now - timedelta(days=1)),
        dict(service_type="OnlineBanking", review_rating=5, issue_location="Selangor",
             review_text="Lovely app", created_at=now),
        dict(service_type="OnlineBanking", review_rating=4, issue_location=None,
             review_text="Quick transfers", created_at=now),
        dict(service_type="ATM", review_rating=3, issue_location="Penang", created_at=now - timedelta(days=60)),
    ]
    created = []
    for index, row in enumerate(rows):
        created_at = row.pop("created_at")
        payload = feedback_payload(id=f"fb_{index}", **row)
        payload["created_at"] = created_at.isoformat()
        response = await client.post("/api/feedback", json=payload)
        assert response.status_code == 201
        created.append(response.json())
    return created


class TestMetrics:

    async def test_metrics(self, client, seeded):
        body = (await client.get("/api/metrics")).json()

        assert body["total"] == 5
        assert body["positive"] == 2
        assert body["negative"] == 3
        assert body["pending"] == 5
        assert body["average_rating"] == 3.0
        assert body["rating_distribution"] == {"1": 1, "2": 1, "3": 1, "4": 1, "5": 1}

    async def test_metrics_with_filters(self, client, seeded):
        body = (await client.get(
            "/api/metrics", params={"service": "ATM", "date_range": "last_week"}
        )).json()

        assert body["total"] == 2
        assert body["average_rating"] == 1.5

    async def test_metrics_on_empty_database(self, client):
        body = (await client.get("/api/metrics")).json()

        assert body["total"] == 0
        assert body["average_rating"] == 0.0
        assert body["rating_distribution"]["3"] == 0

    async def test_sentiment(self, client, seeded):
        body = (await client.get("/api/analytics/sentiment")).json()

        assert body == {"positive": 2, "negative": 3, "neutral": 0}


class TestBreakdowns:

    async def test_services_lists_every_service_type(self, client, seeded):
        body = (await client.get("/api/analytics/services", params={"service": "ATM"})).json()

        assert [row["service_type"] for row in body] == ["ATM", "OnlineBanking", "CoreBanking"]
        assert body[0] == {"service_type": "ATM", "positive": 0, "negative": 3, "total": 3}
        assert body[2]["total"] == 0

    async def test_locations_skip_missing(self, client, seeded):
        body = (await client.get("/api/analytics/locations")).json()

        assert [row["location"] for row in body] == ["Kuala Lumpur", "Penang", "Selangor"]
        assert body[0]["average_rating"] == 1.5

    async def test_ratings(self, client, seeded):
        body = (await client.get("/api/analytics/ratings", params={"service": "ATM"})).json()

        assert [row["label"] for row in body] == ["Very Poor", "Poor", "Average", "Good", "Excellent"]
        assert [row["count"] for row in body] == [1, 1, 1, 0, 0]

    async def test_timeline(self, client, seeded):
        body = (await client.get("/api/analytics/timeline", params={"date_range": "last_month"})).json()

        assert len(body) == 2
        assert body[0]["date"] < body[1]["date"]
        assert body[0]["negative"] == 2
        assert body[1]["positive"] == 2
        assert body[1]["average_rating"] == 4.5

    async def test_invalid_date_range(self, client):
        response = await client.get("/api/analytics/timeline", params={"date_range": "yesterday"})

        assert response.status_code == 422


class TestTopIssues:

    async def test_top_issues(self, client):
        for title, category, count, status in (
            ("ATM malfunction", "ATM", 5, "approved"),
            ("Login failures", "OnlineBanking", 9, "approved"),
            ("Card retained", "ATM", 7, "approved"),
            ("Unreviewed", "ATM", 20, "pending"),
            ("Not linked", "ATM", 0, "approved"),
        ):
            await client.post("/api/issues", json={
                "title": title, "category": category, "feedback_count": count, "status": status
            })

        everything = (await client.get("/api/analytics/top-issues")).json()
        atm = (await client.get("/api/analytics/top-issues", params={"service": "ATM", "limit": 1})).json()

        assert [row["title"] for row in everything] == ["Login failures", "Card retained", "ATM malfunction"]
        assert [row["title"] for row in atm] == ["Card retained"]


class TestEmployeeStats:

    async def test_employee_stats(self, client, seeded):
        first = (await client.post("/api/employees", json={"employee_id": "EMP001", "name": "Siti"})).json()
        await client.post("/api/employees", json={"employee_id": "EMP002", "name": "Aisyah"})

        for feedback, interaction_type in ((seeded[0], "contacted"), (seeded[0], "resolved"), (seeded[2], "contacted")):
            await client.post("/api/employees/interactions", json={
                "employee_id": first["id"],
                "feedback_id": feedback["id"],
                "interaction_type": interaction_type
            })

        body = (await client.get("/api/analytics/employees")).json()

        assert [row["name"] for row in body] == ["Aisyah", "Siti"]
        assert body[0]["total_interactions"] == 0
        assert body[0]["average_rating"] is None
        siti = body[1]
        assert siti["total_interactions"] == 3
        assert siti["contacted"] == 2
        assert siti["resolved"] == 1
        assert siti["negative_feedback"] == 2
        assert siti["positive_feedback"] == 1
        assert siti["average_rating"] == round((1 + 1 + 5) / 3, 2)

        only_first = (await client.get("/api/analytics/employees", params={"employee_id": first["id"]})).json()
        assert [row["name"] for row in only_first] == ["Siti"]

    async def test_date_range_limits_interactions(self, client, seeded):
        employee = (await client.post("/api/employees", json={"employee_id": "EMP001", "name": "Siti"})).json()
        await client.post("/api/employees/interactions", json={
            "employee_id": employee["id"],
            "feedback_id": seeded[0]["id"],
            "interaction_type": "contacted",
            "interaction_date": (utc_now() - timedelta(days=40)).isoformat()
        })

        body = (await client.get("/api/analytics/employees", params={"date_range": "last_week"})).json()

        assert body[0]["total_interactions"] == 0
