"""API tests for the master issue list and the rejection archive."""

import pytest


ISSUE_PAYLOAD = {
    "title": "Online banking login failures",
    "description": "Customers cannot log in after the update",
    "category": "OnlineBanking",
    "confidence_score": 0.8,
    "feedback_count": 2
}


@pytest.fixture
async def issue(client):
    response = await client.post("/api/issues", json=ISSUE_PAYLOAD)
    assert response.status_code == 201
    return response.json()


class TestIssuesApi:

    async def test_create_defaults_to_pending(self, issue):
        assert issue["status"] == "pending"
        assert issue["approved_date"] is None
        assert issue["feedback_count"] == 2

    async def test_create_approved_sets_date(self, client):
        response = await client.post("/api/issues", json={**ISSUE_PAYLOAD, "status": "approved"})

        assert response.json()["approved_date"] is not None

    async def test_create_rejects_unknown_category(self, client):
        response = await client.post("/api/issues", json={**ISSUE_PAYLOAD, "category": "Mobile"})

        assert response.status_code == 422

    async def test_list_and_filter_by_status(self, client, issue):
        await client.post("/api/issues", json={**ISSUE_PAYLOAD, "title": "Other", "status": "approved"})

        assert len((await client.get("/api/issues")).json()) == 2
        approved = (await client.get("/api/issues", params={"status": "approved"})).json()
        assert [item["title"] for item in approved] == ["Other"]

    async def test_update(self, client, issue):
        response = await client.put(
            f"/api/issues/{issue['id']}",
            json={"resolution": "Roll back the login change", "feedback_count": 5}
        )

        assert response.status_code == 200
        assert response.json()["resolution"] == "Roll back the login change"
        assert response.json()["feedback_count"] == 5
        assert response.json()["title"] == ISSUE_PAYLOAD["title"]

    async def test_approve(self, client, issue):
        response = await client.post(
            f"/api/issues/{issue['id']}/approve",
            json={"approved_by": "ops.lead", "resolution": "Roll back the login change"}
        )

        body = response.json()
        assert body["status"] == "approved"
        assert body["approved_by"] == "ops.lead"
        assert body["resolution"] == "Roll back the login change"

    async def test_reject_without_body(self, client, issue):
        response = await client.post(f"/api/issues/{issue['id']}/reject")

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    async def test_delete(self, client, issue):
        response = await client.delete(f"/api/issues/{issue['id']}")

        assert response.status_code == 204
        assert (await client.get(f"/api/issues/{issue['id']}")).status_code == 404

    async def test_missing_issue(self, client):
        assert (await client.get("/api/issues/missing")).status_code == 404
        assert (await client.put("/api/issues/missing", json={"title": "x"})).status_code == 404
        assert (await client.delete("/api/issues/missing")).status_code == 404
        assert (await client.post("/api/issues/missing/approve", json={"approved_by": "x"})).status_code == 404


class TestRejectedIssuesApi:

    @pytest.fixture
    async def rejected(self, client):
        pending = (await client.post("/api/pending-issues", json={
            "title": "Branch closed early",
            "category": "CoreBanking"
        })).json()
        response = await client.post(
            f"/api/pending-issues/{pending['id']}/reject",
            json={"rejected_by": "ops.lead", "reason": "Public holiday"}
        )
        return response.json()

    async def test_list_and_get(self, client, rejected):
        listed = (await client.get("/api/rejected-issues")).json()
        assert [item["id"] for item in listed] == [rejected["id"]]

        fetched = (await client.get(f"/api/rejected-issues/{rejected['id']}")).json()
        assert fetched["category"] == "CoreBanking"
        assert fetched["rejected_by"] == "ops.lead"

    async def test_delete(self, client, rejected):
        response = await client.delete(f"/api/rejected-issues/{rejected['id']}")

        assert response.status_code == 204
        assert (await client.get("/api/rejected-issues")).json() == []
        assert (await client.get(f"/api/rejected-issues/{rejected['id']}")).status_code == 404

    async def test_missing(self, client):
        assert (await client.get("/api/rejected-issues/missing")).status_code == 404
        assert (await client.delete("/api/rejected-issues/missing")).status_code == 404
