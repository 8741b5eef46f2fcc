"""API tests for the pending issue review workflow."""

import pytest

from conftest import detection_reply


@pytest.fixture
async def pending_issue(client, feedback_payload):
    """A pending issue detected from one negative feedback record."""
    await client.post("/api/feedback", json=feedback_payload())
    return (await client.get("/api/pending-issues")).json()[0]


@pytest.fixture
async def approved_issue(client):
    response = await client.post("/api/issues", json={
        "title": "Card retained by ATM",
        "category": "ATM",
        "status": "approved",
        "feedback_count": 4,
        "resolution": "Return cards within one working day",
        "approved_by": "ops.lead"
    })
    assert response.status_code == 201
    return response.json()


class TestPendingIssueLifecycle:

    async def test_create_manually_drafts_resolution(self, client):
        response = await client.post("/api/pending-issues", json={
            "title": "Branch closed early",
            "category": "CoreBanking",
            "confidence_score": 0.8
        })

        assert response.status_code == 201
        body = response.json()
        assert body["feedback_count"] == 1
        assert body["feedback"] is None
        assert len(body["resolutions"]) == 1
        assert "Check core banking system status" in body["resolutions"][0]["resolution_text"]

    async def test_create_with_resolution_text(self, client):
        response = await client.post("/api/pending-issues", json={
            "title": "Branch closed early",
            "category": "CoreBanking",
            "resolution_text": "Publish correct opening hours"
        })

        resolutions = response.json()["resolutions"]
        assert [r["resolution_text"] for r in resolutions] == ["Publish correct opening hours"]

    async def test_create_with_unknown_feedback(self, client):
        response = await client.post("/api/pending-issues", json={
            "title": "Branch closed early",
            "category": "CoreBanking",
            "detected_from_feedback_id": "missing"
        })

        assert response.status_code == 404

    async def test_update(self, client, pending_issue):
        response = await client.put(
            f"/api/pending-issues/{pending_issue['id']}",
            json={"title": "ATM out of order", "confidence_score": 0.75}
        )

        assert response.status_code == 200
        assert response.json()["title"] == "ATM out of order"
        assert response.json()["confidence_score"] == 0.75
        assert response.json()["category"] == "ATM"

    async def test_get_missing(self, client):
        assert (await client.get("/api/pending-issues/missing")).status_code == 404
        assert (await client.put("/api/pending-issues/missing", json={"title": "x"})).status_code == 404


class TestResolutions:

    async def test_add_and_update_resolution(self, client, pending_issue):
        added = await client.post(
            f"/api/pending-issues/{pending_issue['id']}/resolutions",
            json={"resolution_text": "Replace the card reader", "confidence_score": 0.9}
        )
        assert added.status_code == 201
        resolution = added.json()
        assert resolution["pending_issue_id"] == pending_issue["id"]

        updated = await client.put(
            f"/api/pending-resolutions/{resolution['id']}",
            json={"resolution_text": "Replace the card reader today"}
        )
        assert updated.status_code == 200
        assert updated.json()["resolution_text"] == "Replace the card reader today"

        refreshed = (await client.get(f"/api/pending-issues/{pending_issue['id']}")).json()
        assert len(refreshed["resolutions"]) == 2

    async def test_update_missing_resolution(self, client):
        response = await client.put("/api/pending-resolutions/missing", json={"resolution_text": "x"})

        assert response.status_code == 404

    async def test_add_resolution_to_missing_issue(self, client):
        response = await client.post(
            "/api/pending-issues/missing/resolutions",
            json={"resolution_text": "x"}
        )

        assert response.status_code == 404

    async def test_generate_resolution_with_template(self, client, pending_issue):
        response = await client.post(f"/api/pending-issues/{pending_issue['id']}/generate-resolution")

        assert response.status_code == 201
        assert response.json()["confidence_score"] == 0.5

    async def test_generate_resolution_with_llm(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = detection_reply("Card retained by ATM")
        fake_llm.replies["resolution"] = "Return the card."
        await client.post("/api/feedback", json=feedback_payload())
        pending = (await client.get("/api/pending-issues")).json()[0]

        fake_llm.replies["resolution"] = '{"resolution_text": "Escalate to the ATM vendor"}'
        response = await client.post(f"/api/pending-issues/{pending['id']}/generate-resolution")

        assert response.json()["resolution_text"] == "Escalate to the ATM vendor"
        assert response.json()["confidence_score"] == 0.85
        last_prompt = fake_llm.calls[-1]["messages"][-1]["content"]
        assert "The ATM swallowed my card." in last_prompt


class TestApproveRejectMerge:

    async def test_approve_uses_first_resolution(self, client, pending_issue):
        response = await client.post(
            f"/api/pending-issues/{pending_issue['id']}/approve",
            json={"approved_by": "ops.lead"}
        )

        assert response.status_code == 200
        issue = response.json()
        assert issue["status"] == "approved"
        assert issue["title"] == "ATM malfunction"
        assert issue["approved_by"] == "ops.lead"
        assert issue["approved_date"] is not None
        assert issue["resolution"] == pending_issue["resolutions"][0]["resolution_text"]
        assert (await client.get(f"/api/pending-issues/{pending_issue['id']}")).status_code == 404

    async def test_approve_with_edits(self, client, pending_issue):
        response = await client.post(
            f"/api/pending-issues/{pending_issue['id']}/approve",
            json={
                "approved_by": "ops.lead",
                "title": "Card retained by ATM",
                "resolution": "Return cards within one working day"
            }
        )

        issue = response.json()
        assert issue["title"] == "Card retained by ATM"
        assert issue["resolution"] == "Return cards within one working day"

    async def test_approve_requires_approver(self, client, pending_issue):
        response = await client.post(f"/api/pending-issues/{pending_issue['id']}/approve", json={})

        assert response.status_code == 422

    async def test_reject_archives_issue(self, client, pending_issue):
        response = await client.post(
            f"/api/pending-issues/{pending_issue['id']}/reject",
            json={"rejected_by": "ops.lead", "reason": "Known outage"}
        )

        assert response.status_code == 200
        rejected = response.json()
        assert rejected["original_title"] == "ATM malfunction"
        assert rejected["rejection_reason"] == "Known outage"
        assert rejected["original_pending_issue_id"] == pending_issue["id"]
        assert (await client.get("/api/pending-issues")).json() == []

    async def test_merge_into_approved_issue(self, client, pending_issue, approved_issue):
        response = await client.post(
            f"/api/pending-issues/{pending_issue['id']}/merge",
            json={"target_issue_id": approved_issue["id"], "merged_by": "ops.lead"}
        )

        assert response.status_code == 200
        assert response.json()["feedback_count"] == 5
        assert (await client.get("/api/pending-issues")).json() == []

    async def test_merge_into_missing_issue(self, client, pending_issue):
        response = await client.post(
            f"/api/pending-issues/{pending_issue['id']}/merge",
            json={"target_issue_id": "missing", "merged_by": "ops.lead"}
        )

        assert response.status_code == 404

    async def test_merge_into_rejected_issue(self, client, pending_issue, approved_issue):
        await client.post(f"/api/issues/{approved_issue['id']}/reject", json={})

        response = await client.post(
            f"/api/pending-issues/{pending_issue['id']}/merge",
            json={"target_issue_id": approved_issue["id"], "merged_by": "ops.lead"}
        )

        assert response.status_code == 400
        assert len((await client.get("/api/pending-issues")).json()) == 1

    async def test_missing_pending_issue(self, client):
        for action, body in (
            ("approve", {"approved_by": "ops.lead"}),
            ("reject", {"rejected_by": "ops.lead"}),
            ("merge", {"target_issue_id": "x", "merged_by": "ops.lead"}),
        ):
            response = await client.post(f"/api/pending-issues/missing/{action}", json=body)
            assert response.status_code == 404
