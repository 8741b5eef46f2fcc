"""Tests for the issue detection flow and its deduplication outcomes."""

import json

from feedback_triage.core import LLMException
from feedback_triage.infrastructure.database import get_session_context
from feedback_triage.issues.interfaces import build_detection_service

from conftest import detection_reply


async def _create(client, feedback_payload, **overrides):
    response = await client.post("/api/feedback", json=feedback_payload(**overrides))
    assert response.status_code == 201
    return response.json()


async def _detect(client, feedback_id):
    response = await client.post(f"/api/feedback/{feedback_id}/detect-issues")
    assert response.status_code == 200
    return response.json()


class TestKeywordDetection:
    """Detection without an LLM uses the keyword rules."""

    async def test_negative_feedback_creates_pending_issue(self, client, feedback_payload):
        feedback = await _create(client, feedback_payload)

        assert feedback["detected_issues"] == ["ATM malfunction"]

        pending = (await client.get("/api/pending-issues")).json()
        assert len(pending) == 1
        assert pending[0]["title"] == "ATM malfunction"
        assert pending[0]["category"] == "ATM"
        assert pending[0]["feedback_count"] == 1
        assert pending[0]["detected_from_feedback_id"] == feedback["id"]
        assert pending[0]["feedback"]["customer_name"] == "Ahmad Rahman"
        assert len(pending[0]["resolutions"]) == 1
        assert "Check ATM operational status" in pending[0]["resolutions"][0]["resolution_text"]

    async def test_positive_feedback_is_skipped(self, client, feedback_payload):
        feedback = await _create(client, feedback_payload, review_rating=5, review_text="Great")

        result = await _detect(client, feedback["id"])

        assert result["outcome"] == "skipped"
        assert result["detected_issues"] == []
        assert (await client.get("/api/pending-issues")).json() == []

    async def test_same_issue_merges_into_pending(self, client, feedback_payload):
        await _create(client, feedback_payload)
        second = await _create(client, feedback_payload, customer_name="Raj Kumar")

        pending = (await client.get("/api/pending-issues")).json()
        assert len(pending) == 1
        assert pending[0]["feedback_count"] == 2
        assert second["detected_issues"] == ["ATM malfunction"]

    async def test_merge_outcome_on_redetection(self, client, feedback_payload):
        feedback = await _create(client, feedback_payload)

        first = await _detect(client, feedback["id"])
        second = await _detect(client, feedback["id"])

        assert first["outcome"] == second["outcome"] == "merged"
        assert second["candidate"]["source"] == "rules"
        pending = (await client.get("/api/pending-issues")).json()
        assert pending[0]["feedback_count"] == 1

    async def test_redetecting_merged_feedback_keeps_count(self, client, feedback_payload):
        await _create(client, feedback_payload)
        second = await _create(client, feedback_payload, customer_name="Raj Kumar")

        await _detect(client, second["id"])
        await _detect(client, second["id"])

        pending = (await client.get("/api/pending-issues")).json()
        assert pending[0]["feedback_count"] == 2

    async def test_approved_issue_is_linked(self, client, feedback_payload):
        await _create(client, feedback_payload)
        pending = (await client.get("/api/pending-issues")).json()[0]
        issue = (await client.post(
            f"/api/pending-issues/{pending['id']}/approve",
            json={"approved_by": "ops.lead"}
        )).json()

        feedback = await _create(client, feedback_payload, customer_name="Raj Kumar")
        result = await _detect(client, feedback["id"])

        assert feedback["detected_issues"] == ["ATM malfunction"]
        assert result["outcome"] == "linked"
        assert result["issue_id"] == issue["id"]
        refreshed = (await client.get(f"/api/issues/{issue['id']}")).json()
        # Re-running detection on already linked feedback does not count it twice
        assert refreshed["feedback_count"] == 2
        assert (await client.get("/api/pending-issues")).json() == []

    async def test_rejected_issue_is_suppressed(self, client, feedback_payload):
        await _create(client, feedback_payload)
        pending = (await client.get("/api/pending-issues")).json()[0]
        await client.post(
            f"/api/pending-issues/{pending['id']}/reject",
            json={"rejected_by": "ops.lead", "reason": "Known outage"}
        )

        feedback = await _create(client, feedback_payload, customer_name="Raj Kumar")
        result = await _detect(client, feedback["id"])

        assert feedback["detected_issues"] == ["ATM malfunction"]
        assert result["outcome"] == "suppressed"
        assert result["rejected_issue_id"] is not None
        assert (await client.get("/api/pending-issues")).json() == []

    async def test_detect_missing_feedback(self, client):
        response = await client.post("/api/feedback/missing/detect-issues")

        assert response.status_code == 404


class TestLLMDetection:
    """Detection through the LLM with keyword fallback."""

    async def test_llm_candidate(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = detection_reply("Card retained by ATM", "atm", 0.85)
        fake_llm.replies["resolution"] = json.dumps({
            "resolution_text": "1. Return the card to the customer",
            "confidence_score": 0.9,
        })

        feedback = await _create(client, feedback_payload)

        assert feedback["detected_issues"] == ["Card retained by ATM"]
        pending = (await client.get("/api/pending-issues")).json()[0]
        assert pending["category"] == "ATM"
        assert pending["confidence_score"] == 0.85
        assert pending["resolutions"][0]["resolution_text"] == "1. Return the card to the customer"
        assert fake_llm.operations() == ["issue_detection", "resolution"]

    async def test_title_match_ignores_case_and_punctuation(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = detection_reply("Card retained by ATM")
        fake_llm.replies["resolution"] = "Return the card."
        await _create(client, feedback_payload)

        fake_llm.replies["issue_detection"] = detection_reply("card retained by ATM!")
        feedback = await _create(client, feedback_payload, customer_name="Raj Kumar")

        pending = (await client.get("/api/pending-issues")).json()
        assert len(pending) == 1
        assert pending[0]["feedback_count"] == 2
        assert feedback["detected_issues"] == ["Card retained by ATM"]

    async def test_null_reply_means_no_issue(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = "null"
        feedback = await _create(client, feedback_payload)

        result = await _detect(client, feedback["id"])

        assert feedback["detected_issues"] == []
        assert result["outcome"] == "no_issue"
        assert (await client.get("/api/pending-issues")).json() == []

    async def test_low_confidence_is_dropped(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = detection_reply("Vague complaint", confidence=0.1)

        feedback = await _create(client, feedback_payload)

        assert feedback["detected_issues"] == []

    async def test_llm_failure_falls_back_to_rules(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = LLMException("rate limited")
        fake_llm.replies["resolution"] = LLMException("rate limited")

        feedback = await _create(client, feedback_payload)

        assert feedback["detected_issues"] == ["ATM malfunction"]
        pending = (await client.get("/api/pending-issues")).json()[0]
        assert "Check ATM operational status" in pending["resolutions"][0]["resolution_text"]

    async def test_malformed_reply_falls_back_to_rules(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = '{"title": "Broken",}'
        fake_llm.replies["resolution"] = "Fix it."

        feedback = await _create(client, feedback_payload, review_text="Waiting forever in the queue")

        assert feedback["detected_issues"] == ["Long waiting times"]

    async def test_non_string_title_falls_back_to_rules(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = json.dumps({"title": 123, "confidence_score": 0.9})
        fake_llm.replies["resolution"] = "Fix it."

        response = await client.post(
            "/api/feedback",
            json=feedback_payload(review_text="Waiting forever in the queue")
        )

        assert response.status_code == 201
        assert response.json()["detected_issues"] == ["Long waiting times"]

    async def test_non_string_category_falls_back_to_rules(self, llm_app, client, fake_llm, feedback_payload):
        fake_llm.replies["issue_detection"] = json.dumps({
            "title": "Queue delays",
            "category": ["ATM"],
            "confidence_score": 0.9,
        })
        fake_llm.replies["resolution"] = "Fix it."

        response = await client.post(
            "/api/feedback",
            json=feedback_payload(review_text="Waiting forever in the queue")
        )

        assert response.status_code == 201
        assert response.json()["detected_issues"] == ["Long waiting times"]


class TestDetectionSweep:
    """Background sweep over feedback not analysed yet."""

    async def test_sweep_processes_imported_feedback(self, app, client):
        csv_content = (
            "customer_name,service_type,review_text,review_rating\n"
            "Ahmad Rahman,ATM,The ATM swallowed my card,2\n"
            "Raj Kumar,ATM,Another card swallowed,1\n"
            "Siti Aminah,OnlineBanking,Love the app,5\n"
        )
        await client.post(
            "/api/import-csv",
            files={"file": ("feedback.csv", csv_content.encode(), "text/csv")}
        )

        async with get_session_context() as session:
            counts = await build_detection_service(session, app.state).sweep(10)

        assert counts == {"created": 1, "merged": 1}
        pending = (await client.get("/api/pending-issues")).json()
        assert pending[0]["feedback_count"] == 2

        async with get_session_context() as session:
            assert await build_detection_service(session, app.state).sweep(10) == {}
