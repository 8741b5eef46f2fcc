"""Tests for resolution drafting."""

import json

import pytest

from feedback_triage.core import LLMException
from feedback_triage.issues.application import ResolutionService

from conftest import FakeLLMClient


class TestResolutionService:

    async def test_template_without_llm(self, rules_manager):
        service = ResolutionService(None, rules_manager)

        draft = await service.draft("Long waiting times", "Queue too long", "CoreBanking")

        assert draft.source == "template"
        assert draft.confidence_score == ResolutionService.TEMPLATE_CONFIDENCE
        assert draft.resolution_text.startswith("1. Implement queue management system")

    async def test_json_reply(self, rules_manager):
        llm = FakeLLMClient({"resolution": json.dumps({
            "resolution_text": "1. Reset the card reader",
            "confidence_score": 0.9,
        })})
        service = ResolutionService(llm, rules_manager)

        draft = await service.draft("ATM malfunction", "Card stuck", "ATM", "My card got stuck")

        assert draft.source == "llm"
        assert draft.resolution_text == "1. Reset the card reader"
        assert draft.confidence_score == 0.9
        prompt = llm.calls[0]["messages"][-1]["content"]
        assert "Original Feedback: My card got stuck" in prompt

    async def test_json_reply_without_confidence(self, rules_manager):
        llm = FakeLLMClient({"resolution": json.dumps({"resolution_text": "Call the customer"})})
        service = ResolutionService(llm, rules_manager)

        draft = await service.draft("ATM malfunction", None, "ATM")

        assert draft.confidence_score == ResolutionService.DEFAULT_CONFIDENCE

    async def test_plain_text_reply(self, rules_manager):
        llm = FakeLLMClient({"resolution": "Send a technician to the ATM."})
        service = ResolutionService(llm, rules_manager)

        draft = await service.draft("ATM malfunction", None, "ATM")

        assert draft.source == "llm_text"
        assert draft.resolution_text == "Send a technician to the ATM."
        assert draft.confidence_score == ResolutionService.TEXT_REPLY_CONFIDENCE

    @pytest.mark.parametrize("reply", [LLMException("timeout"), ""])
    async def test_falls_back_to_template(self, rules_manager, reply):
        service = ResolutionService(FakeLLMClient({"resolution": reply}), rules_manager)

        draft = await service.draft("ATM malfunction", None, "ATM")

        assert draft.source == "template"
        assert "Check ATM operational status" in draft.resolution_text
