"""
Test configuration and fixtures for pytest.

API tests drive the ASGI app through httpx against an in-memory SQLite
database. ASGITransport does not run the lifespan, so the fixtures set up
the database and app.state themselves.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DETECTION_INTERVAL_SECONDS"] = "0"
os.environ["AUTO_DETECT_ISSUES"] = "true"
os.environ["MOCK_LLM"] = "false"
os.environ.pop("OPENAI_API_KEY", None)

import json
from typing import Dict, List, Optional, Union

import httpx
import pytest

from feedback_triage.core import LLMException
from feedback_triage.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from feedback_triage.infrastructure.llm import ChatCompletionResult, ILLMClient
from feedback_triage.issues.domain import DetectionRuleSet
from feedback_triage.issues.infrastructure import DetectionRulesManager, LLMClientAdapter

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeLLMClient(ILLMClient):
    """
    Scripted LLM client.

    ``replies`` maps an operation name to the reply content, or to an
    exception to raise. Unscripted operations raise LLMException.
    """

    def __init__(self, replies: Optional[Dict[str, Union[str, Exception]]] = None):
        self.replies: Dict[str, Union[str, Exception]] = dict(replies or {})
        self.calls: List[dict] = []

    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 600,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        self.calls.append({"operation": operation, "messages": messages})
        reply = self.replies.get(operation)
        if reply is None:
            raise LLMException(f"No scripted reply for {operation}")
        if isinstance(reply, Exception):
            raise reply
        return ChatCompletionResult(
            content=reply,
            model="fake-model",
            prompt_tokens=10,
            completion_tokens=10,
            latency_ms=1
        )

    def operations(self) -> List[str]:
        return [call["operation"] for call in self.calls]


def detection_reply(title: str, category: str = "ATM", confidence: float = 0.9) -> str:
    """JSON issue-detection reply as the model would send it."""
    return json.dumps({
        "title": title,
        "description": f"{title} reported by customer",
        "category": category,
        "confidence_score": confidence,
    })


@pytest.fixture
def rules_manager() -> DetectionRulesManager:
    """Rules holder with the built-in default rules."""
    return DetectionRulesManager(DetectionRuleSet())


@pytest.fixture
async def database():
    """Fresh in-memory database per test."""
    init_database(TEST_DATABASE_URL)
    await create_tables()
    yield
    await close_database()


@pytest.fixture
async def session(database):
    """Session that commits on exit, for service-level tests."""
    async with get_session_context() as session:
        yield session


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def app(database, rules_manager):
    """FastAPI app wired for keyword-rule detection (no LLM)."""
    from feedback_triage.main import app as fastapi_app

    fastapi_app.state.rules_manager = rules_manager
    fastapi_app.state.llm_adapter = None
    fastapi_app.state.scheduler = None
    yield fastapi_app
    fastapi_app.state.llm_adapter = None


@pytest.fixture
def llm_app(app, fake_llm):
    """App whose detection goes through the scripted LLM."""
    app.state.llm_adapter = LLMClientAdapter(fake_llm)
    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def feedback_payload():
    """Factory for feedback create payloads."""
    def _make(**overrides) -> dict:
        payload = {
            "customer_name": "Ahmad Rahman",
            "customer_email": "ahmad.rahman@email.com",
            "service_type": "ATM",
            "review_text": "The ATM swallowed my card.",
            "review_rating": 2,
            "issue_location": "Kuala Lumpur",
        }
        payload.update(overrides)
        return payload
    return _make
