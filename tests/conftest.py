"""Pytest configuration and fixtures for the Bizz AI backend tests."""

import json
import os
from typing import Any, Callable, Dict, List
from unittest.mock import MagicMock

import pytest

# Keep module-level app construction away from real services and files.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("SMTP_HOST", None)

from fastapi.testclient import TestClient  # noqa: E402

from bizz_ai.app import create_app  # noqa: E402
from bizz_ai.config import Settings  # noqa: E402
from bizz_ai.db import create_db_engine, create_session_factory, init_db  # noqa: E402
from bizz_ai.llm import StackGenerator  # noqa: E402
from bizz_ai.payments import PaymentService  # noqa: E402
from bizz_ai.storage import Storage  # noqa: E402


def make_recommendation(index: int, level: str = "Alto") -> Dict[str, Any]:
    return {
        "toolName": f"Tool {index}",
        "category": "Automação de Marketing",
        "useCase": f"Use case {index}",
        "automationLevel": level,
        "description": f"Description {index}",
        "link": f"https://tool{index}.example.com",
        "features": [f"Feature {index}a", f"Feature {index}b"],
    }


def make_stack_payload(count: int = 4) -> Dict[str, Any]:
    return {
        "title": "Stack de Crescimento SaaS",
        "description": "Uma stack para gerar mais leads.",
        "overallAnalysis": "Seu negócio precisa automatizar a prospecção.",
        "implementationTips": ["Comece pelo CRM", "Automatize o follow-up"],
        "estimatedSavings": "20 horas por mês",
        "recommendations": [make_recommendation(i) for i in range(1, count + 1)],
    }


def completion_for(content: str) -> MagicMock:
    """Build a chat completion response carrying *content*."""

    return MagicMock(choices=[MagicMock(message=MagicMock(content=content))])


@pytest.fixture
def mock_openai() -> MagicMock:
    """Mock OpenAI client answering with a four-tool stack."""

    client = MagicMock()
    client.chat.completions.create.return_value = completion_for(json.dumps(make_stack_payload()))
    return client


@pytest.fixture
def storage() -> Storage:
    """Real storage over a private in-memory SQLite database."""

    engine = create_db_engine("sqlite://")
    init_db(engine)
    return Storage(create_session_factory(engine))


class RecordingNotifier:
    """Notifier that remembers every email instead of sending it."""

    def __init__(self, error: Exception | None = None) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.error = error

    def send_stack_email(self, user_email, user_name, stack, recommendations) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(
            {
                "email": user_email,
                "name": user_name,
                "title": stack.title,
                "tools": [rec.tool_name for rec in recommendations],
            }
        )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", openai_api_key="test-openai")


@pytest.fixture
def make_client(settings, storage, notifier) -> Callable[..., TestClient]:
    """Build a test client around injected services."""

    def _make(openai_client: Any = None, **overrides: Any) -> TestClient:
        services: Dict[str, Any] = {
            "storage": storage,
            "generator": StackGenerator(openai_client, model="gpt-4o"),
            "notifier": notifier,
            "payments": PaymentService(None),
        }
        services.update(overrides)
        return TestClient(create_app(settings, **services))

    return _make


@pytest.fixture
def client(make_client, mock_openai) -> TestClient:
    return make_client(mock_openai)


@pytest.fixture
def sample_submission() -> Dict[str, Any]:
    return {
        "businessType": "saas",
        "teamSize": "small",
        "objective": "leads",
        "currentTools": ["Notion"],
        "otherTools": "",
        "aiKnowledge": "intermediario",
        "name": "Ana",
        "email": "ana@x.com",
    }
