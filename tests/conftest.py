# tests/conftest.py
import json
import logging
from typing import Any, Callable, Union

import pytest
from fastapi.testclient import TestClient

from medaieval.gateway import AIGateway
from medaieval.llm.client import ProviderAdapter
from medaieval.llm.mock import MockAdapter
from medaieval.llm.types import LLMRequest, LLMResponse
from medaieval.main import app
from medaieval.storage.inmemory import InMemoryQuizRepository
from medaieval.wiring import get_gateway, get_repo

logging.basicConfig(level=logging.INFO)

Reply = Union[str, Exception, Callable[[LLMRequest], str]]


class ScriptedAdapter(ProviderAdapter):
    """Adapter double: replies with canned text or raises, and counts calls."""

    def __init__(self, name: str, reply: Reply = "", score_scale=None) -> None:
        super().__init__(model=f"{name}-test")
        self.name = name
        self.reply = reply
        self.calls = 0
        self.requests: list[LLMRequest] = []
        if score_scale is not None:
            self.score_scale = score_scale

    async def complete(self, req: LLMRequest) -> LLMResponse:
        self.calls += 1
        self.requests.append(req)
        if isinstance(self.reply, Exception):
            raise self.reply
        text = self.reply(req) if callable(self.reply) else self.reply
        return LLMResponse(text=text)


def question_payload(specialty: str, difficulty: str, count: int, **overrides: Any) -> str:
    items = []
    for i in range(count):
        item = {
            "specialty": specialty,
            "difficulty": difficulty,
            "scenario": f"A 58-year-old presents with chest pain (case {i + 1}).",
            "question": "What is the most likely diagnosis and first-line investigation?",
            "modelAnswer": "Acute coronary syndrome; obtain a 12-lead ECG within 10 minutes.",
            "strengths": ["Recognises red flags"],
            "areasForImprovement": ["Mention troponin timing"],
            "learningPoints": ["Follow the NICE chest pain pathway"],
            "relatedResources": [{"title": "NICE CG95", "url": "https://www.nice.org.uk/guidance/cg95"}],
        }
        item.update(overrides)
        items.append(item)
    return json.dumps({"questions": items})


def evaluation_payload(score: Any = 8, **overrides: Any) -> str:
    doc = {
        "score": score,
        "modelAnswer": "ECG, troponin, aspirin 300 mg.",
        "strengths": ["Correct diagnosis"],
        "areasForImprovement": ["Timing of repeat troponin"],
        "learningPoints": ["High-sensitivity troponin at 0 and 3 hours"],
        "relatedResources": ["NICE Guidelines"],
    }
    doc.update(overrides)
    return json.dumps(doc)


@pytest.fixture
def make_adapter() -> Callable[..., ScriptedAdapter]:
    return ScriptedAdapter


@pytest.fixture
def repo() -> InMemoryQuizRepository:
    return InMemoryQuizRepository()


@pytest.fixture
def gateway() -> AIGateway:
    return AIGateway([MockAdapter()])


@pytest.fixture
def client(repo: InMemoryQuizRepository, gateway: AIGateway):
    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_provider_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    # Adapters fall back to the environment for keys; tests must not see real ones.
    for env in ("OPENAI_API_KEY", "MISTRAL_API_KEY", "DEEPSEEK_API_KEY"):
        monkeypatch.delenv(env, raising=False)
