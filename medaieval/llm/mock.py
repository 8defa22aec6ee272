from __future__ import annotations

import json
from typing import Any

from medaieval.llm.client import ProviderAdapter
from medaieval.llm.types import LLMRequest, LLMResponse
from medaieval.models import ScoreScale


class MockAdapter(ProviderAdapter):
    """Deterministic mock provider for local development.

    Answers both gateway operations with well-formed JSON and never needs
    credentials.
    """

    name = "mock"
    score_scale = ScoreScale.ten_point

    def __init__(self, model: str = "mock", **kwargs: Any) -> None:
        super().__init__(model=model, **kwargs)

    async def complete(self, req: LLMRequest) -> LLMResponse:
        meta = req.metadata
        if meta.get("operation") == "generate_questions":
            specialty = meta.get("specialty", "General Medicine")
            difficulty = meta.get("difficulty", "Intermediate")
            payload: dict[str, Any] = {
                "questions": [
                    {
                        "specialty": specialty,
                        "difficulty": difficulty,
                        "scenario": f"(mock) Case {i + 1}: a patient presents to the {specialty} clinic.",
                        "question": f"(mock) What is your initial management for case {i + 1}?",
                        "modelAnswer": "(mock) Assess ABCDE, take a focused history and arrange investigations.",
                        "strengths": ["(mock) Structured approach"],
                        "areasForImprovement": ["(mock) Consider differential diagnoses"],
                        "learningPoints": ["(mock) Follow local and NICE guidance"],
                        "relatedResources": [{"title": "NICE Guidance", "url": "https://www.nice.org.uk/guidance"}],
                    }
                    for i in range(int(meta.get("count") or 1))
                ]
            }
        else:
            payload = {
                "score": 7,
                "modelAnswer": meta.get("model_answer") or "(mock) Model answer.",
                "strengths": ["(mock) Identified the key diagnosis"],
                "areasForImprovement": ["(mock) Expand on management steps"],
                "learningPoints": ["(mock) Review the relevant guideline"],
                "relatedResources": ["NICE Guidelines"],
            }
        return LLMResponse(text=json.dumps(payload, ensure_ascii=False), raw={"provider": "mock"})
