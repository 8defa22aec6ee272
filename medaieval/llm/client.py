from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from medaieval.llm.errors import (
    ConfigurationError,
    EmptyResponseError,
    MalformedResponseError,
    ProviderRequestError,
    UnexpectedShapeError,
)
from medaieval.llm.normalizer import ListDocument, Normalized, StructuredDocument, Unparsed, normalize
from medaieval.llm.prompts import PromptFamily, QuestionLike, build_evaluation_prompt, build_question_prompt
from medaieval.llm.types import LLMMessage, LLMRequest, LLMResponse
from medaieval.models import AnswerEvaluation, Difficulty, GeneratedQuestion, ScoreScale

logger = logging.getLogger(__name__)

# Secondary recovery for replies the normalizer could not structure
_QUESTION_ARRAY = re.compile(r"\[\s*\{[\s\S]*?\}\s*\]")
_EVALUATION_OBJECT = re.compile(r"\{[\s\S]*?\}")


class ProviderAdapter(ABC):
    """One external LLM backend behind the gateway's two operations.

    Subclasses only implement ``complete``; prompting, normalization and
    unwrapping of the reply are shared.
    """

    name: str = "provider"
    score_scale: ScoreScale = ScoreScale.ten_point
    prompt_family: PromptFamily = "detailed"

    def __init__(
        self,
        model: str,
        temperature: float = 0.2,
        max_output_tokens: int = 4000,
        transport: httpx.AsyncBaseTransport | None = None,
        request_timeout: float = 120.0,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.transport = transport
        self.request_timeout = request_timeout

    @abstractmethod
    async def complete(self, req: LLMRequest) -> LLMResponse:
        raise NotImplementedError

    def _require(self, value: Optional[str], env_name: str) -> str:
        if not value:
            raise ConfigurationError(self.name, f"{env_name} environment variable is missing")
        return value

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.request_timeout, transport=self.transport)

    async def _ask(self, prompt: str, operation: str, **metadata: Any) -> str:
        req = LLMRequest(
            provider=self.name,
            model=self.model,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            messages=[LLMMessage(role="user", content=prompt)],
            metadata={"operation": operation, **metadata},
        )
        try:
            resp = await self.complete(req)
        except httpx.HTTPStatusError as e:
            raise ProviderRequestError(self.name, f"HTTP {e.response.status_code} from {e.request.url}") from e
        except httpx.HTTPError as e:
            raise ProviderRequestError(self.name, f"request failed: {e}") from e
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            # Body was not JSON or did not fit the expected envelope
            raise ProviderRequestError(self.name, f"unreadable response body: {e}") from e

        text = (resp.text or "").strip()
        if not text:
            raise EmptyResponseError(self.name, "returned empty content")
        logger.debug(f"{self.name} replied with {len(text)} chars (tokens={resp.total_tokens})")
        return text

    async def generate_questions(
        self,
        specialty: str,
        difficulty: Union[str, Difficulty],
        count: int,
        topics: Optional[str] = None,
    ) -> list[GeneratedQuestion]:
        level = difficulty.value if isinstance(difficulty, Difficulty) else str(difficulty)
        prompt = build_question_prompt(specialty, level, count, topics, family=self.prompt_family)
        raw = await self._ask(
            prompt, "generate_questions", specialty=specialty, difficulty=level, count=count, topics=topics
        )
        items = self._unwrap_questions(normalize(raw))
        return [self._to_question(item, specialty, level) for item in items]

    async def evaluate_answer(self, question: QuestionLike, user_answer: str) -> AnswerEvaluation:
        prompt = build_evaluation_prompt(question, user_answer, family=self.prompt_family)
        raw = await self._ask(prompt, "evaluate_answer", model_answer=question.model_answer)
        document = self._unwrap_evaluation(normalize(raw))
        try:
            return AnswerEvaluation.model_validate({**document, "scoreScale": self.score_scale})
        except ValidationError as e:
            raise UnexpectedShapeError(self.name, f"evaluation does not match schema: {e.error_count()} errors") from e

    def _unwrap_questions(self, doc: Normalized) -> list[Any]:
        if isinstance(doc, StructuredDocument):
            questions = doc.value.get("questions")
            if isinstance(questions, list):
                return questions
            raise UnexpectedShapeError(self.name, "reply has no 'questions' list")
        if isinstance(doc, ListDocument):
            return doc.values
        if isinstance(doc, Unparsed):
            logger.warning(f"{self.name} reply not in expected JSON format, attempting array extraction")
            match = _QUESTION_ARRAY.search(doc.raw_text)
            if match:
                try:
                    parsed = json.loads(match.group(0))
                except json.JSONDecodeError:
                    parsed = None
                if isinstance(parsed, list):
                    return parsed
            raise MalformedResponseError(self.name, "could not extract question data from reply")
        raise UnexpectedShapeError(self.name, f"unknown document type {type(doc).__name__}")

    def _unwrap_evaluation(self, doc: Normalized) -> dict[str, Any]:
        if isinstance(doc, StructuredDocument):
            return doc.value
        if isinstance(doc, ListDocument):
            raise UnexpectedShapeError(self.name, "evaluation reply is a list, expected an object")
        if isinstance(doc, Unparsed):
            logger.warning(f"{self.name} reply not in expected JSON format, attempting object extraction")
            match = _EVALUATION_OBJECT.search(doc.raw_text)
            if match:
                try:
                    parsed = json.loads(match.group(0))
                except json.JSONDecodeError:
                    parsed = None
                if isinstance(parsed, dict):
                    return parsed
            raise MalformedResponseError(self.name, "could not extract evaluation data from reply")
        raise UnexpectedShapeError(self.name, f"unknown document type {type(doc).__name__}")

    def _to_question(self, item: Any, specialty: str, level: str) -> GeneratedQuestion:
        if not isinstance(item, dict):
            raise UnexpectedShapeError(self.name, f"question item is {type(item).__name__}, expected an object")
        data = {"specialty": specialty, **item}
        try:
            # The requested difficulty is authoritative when it is a known level
            data["difficulty"] = Difficulty(level)
        except ValueError:
            data.setdefault("difficulty", level)
        try:
            return GeneratedQuestion.model_validate(data)
        except ValidationError as e:
            raise UnexpectedShapeError(self.name, f"question does not match schema: {e.error_count()} errors") from e
