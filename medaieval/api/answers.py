from __future__ import annotations

import logging
import random
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from medaieval.gateway import AIGateway
from medaieval.llm.errors import AllProvidersExhaustedError
from medaieval.models import (
    ActivityLogEntry,
    ActivityType,
    Attempt,
    BatchAnswersRequest,
    BatchAnswersResponse,
    BatchItemResult,
    ScoreScale,
    StoredAnswer,
    StoredQuestion,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from medaieval.settings import settings
from medaieval.storage.repo import QuizRepository
from medaieval.wiring import get_gateway, get_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/answers", tags=["answers"])

DEFAULT_SPECIALTY_NAME = "Medical"


async def specialty_name(repo: QuizRepository, specialty_id: int) -> str:
    specialties = await repo.list_specialties()
    return next((s.name for s in specialties if s.id == specialty_id), DEFAULT_SPECIALTY_NAME)


async def _record_answer(
    repo: QuizRepository,
    question: StoredQuestion,
    answer: str,
    evaluation: dict[str, Any],
) -> StoredAnswer:
    user_id = settings.mock_user_id
    saved = await repo.save_answer(
        StoredAnswer(question_id=question.id, user_id=user_id, answer=answer, evaluation=evaluation)
    )
    await repo.save_attempt(
        Attempt(
            question_id=question.id,
            user_id=user_id,
            score=round(float(evaluation.get("score") or 0)),
            score_scale=evaluation.get("scoreScale", ScoreScale.ten_point),
        )
    )
    name = await specialty_name(repo, question.specialty_id)
    await repo.log_activity(
        ActivityLogEntry(
            user_id=user_id,
            type=ActivityType.answer,
            title=f"{question.difficulty} Question Response",
            description=f"Answered {question.difficulty} question on {name}",
        )
    )
    await repo.refresh_user_stats(user_id)
    return saved


def synthetic_evaluation(question: StoredQuestion) -> dict[str, Any]:
    """Placeholder feedback for batch submissions; no AI provider is consulted."""
    return {
        "score": random.randint(6, 10),
        "scoreScale": ScoreScale.ten_point.value,
        "modelAnswer": question.model_answer or "Standard medical approach would be...",
        "strengths": ["Good understanding of diagnosis", "Appropriate management plan"],
        "areasForImprovement": ["Could provide more detailed rationale", "Additional tests to consider"],
        "learningPoints": ["Remember key clinical guidelines", "Consider differential diagnoses"],
        "relatedResources": ["NICE Guidelines", "BMJ Best Practice"],
    }


@router.post("", response_model=SubmitAnswerResponse, status_code=201)
async def submit_answer(
    req: SubmitAnswerRequest,
    repo: QuizRepository = Depends(get_repo),
    gateway: AIGateway = Depends(get_gateway),
) -> SubmitAnswerResponse:
    question = await repo.get_question(req.question_id)

    try:
        result = await gateway.evaluate_answer(question, req.answer)
    except AllProvidersExhaustedError as e:
        raise HTTPException(status_code=503, detail=e.message) from e

    evaluation = result.value.model_dump(mode="json", by_alias=True)
    saved = await _record_answer(repo, question, req.answer, evaluation)
    return SubmitAnswerResponse(**saved.model_dump(), provider=result.provider)


@router.post("/batch", response_model=BatchAnswersResponse)
async def submit_answers_batch(
    req: BatchAnswersRequest, repo: QuizRepository = Depends(get_repo)
) -> BatchAnswersResponse:
    results: list[BatchItemResult] = []
    for item in req.answers:
        try:
            question = await repo.get_question(item.question_id)
            evaluation = synthetic_evaluation(question)
            await _record_answer(repo, question, item.answer, evaluation)
        except HTTPException as e:
            logger.warning(f"Batch answer for question {item.question_id} rejected: {e.detail}")
            results.append(BatchItemResult(question_id=item.question_id, status="error", message=str(e.detail)))
            continue
        results.append(BatchItemResult(question_id=item.question_id, status="success", evaluation=evaluation))

    return BatchAnswersResponse(provider=None, results=results)
