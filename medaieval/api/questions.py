from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from medaieval.gateway import AIGateway
from medaieval.llm.errors import AllProvidersExhaustedError
from medaieval.models import (
    GenerateQuestionsRequest,
    GenerateQuestionsResponse,
    QuestionSummary,
    Specialty,
    StoredQuestion,
)
from medaieval.settings import settings
from medaieval.storage.repo import QuizRepository
from medaieval.wiring import get_gateway, get_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["questions"])


@router.post("/generate", response_model=GenerateQuestionsResponse, status_code=201)
async def generate_questions(
    req: GenerateQuestionsRequest,
    repo: QuizRepository = Depends(get_repo),
    gateway: AIGateway = Depends(get_gateway),
) -> GenerateQuestionsResponse:
    try:
        result = await gateway.generate_questions(req.specialty, req.difficulty, req.count, req.topics)
    except AllProvidersExhaustedError as e:
        raise HTTPException(status_code=503, detail=e.message) from e

    specialty = await repo.get_specialty_by_name(req.specialty)
    if specialty is None:
        specialty = await repo.create_specialty(Specialty(name=req.specialty.strip()))

    saved: list[QuestionSummary] = []
    for q in result.value:
        stored = await repo.create_question(
            StoredQuestion(
                specialty_id=specialty.id,
                user_id=settings.mock_user_id,
                difficulty=q.difficulty.value,
                scenario=q.scenario,
                question=q.question,
                model_answer=q.model_answer,
                strengths=q.strengths,
                areas_for_improvement=q.areas_for_improvement,
                learning_points=q.learning_points,
                related_resources=q.related_resources,
            )
        )
        saved.append(
            QuestionSummary(
                id=stored.id,
                specialty=q.specialty,
                difficulty=stored.difficulty,
                scenario=stored.scenario,
                question=stored.question,
            )
        )

    logger.info(f"Saved {len(saved)} {req.difficulty.value} {specialty.name} questions from {result.provider}")
    return GenerateQuestionsResponse(provider=result.provider, questions=saved)
