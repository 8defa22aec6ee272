from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from medaieval.api.answers import specialty_name
from medaieval.models import FeedbackView, RelatedResource, ResourceLink, ScoreScale
from medaieval.settings import settings
from medaieval.storage.repo import QuizRepository
from medaieval.wiring import get_repo

router = APIRouter(prefix="/feedback", tags=["feedback"])


def _strings(value: Any) -> list[str]:
    return [str(v) for v in value] if isinstance(value, list) else []


def _resources(value: Any) -> list[RelatedResource]:
    if not isinstance(value, list):
        return []
    out: list[RelatedResource] = []
    for item in value:
        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, dict) and item.get("title") and item.get("url"):
            out.append(ResourceLink.model_validate(item))
    return out


def _scale(value: Any) -> ScoreScale | None:
    try:
        return ScoreScale(value)
    except ValueError:
        return None


@router.get("/{question_id}", response_model=FeedbackView)
async def get_feedback(question_id: int, repo: QuizRepository = Depends(get_repo)) -> FeedbackView:
    question = await repo.get_question(question_id)
    answer = await repo.get_answer_for_question(question_id, settings.mock_user_id)
    evaluation = answer.evaluation or {}

    score = evaluation.get("score") or 0
    return FeedbackView(
        id=question.id,
        specialty=await specialty_name(repo, question.specialty_id),
        difficulty=question.difficulty,
        scenario=question.scenario,
        question=question.question,
        user_answer=answer.answer,
        score=score if isinstance(score, (int, float)) else 0,
        score_scale=_scale(evaluation.get("scoreScale")),
        model_answer=evaluation.get("modelAnswer") or "",
        strengths=_strings(evaluation.get("strengths")),
        areas_for_improvement=_strings(evaluation.get("areasForImprovement")),
        learning_points=_strings(evaluation.get("learningPoints")),
        related_resources=_resources(evaluation.get("relatedResources")),
    )
