from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from medaieval.models import (
    ActivityLogEntry,
    ActivityType,
    ActivityView,
    DayActivity,
    PerformanceSummary,
    ProgressPoint,
    Resource,
    ResourceType,
    Specialty,
    SpecialtyPerformance,
    UserProfile,
    UserStats,
)
from medaieval.settings import settings
from medaieval.storage.repo import QuizRepository
from medaieval.wiring import get_repo

router = APIRouter(tags=["dashboard"])

RECENT_ACTIVITY_LIMIT = 4

ACTIVITY_ICONS = {
    ActivityType.achievement: "star",
    ActivityType.review: "sync",
    ActivityType.gap: "exclamation",
}

RESOURCE_KINDS = {
    "guidelines": ResourceType.guideline,
    "questionbanks": ResourceType.questionbank,
    "ukmla": ResourceType.ukmla,
}


def time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    hours = int((now - created_at).total_seconds() // 3600)
    days = hours // 24
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours} {'hour' if hours == 1 else 'hours'} ago"
    if days < 7:
        return f"{days} {'day' if days == 1 else 'days'} ago"
    return created_at.date().isoformat()


def to_activity_view(entry: ActivityLogEntry, now: Optional[datetime] = None) -> ActivityView:
    return ActivityView(
        id=entry.id,
        title=entry.title,
        description=entry.description,
        icon=ACTIVITY_ICONS.get(entry.type, "check"),
        time_ago=time_ago(entry.created_at, now),
    )


@router.get("/user", response_model=UserProfile)
async def get_user() -> UserProfile:
    return UserProfile(id=settings.mock_user_id, name="Dr. Jane Smith", role="Medical Student, Year 5")


@router.get("/stats", response_model=UserStats)
async def get_stats(repo: QuizRepository = Depends(get_repo)) -> UserStats:
    stats = await repo.get_user_stats(settings.mock_user_id)
    if stats is None:
        return UserStats(user_id=settings.mock_user_id, strongest_area="N/A", weakest_area="N/A")
    return stats


@router.get("/specialties", response_model=list[Specialty])
async def list_specialties(repo: QuizRepository = Depends(get_repo)) -> list[Specialty]:
    specialties = await repo.list_specialties()
    mastery = {row.name: row.accuracy for row in await repo.performance_by_specialty(settings.mock_user_id)}
    return [s.model_copy(update={"mastery_percentage": round(mastery.get(s.name, 0))}) for s in specialties]


@router.get("/activity", response_model=list[ActivityView])
async def recent_activity(repo: QuizRepository = Depends(get_repo)) -> list[ActivityView]:
    entries = await repo.recent_activity(settings.mock_user_id, limit=RECENT_ACTIVITY_LIMIT)
    return [to_activity_view(e) for e in entries]


@router.get("/performance", response_model=PerformanceSummary)
async def performance(repo: QuizRepository = Depends(get_repo)) -> PerformanceSummary:
    stats = await repo.get_user_stats(settings.mock_user_id)
    return PerformanceSummary(
        total_questions=stats.questions_answered if stats else 0,
        overall_accuracy=stats.accuracy_rate if stats else 0,
        active_days=stats.active_days if stats else 0,
        by_difficulty=await repo.performance_by_difficulty(settings.mock_user_id),
    )


@router.get("/performance/specialty", response_model=list[SpecialtyPerformance])
async def performance_by_specialty(repo: QuizRepository = Depends(get_repo)) -> list[SpecialtyPerformance]:
    return await repo.performance_by_specialty(settings.mock_user_id)


@router.get("/performance/progress", response_model=list[ProgressPoint])
async def progress(repo: QuizRepository = Depends(get_repo)) -> list[ProgressPoint]:
    return await repo.progress_over_time(settings.mock_user_id)


@router.get("/performance/activity", response_model=list[DayActivity])
async def weekly_activity(repo: QuizRepository = Depends(get_repo)) -> list[DayActivity]:
    return await repo.weekly_activity(settings.mock_user_id)


@router.get("/resources/{kind}", response_model=list[Resource])
async def list_resources(kind: str, repo: QuizRepository = Depends(get_repo)) -> list[Resource]:
    resource_type = RESOURCE_KINDS.get(kind)
    if resource_type is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource kind '{kind}'")
    return await repo.list_resources(resource_type)
