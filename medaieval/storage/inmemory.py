from __future__ import annotations

import itertools
from datetime import datetime
from typing import Dict, List

from fastapi import HTTPException

from medaieval.models import (
    ActivityLogEntry,
    Attempt,
    DayActivity,
    DifficultyPerformance,
    ProgressPoint,
    Resource,
    ResourceType,
    Specialty,
    SpecialtyPerformance,
    StoredAnswer,
    StoredQuestion,
    UserStats,
)
from medaieval.storage import aggregates
from medaieval.storage.repo import QuizRepository
from medaieval.storage.seed import RESOURCES, SPECIALTIES


class InMemoryQuizRepository(QuizRepository):
    def __init__(self, seed: bool = True) -> None:
        self._ids = itertools.count(1)
        self.specialties: Dict[int, Specialty] = {}
        self.questions: Dict[int, StoredQuestion] = {}
        self.answers: Dict[int, StoredAnswer] = {}
        self.attempts: List[Attempt] = []
        self.activity: List[ActivityLogEntry] = []
        self.stats: Dict[int, UserStats] = {}
        self.resources: List[Resource] = []

        if seed:
            for specialty in SPECIALTIES:
                self._add_specialty(specialty.model_copy())
            for resource in RESOURCES:
                self.resources.append(resource.model_copy(update={"id": next(self._ids)}))

    def _add_specialty(self, specialty: Specialty) -> Specialty:
        specialty.id = next(self._ids)
        self.specialties[specialty.id] = specialty
        return specialty

    async def create_question(self, question: StoredQuestion) -> StoredQuestion:
        if question.specialty_id not in self.specialties:
            raise HTTPException(status_code=400, detail="unknown specialty")
        question = question.model_copy(update={"id": next(self._ids)})
        self.questions[question.id] = question
        self.specialties[question.specialty_id].question_count += 1
        return question

    async def get_question(self, question_id: int) -> StoredQuestion:
        question = self.questions.get(question_id)
        if question is None:
            raise HTTPException(status_code=404, detail="Question not found")
        return question

    async def list_specialties(self) -> list[Specialty]:
        return list(self.specialties.values())

    async def get_specialty_by_name(self, name: str) -> Specialty | None:
        wanted = name.strip().lower()
        return next((s for s in self.specialties.values() if s.name.lower() == wanted), None)

    async def create_specialty(self, specialty: Specialty) -> Specialty:
        existing = await self.get_specialty_by_name(specialty.name)
        if existing is not None:
            return existing
        return self._add_specialty(specialty.model_copy())

    async def save_answer(self, answer: StoredAnswer) -> StoredAnswer:
        answer = answer.model_copy(update={"id": next(self._ids)})
        self.answers[answer.id] = answer
        return answer

    async def get_answer_for_question(self, question_id: int, user_id: int) -> StoredAnswer:
        matches = [a for a in self.answers.values() if a.question_id == question_id and a.user_id == user_id]
        if not matches:
            raise HTTPException(status_code=404, detail="Answer not found")
        return max(matches, key=lambda a: (a.created_at, a.id or 0))

    async def save_attempt(self, attempt: Attempt) -> Attempt:
        attempt = attempt.model_copy(update={"id": next(self._ids)})
        self.attempts.append(attempt)
        return attempt

    async def log_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        entry = entry.model_copy(update={"id": next(self._ids)})
        self.activity.append(entry)
        return entry

    async def recent_activity(self, user_id: int, limit: int = 10) -> list[ActivityLogEntry]:
        entries = [e for e in self.activity if e.user_id == user_id]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries[:limit]

    async def get_user_stats(self, user_id: int) -> UserStats | None:
        return self.stats.get(user_id)

    async def update_user_stats(self, stats: UserStats) -> UserStats:
        stats.updated_at = datetime.utcnow()
        self.stats[stats.user_id] = stats
        return stats

    async def list_resources(self, resource_type: ResourceType) -> list[Resource]:
        return [r for r in self.resources if r.type == resource_type]

    def _user_attempts(self, user_id: int) -> list[Attempt]:
        return [a for a in self.attempts if a.user_id == user_id]

    async def performance_by_specialty(self, user_id: int) -> list[SpecialtyPerformance]:
        return aggregates.performance_by_specialty(
            self._user_attempts(user_id), self.questions, self.specialties.values()
        )

    async def performance_by_difficulty(self, user_id: int) -> list[DifficultyPerformance]:
        return aggregates.performance_by_difficulty(self._user_attempts(user_id), self.questions)

    async def progress_over_time(self, user_id: int, days: int = 30) -> list[ProgressPoint]:
        return aggregates.progress_over_time(self._user_attempts(user_id), days=days)

    async def weekly_activity(self, user_id: int) -> list[DayActivity]:
        return aggregates.weekly_activity(e for e in self.activity if e.user_id == user_id)

    async def refresh_user_stats(self, user_id: int) -> UserStats:
        stats = aggregates.compute_user_stats(
            user_id, self._user_attempts(user_id), self.questions, self.specialties.values()
        )
        return await self.update_user_stats(stats)
