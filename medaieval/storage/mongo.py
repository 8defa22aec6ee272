from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument

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

_MAX_DOCS = 10_000


class MongoQuizRepository(QuizRepository):
    def __init__(self, mongo_uri: str, db_name: str) -> None:
        self.client = AsyncIOMotorClient(mongo_uri)
        self.db = self.client[db_name]
        self.counters = self.db["counters"]
        self.specialties = self.db["specialties"]
        self.questions = self.db["questions"]
        self.answers = self.db["answers"]
        self.attempts = self.db["attempts"]
        self.activity = self.db["activity_log"]
        self.stats = self.db["user_stats"]
        self.resources = self.db["resources"]

    async def seed(self) -> None:
        if await self.specialties.count_documents({}) == 0:
            for specialty in SPECIALTIES:
                await self.create_specialty(specialty)
        if await self.resources.count_documents({}) == 0:
            for resource in RESOURCES:
                await self._insert(self.resources, "resources", resource)

    async def _next_id(self, collection: str) -> int:
        doc = await self.counters.find_one_and_update(
            {"_id": collection},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(doc["seq"])

    async def _insert(self, collection: Any, name: str, model: Any) -> Any:
        model = model.model_copy(update={"id": await self._next_id(name)})
        await collection.insert_one(model.model_dump(mode="json"))
        return model

    async def create_question(self, question: StoredQuestion) -> StoredQuestion:
        created = await self._insert(self.questions, "questions", question)
        await self.specialties.update_one({"id": question.specialty_id}, {"$inc": {"question_count": 1}})
        return created

    async def get_question(self, question_id: int) -> StoredQuestion:
        doc = await self.questions.find_one({"id": question_id})
        if not doc:
            raise HTTPException(status_code=404, detail="Question not found")
        return StoredQuestion.model_validate(doc)

    async def list_specialties(self) -> list[Specialty]:
        docs = await self.specialties.find({}).sort("id", 1).to_list(length=_MAX_DOCS)
        return [Specialty.model_validate(d) for d in docs]

    async def get_specialty_by_name(self, name: str) -> Specialty | None:
        doc = await self.specialties.find_one({"name": {"$regex": f"^{name.strip()}$", "$options": "i"}})
        return Specialty.model_validate(doc) if doc else None

    async def create_specialty(self, specialty: Specialty) -> Specialty:
        existing = await self.get_specialty_by_name(specialty.name)
        if existing is not None:
            return existing
        return await self._insert(self.specialties, "specialties", specialty)

    async def save_answer(self, answer: StoredAnswer) -> StoredAnswer:
        return await self._insert(self.answers, "answers", answer)

    async def get_answer_for_question(self, question_id: int, user_id: int) -> StoredAnswer:
        doc = await self.answers.find_one(
            {"question_id": question_id, "user_id": user_id}, sort=[("created_at", -1), ("id", -1)]
        )
        if not doc:
            raise HTTPException(status_code=404, detail="Answer not found")
        return StoredAnswer.model_validate(doc)

    async def save_attempt(self, attempt: Attempt) -> Attempt:
        return await self._insert(self.attempts, "attempts", attempt)

    async def log_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        return await self._insert(self.activity, "activity_log", entry)

    async def recent_activity(self, user_id: int, limit: int = 10) -> list[ActivityLogEntry]:
        cursor = self.activity.find({"user_id": user_id}).sort("created_at", -1).limit(limit)
        return [ActivityLogEntry.model_validate(d) for d in await cursor.to_list(length=limit)]

    async def get_user_stats(self, user_id: int) -> UserStats | None:
        doc = await self.stats.find_one({"user_id": user_id})
        return UserStats.model_validate(doc) if doc else None

    async def update_user_stats(self, stats: UserStats) -> UserStats:
        stats.updated_at = datetime.utcnow()
        await self.stats.update_one({"user_id": stats.user_id}, {"$set": stats.model_dump(mode="json")}, upsert=True)
        return stats

    async def list_resources(self, resource_type: ResourceType) -> list[Resource]:
        docs = await self.resources.find({"type": resource_type.value}).to_list(length=_MAX_DOCS)
        return [Resource.model_validate(d) for d in docs]

    async def _user_attempts(self, user_id: int) -> list[Attempt]:
        docs = await self.attempts.find({"user_id": user_id}).to_list(length=_MAX_DOCS)
        return [Attempt.model_validate(d) for d in docs]

    async def _questions_for(self, attempts: list[Attempt]) -> dict[int, StoredQuestion]:
        ids = sorted({a.question_id for a in attempts})
        docs = await self.questions.find({"id": {"$in": ids}}).to_list(length=_MAX_DOCS)
        return {d["id"]: StoredQuestion.model_validate(d) for d in docs}

    async def performance_by_specialty(self, user_id: int) -> list[SpecialtyPerformance]:
        attempts = await self._user_attempts(user_id)
        return aggregates.performance_by_specialty(
            attempts, await self._questions_for(attempts), await self.list_specialties()
        )

    async def performance_by_difficulty(self, user_id: int) -> list[DifficultyPerformance]:
        attempts = await self._user_attempts(user_id)
        return aggregates.performance_by_difficulty(attempts, await self._questions_for(attempts))

    async def progress_over_time(self, user_id: int, days: int = 30) -> list[ProgressPoint]:
        return aggregates.progress_over_time(await self._user_attempts(user_id), days=days)

    async def weekly_activity(self, user_id: int) -> list[DayActivity]:
        docs = await self.activity.find({"user_id": user_id}).to_list(length=_MAX_DOCS)
        return aggregates.weekly_activity(ActivityLogEntry.model_validate(d) for d in docs)

    async def refresh_user_stats(self, user_id: int) -> UserStats:
        attempts = await self._user_attempts(user_id)
        stats = aggregates.compute_user_stats(
            user_id, attempts, await self._questions_for(attempts), await self.list_specialties()
        )
        return await self.update_user_stats(stats)
