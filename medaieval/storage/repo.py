from __future__ import annotations

from abc import ABC, abstractmethod

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


class QuizRepository(ABC):
    # Questions and specialties

    @abstractmethod
    async def create_question(self, question: StoredQuestion) -> StoredQuestion:
        raise NotImplementedError

    @abstractmethod
    async def get_question(self, question_id: int) -> StoredQuestion:
        raise NotImplementedError

    @abstractmethod
    async def list_specialties(self) -> list[Specialty]:
        raise NotImplementedError

    @abstractmethod
    async def get_specialty_by_name(self, name: str) -> Specialty | None:
        raise NotImplementedError

    @abstractmethod
    async def create_specialty(self, specialty: Specialty) -> Specialty:
        raise NotImplementedError

    # Answers, attempts and activity

    @abstractmethod
    async def save_answer(self, answer: StoredAnswer) -> StoredAnswer:
        raise NotImplementedError

    @abstractmethod
    async def get_answer_for_question(self, question_id: int, user_id: int) -> StoredAnswer:
        raise NotImplementedError

    @abstractmethod
    async def save_attempt(self, attempt: Attempt) -> Attempt:
        raise NotImplementedError

    @abstractmethod
    async def log_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        raise NotImplementedError

    @abstractmethod
    async def recent_activity(self, user_id: int, limit: int = 10) -> list[ActivityLogEntry]:
        raise NotImplementedError

    # User stats

    @abstractmethod
    async def get_user_stats(self, user_id: int) -> UserStats | None:
        raise NotImplementedError

    @abstractmethod
    async def update_user_stats(self, stats: UserStats) -> UserStats:
        raise NotImplementedError

    @abstractmethod
    async def list_resources(self, resource_type: ResourceType) -> list[Resource]:
        raise NotImplementedError

    # Aggregate reads

    @abstractmethod
    async def performance_by_specialty(self, user_id: int) -> list[SpecialtyPerformance]:
        raise NotImplementedError

    @abstractmethod
    async def performance_by_difficulty(self, user_id: int) -> list[DifficultyPerformance]:
        raise NotImplementedError

    @abstractmethod
    async def progress_over_time(self, user_id: int, days: int = 30) -> list[ProgressPoint]:
        raise NotImplementedError

    @abstractmethod
    async def weekly_activity(self, user_id: int) -> list[DayActivity]:
        raise NotImplementedError

    @abstractmethod
    async def refresh_user_stats(self, user_id: int) -> UserStats:
        raise NotImplementedError

    async def seed(self) -> None:
        """Insert reference data (specialties, resources) when the store is empty."""
        return None
