from __future__ import annotations

from functools import lru_cache

from medaieval.gateway import AIGateway
from medaieval.llm.factory import build_adapters
from medaieval.settings import settings
from medaieval.storage.inmemory import InMemoryQuizRepository
from medaieval.storage.mongo import MongoQuizRepository
from medaieval.storage.repo import QuizRepository


@lru_cache
def get_repo() -> QuizRepository:
    backend = (settings.storage_backend or "inmemory").lower()
    if backend == "mongo":
        return MongoQuizRepository(settings.mongodb_uri, settings.mongodb_db)
    return InMemoryQuizRepository()


@lru_cache
def get_gateway() -> AIGateway:
    # One gateway per process so sticky failures outlive a single request.
    return AIGateway(build_adapters(settings), timeout_seconds=settings.ai_call_timeout_seconds)
