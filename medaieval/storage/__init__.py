# Quiz persistence: repository interface plus in-memory and MongoDB backends

from .repo import QuizRepository
from .inmemory import InMemoryQuizRepository
from .mongo import MongoQuizRepository

__all__ = ["QuizRepository", "InMemoryQuizRepository", "MongoQuizRepository"]
