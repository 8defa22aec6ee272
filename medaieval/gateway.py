"""
AI Gateway: ordered provider fallback with sticky failures.

Adapters are tried strictly one after another in their fixed priority
order. The first adapter that returns a normalized result serves the
call. An adapter that fails in any way is marked as failed and is skipped
by every later call in this process until ``reset_providers`` is invoked.

The failed set is process-wide and guarded by a lock.
Each call also returns its own ``GatewayResult`` naming the provider that
served it, so callers never depend on ``get_current_provider`` under
concurrent load.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Awaitable, Callable, Optional, Sequence, TypeVar, Union

from medaieval.llm.client import ProviderAdapter
from medaieval.llm.errors import AllProvidersExhaustedError, ProviderError, ProviderTimeoutError
from medaieval.llm.prompts import QuestionLike
from medaieval.models import AnswerEvaluation, Difficulty, GatewayResult, GeneratedQuestion, ProviderOutcome
from medaieval.observability import get_tracer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AIGateway:
    def __init__(self, adapters: Sequence[ProviderAdapter], timeout_seconds: float | None = None) -> None:
        self._adapters = list(adapters)
        self._failed: set[str] = set()
        self._current: Optional[str] = None
        self._lock = threading.Lock()
        self.timeout_seconds = timeout_seconds

    async def generate_questions(
        self,
        specialty: str,
        difficulty: Union[str, Difficulty],
        count: int,
        topics: Optional[str] = None,
    ) -> GatewayResult[list[GeneratedQuestion]]:
        return await self._execute_with_fallback(
            "generate_questions",
            lambda adapter: adapter.generate_questions(specialty, difficulty, count, topics),
        )

    async def evaluate_answer(self, question: QuestionLike, user_answer: str) -> GatewayResult[AnswerEvaluation]:
        return await self._execute_with_fallback(
            "evaluate_answer",
            lambda adapter: adapter.evaluate_answer(question, user_answer),
        )

    def get_current_provider(self) -> Optional[str]:
        with self._lock:
            return self._current

    def reset_providers(self) -> None:
        with self._lock:
            self._failed.clear()
            self._current = None
        logger.info("Reset AI providers - will try all providers on next request")

    def failed_providers(self) -> list[str]:
        with self._lock:
            return [a.name for a in self._adapters if a.name in self._failed]

    def provider_order(self) -> list[str]:
        return [a.name for a in self._adapters]

    async def _call_with_deadline(
        self, adapter: ProviderAdapter, call: Callable[[ProviderAdapter], Awaitable[T]]
    ) -> T:
        if not self.timeout_seconds:
            return await call(adapter)
        try:
            return await asyncio.wait_for(call(adapter), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(adapter.name, f"no reply within {self.timeout_seconds:g}s") from e

    async def _execute_with_fallback(
        self, operation: str, call: Callable[[ProviderAdapter], Awaitable[T]]
    ) -> GatewayResult[T]:
        tracer = get_tracer()
        attempts: list[ProviderOutcome] = []

        with self._lock:
            self._current = None

        with tracer.start_as_current_span(f"gateway.{operation}") as span:
            for adapter in self._adapters:
                with self._lock:
                    skip = adapter.name in self._failed
                if skip:
                    logger.warning(f"Skipping previously failed provider: {adapter.name}")
                    continue

                logger.info(f"Attempting to use {adapter.name} provider for {operation}...")
                with tracer.start_as_current_span("gateway.attempt") as attempt_span:
                    attempt_span.set_attribute("ai.provider", adapter.name)
                    try:
                        result = await self._call_with_deadline(adapter, call)
                    except ProviderError as e:
                        attempt_span.set_attribute("ai.outcome", "failed")
                        logger.error(f"Error with {adapter.name} provider: {type(e).__name__}: {e.message}")
                        with self._lock:
                            self._failed.add(adapter.name)
                        attempts.append(
                            ProviderOutcome(
                                provider=adapter.name,
                                succeeded=False,
                                sticky=True,
                                error=type(e).__name__,
                            )
                        )
                        continue
                    attempt_span.set_attribute("ai.outcome", "succeeded")

                with self._lock:
                    self._current = adapter.name
                attempts.append(ProviderOutcome(provider=adapter.name, succeeded=True))
                span.set_attribute("ai.provider", adapter.name)
                logger.info(f"Successfully used {adapter.name} provider")
                return GatewayResult(provider=adapter.name, value=result, attempts=attempts)

            span.set_attribute("ai.outcome", "exhausted")

        raise AllProvidersExhaustedError(attempts)
