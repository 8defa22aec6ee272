# tests/test_gateway.py
import asyncio
import threading

import pytest

from conftest import evaluation_payload, question_payload
from medaieval.gateway import AIGateway
from medaieval.llm.errors import (
    AllProvidersExhaustedError,
    ConfigurationError,
    EmptyResponseError,
    ProviderTimeoutError,
)
from medaieval.models import Difficulty, ScoreScale, StoredQuestion

QUESTION = StoredQuestion(
    id=7,
    specialty_id=1,
    difficulty="Foundation",
    scenario="A 19-year-old with polyuria and weight loss.",
    question="What is the most likely diagnosis?",
    model_answer="Type 1 diabetes mellitus.",
)


def failing(make_adapter, name):
    return make_adapter(name, ConfigurationError(name, f"{name.upper()}_API_KEY environment variable is missing"))


def test_falls_back_to_next_adapter(make_adapter):
    a = failing(make_adapter, "A")
    b = make_adapter("B", question_payload("Cardiology", "Foundation", 3))
    gateway = AIGateway([a, b])

    result = asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 3))

    assert result.provider == "B"
    assert len(result.value) == 3
    assert all(q.difficulty == Difficulty.foundation for q in result.value)
    assert all(q.specialty == "Cardiology" for q in result.value)
    assert gateway.get_current_provider() == "B"
    assert [(o.provider, o.succeeded, o.error) for o in result.attempts] == [
        ("A", False, "ConfigurationError"),
        ("B", True, None),
    ]


def test_exhaustion_raises_and_clears_current_provider(make_adapter):
    ok = make_adapter("B", question_payload("Cardiology", "Foundation", 1))
    gateway = AIGateway([ok])
    asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))
    assert gateway.get_current_provider() == "B"

    ok.reply = "no structure here at all"
    with pytest.raises(AllProvidersExhaustedError) as exc:
        asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))

    assert gateway.get_current_provider() is None
    assert exc.value.message == "All AI providers failed. Please check your API credentials."
    assert [o.error for o in exc.value.attempts] == ["MalformedResponseError"]


def test_all_failing_adapters_exhaust(make_adapter):
    gateway = AIGateway([failing(make_adapter, "A"), make_adapter("B", "")])
    with pytest.raises(AllProvidersExhaustedError) as exc:
        asyncio.run(gateway.evaluate_answer(QUESTION, "DKA"))
    assert [o.provider for o in exc.value.attempts] == ["A", "B"]
    assert gateway.get_current_provider() is None
    assert gateway.failed_providers() == ["A", "B"]


def test_failed_adapter_is_sticky_until_reset(make_adapter):
    a = failing(make_adapter, "A")
    b = make_adapter("B", question_payload("Cardiology", "Foundation", 1))
    gateway = AIGateway([a, b])

    asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))
    second = asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))

    assert a.calls == 1
    assert b.calls == 2
    assert [o.provider for o in second.attempts] == ["B"]
    assert gateway.failed_providers() == ["A"]

    gateway.reset_providers()
    assert gateway.failed_providers() == []
    assert gateway.get_current_provider() is None

    asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))
    assert a.calls == 2


def test_stickiness_spans_operations(make_adapter):
    a = failing(make_adapter, "A")
    b = make_adapter(
        "B",
        lambda req: evaluation_payload(9)
        if req.metadata["operation"] == "evaluate_answer"
        else question_payload("Cardiology", "Foundation", 1),
    )
    gateway = AIGateway([a, b])

    asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))
    result = asyncio.run(gateway.evaluate_answer(QUESTION, "Type 1 diabetes"))

    assert a.calls == 1
    assert result.provider == "B"
    assert result.value.score == 9


def test_evaluation_reports_serving_provider_scale(make_adapter):
    a = failing(make_adapter, "A")
    b = make_adapter("B", evaluation_payload(82), score_scale=ScoreScale.percentage)
    gateway = AIGateway([a, b])

    result = asyncio.run(gateway.evaluate_answer(QUESTION, "Type 1 diabetes"))

    assert result.value.score == 82
    assert result.value.score_scale == ScoreScale.percentage


def test_slow_adapter_times_out_and_falls_back(make_adapter):
    class SlowAdapter(make_adapter):
        async def complete(self, req):
            self.calls += 1
            await asyncio.sleep(1)
            return await super().complete(req)

    slow = SlowAdapter("slow", question_payload("Cardiology", "Foundation", 1))
    fast = make_adapter("fast", question_payload("Cardiology", "Foundation", 1))
    gateway = AIGateway([slow, fast], timeout_seconds=0.05)

    result = asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))

    assert result.provider == "fast"
    assert result.attempts[0].error == "ProviderTimeoutError"
    assert gateway.failed_providers() == ["slow"]


def test_timeout_counts_as_empty_response():
    assert issubclass(ProviderTimeoutError, EmptyResponseError)


def test_gateway_without_adapters_is_constructible_and_exhausts():
    gateway = AIGateway([])
    assert gateway.provider_order() == []
    with pytest.raises(AllProvidersExhaustedError):
        asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 1))


def test_concurrent_calls_get_their_own_result(make_adapter):
    a = failing(make_adapter, "A")
    b = make_adapter("B", question_payload("Cardiology", "Foundation", 2))
    gateway = AIGateway([a, b])
    results = []

    def worker():
        results.append(asyncio.run(gateway.generate_questions("Cardiology", "Foundation", 2)))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8
    assert {r.provider for r in results} == {"B"}
    assert all(len(r.value) == 2 for r in results)
    assert gateway.failed_providers() == ["A"]
