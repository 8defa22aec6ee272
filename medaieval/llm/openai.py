from __future__ import annotations

import os
from typing import Any

from medaieval.llm.client import ProviderAdapter
from medaieval.llm.types import LLMRequest, LLMResponse
from medaieval.models import ScoreScale


def _message_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, list):
        # Some backends return content as typed chunks
        return "".join(c.get("text", "") for c in content if isinstance(c, dict))
    return content if isinstance(content, str) else ""


class ChatCompletionsAdapter(ProviderAdapter):
    """Adapter for backends exposing the OpenAI chat-completions surface."""

    api_key_env: str = "OPENAI_API_KEY"
    completions_path: str = "/chat/completions"

    def __init__(self, api_key: str | None = None, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key or os.getenv(self.api_key_env)
        self.base_url = (base_url or "").rstrip("/")

    def build_payload(self, req: LLMRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": req.model,
            "messages": [{"role": m.role, "content": m.content} for m in req.messages],
            "temperature": req.temperature,
            "max_tokens": req.max_output_tokens,
        }
        if req.json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def complete(self, req: LLMRequest) -> LLMResponse:
        api_key = self._require(self.api_key, self.api_key_env)

        url = f"{self.base_url}{self.completions_path}"
        headers = {"Authorization": f"Bearer {api_key}"}
        async with self._http_client() as client:
            r = await client.post(url, json=self.build_payload(req), headers=headers)
            r.raise_for_status()
            data = r.json()

        usage = data.get("usage") if isinstance(data, dict) else None
        if not isinstance(usage, dict):
            usage = {}
        return LLMResponse(
            text=_message_text(data),
            raw=data if isinstance(data, dict) else {"body": data},
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )


class OpenAIAdapter(ChatCompletionsAdapter):
    name = "openai"
    score_scale = ScoreScale.ten_point
    prompt_family = "detailed"
    api_key_env = "OPENAI_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = "gpt-4o",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or "https://api.openai.com/v1",
            model=model,
            **kwargs,
        )
