from __future__ import annotations

import os
from typing import Any

from medaieval.llm.openai import ChatCompletionsAdapter
from medaieval.models import ScoreScale


class MistralAdapter(ChatCompletionsAdapter):
    """Mistral La Plateforme client.

    Mistral's chat endpoint is OpenAI-compatible and honours
    ``response_format: json_object``.
    Default base URL: https://api.mistral.ai
    """

    name = "mistral"
    score_scale = ScoreScale.ten_point
    prompt_family = "detailed"
    api_key_env = "MISTRAL_API_KEY"
    completions_path = "/v1/chat/completions"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = "mistral-large-latest",
        temperature: float = 0.7,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url or os.getenv("MISTRAL_BASE_URL") or "https://api.mistral.ai",
            model=model,
            temperature=temperature,
            **kwargs,
        )
