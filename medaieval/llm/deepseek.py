from __future__ import annotations

import os
from typing import Any

from medaieval.llm.openai import ChatCompletionsAdapter
from medaieval.models import ScoreScale


class DeepSeekAdapter(ChatCompletionsAdapter):
    """DeepSeek client.

    Uses the shorter prompt family and scores answers as a percentage
    (0-100); the model answer it returns may contain HTML.
    """

    name = "deepseek"
    score_scale = ScoreScale.percentage
    prompt_family = "compact"
    api_key_env = "DEEPSEEK_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = "deepseek-chat",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url or os.getenv("DEEPSEEK_BASE_URL") or "https://api.deepseek.com",
            model=model,
            **kwargs,
        )
