from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class LLMMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class LLMRequest(BaseModel):
    messages: list[LLMMessage]
    provider: str
    model: str

    temperature: float = 0.2
    max_output_tokens: int = 4000
    json_mode: bool = True

    # Which gateway operation produced the prompt, plus its parameters
    metadata: dict[str, Any] = Field(default_factory=dict)


class LLMResponse(BaseModel):
    text: str
    raw: Optional[dict[str, Any]] = None

    # Optional usage info (provider-dependent)
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None
