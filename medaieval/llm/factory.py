from __future__ import annotations

import logging

from medaieval.llm.client import ProviderAdapter
from medaieval.llm.deepseek import DeepSeekAdapter
from medaieval.llm.mistral import MistralAdapter
from medaieval.llm.mock import MockAdapter
from medaieval.llm.openai import OpenAIAdapter
from medaieval.settings import Settings

logger = logging.getLogger(__name__)


def get_adapter(provider: str, settings: Settings) -> ProviderAdapter | None:
    """Build one adapter. Never touches the network or checks credentials."""
    p = (provider or "").strip().lower()
    if p == "mistral":
        return MistralAdapter(
            api_key=settings.mistral_api_key,
            base_url=settings.mistral_base_url,
            model=settings.mistral_model,
            temperature=settings.mistral_temperature,
        )
    if p == "openai":
        return OpenAIAdapter(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
        )
    if p == "deepseek":
        return DeepSeekAdapter(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            model=settings.deepseek_model,
        )
    if p in ("mock", "dev"):
        return MockAdapter()
    return None


def build_adapters(settings: Settings) -> list[ProviderAdapter]:
    adapters: list[ProviderAdapter] = []
    for name in settings.provider_order():
        adapter = get_adapter(name, settings)
        if adapter is None:
            logger.warning(f"Unknown AI provider '{name}' in AI_PROVIDER_ORDER, ignoring")
            continue
        if any(a.name == adapter.name for a in adapters):
            continue
        adapters.append(adapter)
    return adapters
