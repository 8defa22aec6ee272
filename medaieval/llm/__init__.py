"""
Provider adapters for the AI gateway.

- ProviderAdapter: shared prompt, normalization and validation flow
- MistralAdapter, OpenAIAdapter, DeepSeekAdapter: HTTP chat-completions backends
- MockAdapter: deterministic offline replies for local development
"""

from .client import ProviderAdapter
from .deepseek import DeepSeekAdapter
from .factory import build_adapters, get_adapter
from .mistral import MistralAdapter
from .mock import MockAdapter
from .openai import OpenAIAdapter

__all__ = [
    "ProviderAdapter",
    "MistralAdapter",
    "OpenAIAdapter",
    "DeepSeekAdapter",
    "MockAdapter",
    "get_adapter",
    "build_adapters",
]
