"""LLM provider abstraction layer."""

from .base import BaseLLMProvider, ProviderConfig, ProviderError, ModelResponse
from .openrouter import OpenRouterProvider
from .requesty import RequestyProvider
from .registry import create_provider

__all__ = [
    "BaseLLMProvider",
    "ProviderConfig",
    "ProviderError",
    "ModelResponse",
    "OpenRouterProvider",
    "RequestyProvider",
    "create_provider",
]
